"""Tests for the PostgreSQL connection helper."""

from unittest.mock import MagicMock, patch

import psycopg
import pytest

from vaultgate_core.config import settings
from vaultgate_core.infrastructure.postgres import get_db_connection


class TestGetDbConnection:
    def test_connects_with_bounded_timeout(self):
        conn = MagicMock()
        with patch("psycopg.connect", return_value=conn) as connect:
            assert get_db_connection("dbname=audit") is conn

        connect.assert_called_once_with(
            "dbname=audit",
            connect_timeout=settings.POSTGRES_CONNECT_TIMEOUT_SECONDS,
            application_name=settings.SERVICE_NAME,
        )

    def test_defaults_to_configured_dsn(self):
        with patch("psycopg.connect", return_value=MagicMock()) as connect:
            get_db_connection()

        assert connect.call_args[0][0] == settings.POSTGRES_DSN

    def test_connection_failure_propagates(self):
        with patch("psycopg.connect", side_effect=psycopg.OperationalError("timeout expired")):
            with pytest.raises(psycopg.OperationalError):
                get_db_connection("dbname=audit")
