"""
Unit tests for the additive risk scorer.
"""

import pytest

from tests.fakes import BUSINESS_HOURS, NIGHT, make_context
from vaultgate_core.authz.policy import RiskPolicy
from vaultgate_core.authz.risk import (
    HIGH_FREQUENCY,
    HIGH_RISK_OPERATION,
    INCOMPLETE_KYC,
    LARGE_TRANSACTION,
    SUSPICIOUS_IP,
    UNUSUAL_TIME,
    RiskScorer,
    recommend,
)
from vaultgate_core.domain.decisions import Recommendation


@pytest.fixture
def scorer(policy):
    return RiskScorer(policy)


class TestRecommend:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (0, Recommendation.ALLOW),
            (29, Recommendation.ALLOW),
            (30, Recommendation.MONITOR),
            (49, Recommendation.MONITOR),
            (50, Recommendation.CHALLENGE),
            (69, Recommendation.CHALLENGE),
            (70, Recommendation.DENY),
            (150, Recommendation.DENY),
        ],
    )
    def test_thresholds(self, score, expected):
        assert recommend(score, RiskPolicy()) is expected


class TestRiskScorer:
    def test_clean_request_scores_zero(self, scorer, verified_client):
        assessment = scorer.score(make_context(verified_client), BUSINESS_HOURS, 0)

        assert assessment.score == 0
        assert assessment.factors == ()
        assert assessment.recommendation is Recommendation.ALLOW

    def test_large_transfer_by_verified_client(self, scorer, verified_client):
        context = make_context(verified_client, "banking/transactions", "transfer", amount=150_000)

        assessment = scorer.score(context, BUSINESS_HOURS, 0)

        assert assessment.score == 45
        assert assessment.factors == (HIGH_RISK_OPERATION, LARGE_TRANSACTION)
        assert assessment.recommendation is Recommendation.MONITOR

    def test_every_factor_fires(self, scorer, unverified_client):
        context = make_context(
            unverified_client,
            "banking/transactions",
            "transfer",
            amount=250_000,
            origin_address="192.168.1.100",
        )

        assessment = scorer.score(context, NIGHT, 51)

        assert assessment.factors == (
            HIGH_FREQUENCY,
            HIGH_RISK_OPERATION,
            LARGE_TRANSACTION,
            UNUSUAL_TIME,
            SUSPICIOUS_IP,
            INCOMPLETE_KYC,
        )
        assert assessment.score == 30 + 20 + 25 + 15 + 40 + 20
        assert assessment.recommendation is Recommendation.DENY

    def test_frequency_threshold_is_strict(self, scorer, verified_client):
        context = make_context(verified_client)

        assert HIGH_FREQUENCY not in scorer.score(context, BUSINESS_HOURS, 50).factors
        assert HIGH_FREQUENCY in scorer.score(context, BUSINESS_HOURS, 51).factors

    def test_amount_threshold_is_strict(self, scorer, verified_client):
        at_limit = make_context(verified_client, amount=100_000)
        above = make_context(verified_client, amount=100_000.01)

        assert LARGE_TRANSACTION not in scorer.score(at_limit, BUSINESS_HOURS, 0).factors
        assert LARGE_TRANSACTION in scorer.score(above, BUSINESS_HOURS, 0).factors

    def test_unusual_time_applies_to_every_role(self, scorer, compliance_officer):
        assert UNUSUAL_TIME in scorer.score(make_context(compliance_officer), NIGHT, 0).factors

    def test_adding_a_factor_never_lowers_the_score(self, scorer, verified_client, unverified_client):
        base = scorer.score(make_context(verified_client, action="transfer"), BUSINESS_HOURS, 0)
        more = scorer.score(make_context(unverified_client, action="transfer"), BUSINESS_HOURS, 0)

        assert more.score > base.score
