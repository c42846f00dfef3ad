"""
Origin address matching for network denylists.
"""

from __future__ import annotations

import ipaddress
from typing import Iterable


class OriginMatcher:
    """Matches an origin address against IPs, CIDR networks or literal strings.

    Entries that do not parse as an IP network are compared as plain
    strings, so non-IP origins such as "unknown" can still be listed.
    """

    def __init__(self, entries: Iterable[str]):
        self._networks: list[ipaddress.IPv4Network | ipaddress.IPv6Network] = []
        self._literals: set[str] = set()
        for entry in entries:
            try:
                self._networks.append(ipaddress.ip_network(entry.strip(), strict=False))
            except ValueError:
                self._literals.add(entry.strip())

    def matches(self, address: str | None) -> bool:
        if not address:
            return False
        # X-Forwarded-For may carry a chain; the first hop is the client
        candidate = address.split(",")[0].strip()
        if candidate in self._literals:
            return True
        try:
            ip = ipaddress.ip_address(candidate)
        except ValueError:
            return False
        return any(ip in network for network in self._networks)
