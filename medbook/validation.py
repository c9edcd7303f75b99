"""URL safety checks applied before any network access."""

from __future__ import annotations

import ipaddress
from typing import Iterable
from urllib.parse import urlparse

from .config import MEDIUM_DOMAINS
from .models import ErrorCode, ScraperError

_LOCAL_HOSTNAMES = {"localhost", "localhost.localdomain"}
_BLOCKED_NETWORKS = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "127.0.0.0/8",
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "169.254.0.0/16",
        "0.0.0.0/8",
    )
)


def is_private_host(hostname: str) -> bool:
    """Return True for loopback, private and link-local host literals."""
    host = hostname.lower().strip("[]")
    if host in _LOCAL_HOSTNAMES:
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    if address.version == 6:
        return address.is_loopback
    return any(address in network for network in _BLOCKED_NETWORKS)


def is_allowed_domain(hostname: str, domains: Iterable[str] = MEDIUM_DOMAINS) -> bool:
    """Check the host against the allow-list, including subdomains."""
    host = hostname.lower()
    return any(host == domain or host.endswith(f".{domain}") for domain in domains)


def validate_url(url: str, domains: Iterable[str] = MEDIUM_DOMAINS) -> str:
    """Validate an article URL and return its lower-cased hostname.

    Raises ``ScraperError(INVALID_URL)`` for malformed URLs, private or
    internal hosts, non-HTTPS schemes and hosts outside the allow-list.
    """
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except (AttributeError, ValueError) as exc:
        raise ScraperError(ErrorCode.INVALID_URL) from exc
    if not hostname:
        raise ScraperError(ErrorCode.INVALID_URL)

    if is_private_host(hostname):
        raise ScraperError(
            ErrorCode.INVALID_URL, "Private or internal URLs are not allowed"
        )
    if parsed.scheme != "https":
        raise ScraperError(ErrorCode.INVALID_URL, "Only HTTPS URLs are allowed")
    if not is_allowed_domain(hostname, domains):
        raise ScraperError(ErrorCode.INVALID_URL)
    return hostname
