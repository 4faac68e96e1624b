"""SSRF guard: URL syntax checks and resolved-address classification."""

import asyncio
import ipaddress
import socket
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from urllib.parse import urlparse

from structlog.typing import FilteringBoundLogger

from pagefetch.core.logging import get_logger

Resolver = Callable[[str], Awaitable[Sequence[str]]]

ALLOWED_SCHEMES = ("http", "https")

# Characters that may not appear in a registered host name
FORBIDDEN_HOST_CHARS = frozenset(" \t\n\r#%/:<>?@[\\]^|\"`{}")

PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(net)
    for net in (
        "0.0.0.0/8",
        "10.0.0.0/8",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "::1/128",
        "fc00::/7",
        "fe80::/10",
    )
)


def _is_valid_hostname(hostname: str) -> bool:
    if ":" in hostname:
        # Bracketed IPv6 literal; "%" is only legal as the zone id separator
        try:
            ipaddress.IPv6Address(hostname.split("%", 1)[0])
        except ValueError:
            return False
        return True
    return not any(
        ch in FORBIDDEN_HOST_CHARS or ord(ch) < 0x20 or ord(ch) == 0x7F
        for ch in hostname
    )


def is_valid_http_url(url: str) -> bool:
    """Return True for an absolute http(s) URL with a well-formed host."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
        # Raises ValueError on a malformed port
        parsed.port
    except ValueError:
        return False
    if parsed.scheme not in ALLOWED_SCHEMES or not parsed.hostname:
        return False
    return _is_valid_hostname(parsed.hostname)


def is_private_address(address: str) -> bool:
    """Classify an IPv4/IPv6 address as private, loopback or link-local.

    Unparseable addresses count as private.
    """
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return True
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return any(ip in net for net in PRIVATE_NETWORKS if net.version == ip.version)


async def resolve_host(hostname: str) -> list[str]:
    """Resolve a hostname to every address the system resolver returns.

    Addresses are de-duplicated, keeping resolver order.
    """
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    addresses: list[str] = []
    for _family, _type, _proto, _canonname, sockaddr in infos:
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses


@dataclass(frozen=True)
class SafetyVerdict:
    """Outcome of a host safety check."""

    allowed: bool
    reason: str
    hostname: str | None = None
    addresses: tuple[str, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return self.allowed


class HostSafetyChecker:
    """Reject URLs whose host resolves to a non-public address.

    Every address the resolver returns is checked, and resolution errors
    reject the URL.
    """

    def __init__(
        self,
        resolver: Resolver | None = None,
        timeout_s: float = 5.0,
        logger: FilteringBoundLogger | None = None,
    ):
        """
        Initialize host safety checker.

        Args:
            resolver: Async callable mapping a hostname to its addresses
            timeout_s: Resolver timeout in seconds
            logger: Optional structlog logger
        """
        self.resolver = resolver or resolve_host
        self.timeout_s = timeout_s
        self.logger = logger or get_logger()

    def _reject(self, reason: str, **fields) -> SafetyVerdict:
        self.logger.warning("host_rejected", reason=reason, **fields)
        return SafetyVerdict(allowed=False, reason=reason, **fields)

    async def check(self, url: str) -> SafetyVerdict:
        """
        Check whether a URL is safe to contact.

        Args:
            url: The URL to check

        Returns:
            An allowed verdict with the resolved addresses, or a rejection
            with the reason
        """
        if not is_valid_http_url(url):
            return self._reject("invalid_url")

        hostname = urlparse(url).hostname or ""
        if hostname.rstrip(".") == "localhost":
            return self._reject("localhost", hostname=hostname)

        try:
            addresses = tuple(
                await asyncio.wait_for(self.resolver(hostname), timeout=self.timeout_s)
            )
        except asyncio.TimeoutError:
            return self._reject("dns_timeout", hostname=hostname)
        except (OSError, UnicodeError) as e:
            # gaierror is an OSError; IDNA failures raise UnicodeError
            self.logger.debug("dns_error", hostname=hostname, error=str(e))
            return self._reject("dns_error", hostname=hostname)

        if not addresses:
            return self._reject("no_addresses", hostname=hostname)

        private = [a for a in addresses if not a or is_private_address(a)]
        if private:
            return self._reject(
                "private_address", hostname=hostname, addresses=addresses
            )

        self.logger.debug("host_allowed", hostname=hostname, addresses=addresses)
        return SafetyVerdict(
            allowed=True, reason="public", hostname=hostname, addresses=addresses
        )
