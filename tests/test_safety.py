"""Tests for the host safety checker."""

import asyncio

import pytest

from pagefetch.safety import HostSafetyChecker, is_private_address, is_valid_http_url

from conftest import PUBLIC_IP, StaticResolver


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com",
        "http://example.com/path?q=1",
        "https://example.com:8443/",
        "http://93.184.216.34/",
        "http://[2606:2800:220:1::1]/",
        "http://[fe80::1%25eth0]/",
    ],
)
def test_valid_http_urls(url: str):
    assert is_valid_http_url(url)


@pytest.mark.parametrize(
    "url",
    [
        "",
        "not a url",
        "not-a-url",
        "ftp://example.com",
        "javascript:alert(1)",
        "file:///etc/passwd",
        "http://",
        "https://example.com:99999/",
        "http://[::1",
        "https://exa mple.com/",
        "http://exa<mple.com/",
        "http://exa%00mple.com/",
        "http://exa^mple.com/",
        "http://exa\x01mple.com/",
        "http://exa|mple.com/",
        "http://[not:an:ipv6]/",
    ],
)
def test_invalid_http_urls(url: str):
    assert not is_valid_http_url(url)


@pytest.mark.parametrize(
    "address",
    [
        "10.1.2.3",
        "127.0.0.1",
        "169.254.169.254",
        "192.168.1.1",
        "172.16.0.1",
        "172.31.255.255",
        "0.0.0.0",
        "::1",
        "fc00::1",
        "fd12:3456::1",
        "fe80::1",
        "fe80::1%eth0",
        "::ffff:127.0.0.1",
        "garbage",
    ],
)
def test_private_addresses(address: str):
    assert is_private_address(address)


@pytest.mark.parametrize(
    "address",
    ["8.8.8.8", PUBLIC_IP, "172.32.0.1", "172.15.255.255", "2606:4700::1111", "::ffff:8.8.8.8"],
)
def test_public_addresses(address: str):
    assert not is_private_address(address)


def test_public_host_allowed(resolver: StaticResolver):
    checker = HostSafetyChecker(resolver=resolver)

    verdict = asyncio.run(checker.check("https://example.com/page"))

    assert verdict.allowed
    assert verdict.hostname == "example.com"
    assert verdict.addresses[0] == PUBLIC_IP
    assert resolver.calls == ["example.com"]


@pytest.mark.parametrize("url", ["http://localhost/", "http://LOCALHOST:3000/", "http://localhost./"])
def test_localhost_rejected_without_resolution(url: str, resolver: StaticResolver):
    checker = HostSafetyChecker(resolver=resolver)

    verdict = asyncio.run(checker.check(url))

    assert not verdict
    assert verdict.reason == "localhost"
    assert resolver.calls == []


def test_any_private_address_rejects_host(resolver: StaticResolver):
    """A public address alongside a private one does not make the host safe."""
    checker = HostSafetyChecker(resolver=resolver)

    verdict = asyncio.run(checker.check("https://mixed.example/"))

    assert not verdict
    assert verdict.reason == "private_address"
    assert "10.0.0.5" in verdict.addresses


def test_dns_failure_fails_closed(resolver: StaticResolver):
    checker = HostSafetyChecker(resolver=resolver)

    verdict = asyncio.run(checker.check("https://does-not-exist.invalid/"))

    assert not verdict
    assert verdict.reason == "dns_error"


def test_empty_resolution_rejected(resolver: StaticResolver):
    checker = HostSafetyChecker(resolver=resolver)

    verdict = asyncio.run(checker.check("https://empty.example/"))

    assert not verdict
    assert verdict.reason == "no_addresses"


def test_resolver_timeout_rejected():
    async def slow_resolver(hostname: str) -> list[str]:
        await asyncio.sleep(5)
        return [PUBLIC_IP]

    checker = HostSafetyChecker(resolver=slow_resolver, timeout_s=0.01)

    verdict = asyncio.run(checker.check("https://slow.example/"))

    assert not verdict
    assert verdict.reason == "dns_timeout"


def test_invalid_url_rejected_without_resolution(resolver: StaticResolver):
    checker = HostSafetyChecker(resolver=resolver)

    verdict = asyncio.run(checker.check("ftp://example.com/"))

    assert not verdict
    assert verdict.reason == "invalid_url"
    assert resolver.calls == []


def test_rejection_is_logged(resolver: StaticResolver):
    from unittest.mock import Mock

    mock_logger = Mock()
    checker = HostSafetyChecker(resolver=resolver, logger=mock_logger)

    asyncio.run(checker.check("http://localhost/"))

    mock_logger.warning.assert_called_once_with(
        "host_rejected", reason="localhost", hostname="localhost"
    )


@pytest.mark.parametrize(
    "url",
    ["http://169.254.169.254/latest/meta-data/", "http://127.0.0.1:8080/", "http://10.0.0.1/"],
)
def test_system_resolver_rejects_private_literals(url: str):
    """Numeric hosts resolve to themselves without a DNS query."""
    checker = HostSafetyChecker()

    verdict = asyncio.run(checker.check(url))

    assert not verdict
    assert verdict.reason == "private_address"


def test_system_resolver_allows_public_literal():
    checker = HostSafetyChecker()

    verdict = asyncio.run(checker.check(f"http://{PUBLIC_IP}/"))

    assert verdict.allowed
    assert verdict.addresses == (PUBLIC_IP,)
