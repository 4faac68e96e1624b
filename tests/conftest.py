"""Pytest configuration and fixtures."""

import asyncio
import logging
import socket

import pytest
import structlog

from pagefetch.config import Settings
from pagefetch.orchestrator import FetchOrchestrator
from pagefetch.renderers.static import parse_summary
from pagefetch.safety import HostSafetyChecker

SAMPLE_HTML = (
    "<html><head><title>A</title>"
    '<meta name="description" content="B"></head>'
    "<body><h1>C</h1><h1>second</h1></body></html>"
)

PUBLIC_IP = "93.184.216.34"


class FakePage:
    """In-memory page that can fail or stall on navigation."""

    def __init__(self, html: str = SAMPLE_HTML, failures: int = 0, delay_s: float = 0.0):
        self.html = html
        self.failures_left = failures
        self.delay_s = delay_s
        self.navigations: list[tuple[str, str]] = []
        self.timeouts: tuple[float, float] | None = None
        self.extract_error: Exception | None = None

    def set_timeouts(self, navigation_s: float, action_s: float) -> None:
        self.timeouts = (navigation_s, action_s)

    async def navigate(self, url: str, wait_until: str) -> None:
        self.navigations.append((url, wait_until))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.failures_left:
            self.failures_left -= 1
            raise RuntimeError("net::ERR_CONNECTION_RESET")

    async def extract_structured(self):
        if self.extract_error:
            raise self.extract_error
        return parse_summary(self.html)

    async def extract_full_content(self) -> str:
        if self.extract_error:
            raise self.extract_error
        return self.html


class FakeEngine:
    """Counts close calls; optionally slow or failing to close."""

    def __init__(self, page: FakePage, close_delay_s: float = 0.0):
        self.page = page
        self.close_delay_s = close_delay_s
        self.close_calls = 0
        self.closed = False
        self.user_agents: list[str] = []
        self.new_page_error: Exception | None = None
        self.close_error: Exception | None = None

    async def new_page(self, user_agent: str) -> FakePage:
        if self.new_page_error:
            raise self.new_page_error
        self.user_agents.append(user_agent)
        return self.page

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_delay_s:
            await asyncio.sleep(self.close_delay_s)
        if self.close_error:
            raise self.close_error
        self.closed = True


class FakeRenderer:
    name = "fake"

    def __init__(
        self,
        page: FakePage | None = None,
        launch_error: Exception | None = None,
        close_delay_s: float = 0.0,
    ):
        self.page = page or FakePage()
        self.launch_error = launch_error
        self.close_delay_s = close_delay_s
        self.engines: list[FakeEngine] = []
        self.new_page_error: Exception | None = None
        self.close_error: Exception | None = None

    async def launch(self) -> FakeEngine:
        if self.launch_error:
            raise self.launch_error
        engine = FakeEngine(self.page, close_delay_s=self.close_delay_s)
        engine.new_page_error = self.new_page_error
        engine.close_error = self.close_error
        self.engines.append(engine)
        return engine

    @property
    def engine(self) -> FakeEngine:
        assert len(self.engines) == 1, "expected exactly one engine launch"
        return self.engines[0]


class StaticResolver:
    """Resolver backed by a dict; unknown names fail like NXDOMAIN."""

    def __init__(self, records: dict[str, list[str]] | None = None):
        self.records = records or {}
        self.calls: list[str] = []

    async def __call__(self, hostname: str) -> list[str]:
        self.calls.append(hostname)
        if hostname not in self.records:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        return self.records[hostname]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config files and PAGEFETCH_ variables out of tests."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("PAGEFETCH_CONFIG", raising=False)
    yield
    # CLI tests bind log output to CliRunner streams that are closed afterwards
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in [h for h in root.handlers if type(h) is logging.StreamHandler]:
        root.removeHandler(handler)


@pytest.fixture
def settings() -> Settings:
    """Provide fast settings for tests."""
    return Settings(budget_s=1.0, safety_margin_s=0.2, retry_delay_s=0.0)


@pytest.fixture
def resolver() -> StaticResolver:
    return StaticResolver(
        {
            "example.com": [PUBLIC_IP, "2606:2800:220:1:248:1893:25c8:1946"],
            "mixed.example": [PUBLIC_IP, "10.0.0.5"],
            "empty.example": [],
        }
    )


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def orchestrator(renderer: FakeRenderer, resolver: StaticResolver, settings: Settings):
    """Orchestrator wired to the fake renderer and static resolver."""
    return FetchOrchestrator(
        renderer=renderer,
        settings=settings,
        checker=HostSafetyChecker(resolver=resolver),
    )
