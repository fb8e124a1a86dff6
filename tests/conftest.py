"""
Shared pytest configuration and fixtures for bookmarks extractor tests.

Provides in-memory stand-ins for the browser-facing ports so the session
controller, the extraction pipeline and the task can be exercised without
launching Playwright.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bookmarks_extractor.core.client import PATHNAMES, Client
from bookmarks_extractor.core.domain import BrowserName, Credentials, TaskOptions, Tweet, TweetSet
from bookmarks_extractor.core.events import ClientEvent, ProgressEmitter
from bookmarks_extractor.core.exceptions import BrowserSessionError

VALID_CODE = "424242"


def _has_path(current: Optional[str], pathname: str) -> bool:
    if current is None:
        return False
    if pathname == "/":
        return current == "/"
    return current == pathname or current.startswith(pathname.rstrip("/") + "/")


class FakeLoginPageManager:
    """
    Page manager that moves between login-flow pathnames without a browser.

    Every page action is appended to ``calls`` so tests can assert which
    actions the controller performed.
    """

    def __init__(
        self,
        login_destination: str = PATHNAMES.bookmarks,
        code_destination: str = PATHNAMES.bookmarks,
        logout_destination: str = PATHNAMES.logged_out,
        bookmarks_reachable: bool = True,
        init_error: Optional[Exception] = None,
        login_error: Optional[Exception] = None,
        code_error: Optional[Exception] = None,
        logout_error: Optional[Exception] = None,
        valid_code: str = VALID_CODE
    ):
        self.login_destination = login_destination
        self.code_destination = code_destination
        self.logout_destination = logout_destination
        self.bookmarks_reachable = bookmarks_reachable
        self.init_error = init_error
        self.login_error = login_error
        self.code_error = code_error
        self.logout_error = logout_error
        self.valid_code = valid_code

        self.path: Optional[str] = None
        self.browser_type: Optional[BrowserName] = None
        self.calls: List[str] = []
        self._page = None

    @property
    def page(self):
        return self._page

    def set_browser_type(self, browser: BrowserName) -> None:
        self.browser_type = browser

    async def init(self) -> None:
        self.calls.append("init")
        if self.init_error is not None:
            raise self.init_error
        self._page = Mock(name="page")
        self.path = "/"

    def current_url_has_path(self, pathname: str) -> bool:
        return _has_path(self.path, pathname)

    async def log_in(self, credentials: Credentials) -> None:
        self.calls.append("log_in")
        if self.login_error is not None:
            raise self.login_error
        self.path = self.login_destination

    async def _submit_code(self, name: str, code: str) -> None:
        self.calls.append(name)
        if self.code_error is not None:
            raise self.code_error
        if code == self.valid_code:
            self.path = self.code_destination

    async def enter_confirmation_code(self, code: str) -> None:
        await self._submit_code("enter_confirmation_code", code)

    async def enter_two_factor_code(self, code: str) -> None:
        await self._submit_code("enter_two_factor_code", code)

    async def refresh_with_bookmarks_redirect(self) -> None:
        self.calls.append("refresh_with_bookmarks_redirect")
        self.path = PATHNAMES.login

    async def go_to_bookmarks(self) -> None:
        self.calls.append("go_to_bookmarks")
        if self.bookmarks_reachable:
            self.path = PATHNAMES.bookmarks

    async def log_out(self) -> None:
        self.calls.append("log_out")
        if self.logout_error is not None:
            raise self.logout_error
        self.path = self.logout_destination

    async def tear_down(self) -> None:
        self.calls.append("tear_down")
        self._page = None
        self.path = None


class FakeTweetSource:
    """Tweet source replaying predefined batches, optionally failing at the end"""

    def __init__(self, batches: List[TweetSet], error: Optional[Exception] = None):
        self.batches = batches
        self.error = error
        self.pulled = 0
        self.closed = False
        self.page = None

    async def extract(self, page):
        self.page = page
        try:
            for batch in self.batches:
                self.pulled += 1
                yield batch
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


class FakeBookmarksSession:
    """Bookmarks session reporting the page-manager progress steps"""

    PROGRESS_EVENTS = [
        "page-manager:browser:launch",
        "page-manager:login",
        "page-manager:bookmarks:open",
    ]

    def __init__(self, open_error: Optional[Exception] = None):
        self.open_error = open_error
        self.progress = ProgressEmitter()
        self.page = Mock(name="bookmarks_page")
        self.opened = 0
        self.closed = 0

    async def open(self):
        self.opened += 1
        self.progress.emit_progress_event(self.PROGRESS_EVENTS[0])
        if self.open_error is not None:
            raise self.open_error
        for tag in self.PROGRESS_EVENTS[1:]:
            self.progress.emit_progress_event(tag)
        return self.page

    async def close(self) -> None:
        self.closed += 1


class RecordingExporter:
    """Exporter keeping every list it was asked to write"""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.exports: List[List[Dict[str, Any]]] = []

    async def export(self, tweets: List[Dict[str, Any]]) -> None:
        if self.error is not None:
            raise self.error
        self.exports.append(tweets)


def make_tweets(*ids) -> TweetSet:
    """TweetSet of minimal tweets with the given ids"""
    return TweetSet(Tweet(id=str(tweet_id), text=f"tweet {tweet_id}") for tweet_id in ids)


# Domain Model Fixtures
@pytest.fixture
def credentials():
    """Standard credentials for testing."""
    return Credentials(username="reader", password="s3cret", email="reader@example.com")


@pytest.fixture
def task_options(credentials):
    """Unbounded task options without a file export."""
    return TaskOptions(credentials=credentials)


@pytest.fixture
def tweets_factory():
    """Factory building tweet sets from ids."""
    return make_tweets


# Fake Adapter Fixtures
@pytest.fixture
def page_manager_factory():
    """Factory for fake login page managers."""
    return FakeLoginPageManager


@pytest.fixture
def fake_page_manager():
    """Fake page manager whose login lands on the bookmarks page."""
    return FakeLoginPageManager()


@pytest.fixture
def client(fake_page_manager):
    """Session controller driving the fake page manager."""
    return Client(fake_page_manager)


@pytest.fixture
def tweet_source_factory():
    """Factory for fake tweet sources."""
    return FakeTweetSource


@pytest.fixture
def session_factory():
    """Factory for fake bookmarks sessions."""
    return FakeBookmarksSession


@pytest.fixture
def exporter_factory():
    """Factory for recording exporters."""
    return RecordingExporter


@pytest.fixture
def valid_code():
    """Code accepted by fake page managers."""
    return VALID_CODE


@pytest.fixture
def browser_error():
    """Error raised by a browser that fails to launch."""
    return BrowserSessionError("Executable doesn't exist")


# Event Recording Fixtures
@pytest.fixture
def client_events():
    """Attach to a client and record (event, args) for every client event."""
    def attach(target: Client) -> List[tuple]:
        recorded: List[tuple] = []
        for event in ClientEvent:
            target.on(event, lambda *args, event=event: recorded.append((event, args)))
        return recorded
    return attach


@pytest.fixture
def progress_recorder():
    """Attach to a progress channel and record its events in order."""
    def attach(channel: ProgressEmitter) -> List[Any]:
        recorded: List[Any] = []
        channel.subscribe_all(recorded.append)
        return recorded
    return attach


# Pytest Configuration Hooks
def pytest_configure(config):
    """Configure pytest with custom settings."""
    markers = [
        "unit: Unit tests (fast, isolated)",
        "integration: Integration tests (slower, multiple components)",
        "architecture: Architecture validation tests",
        "real: Tests requiring a real browser and Twitter account"
    ]

    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Auto-mark tests based on file path
        path = str(item.path)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "architecture" in path:
            item.add_marker(pytest.mark.architecture)

        if "real" in item.name or "live" in item.name:
            item.add_marker(pytest.mark.real)
