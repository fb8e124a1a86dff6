"""
Port interfaces for bookmark extraction.

These interfaces define the contracts between the core and the browser,
parsing and output adapters. They allow the core to be tested with fakes
instead of a live browser.
"""

from typing import Any, AsyncIterator, Dict, List, Optional, Protocol

from .domain import BrowserName, Credentials, TweetSet
from .events import ProgressEmitter

# Import playwright types for browser pages
try:
    from playwright.async_api import Page
except ImportError:
    # For environments without playwright installed
    Page = Any


class LoginPageManagerPort(Protocol):
    """Port for the browser driver that performs the raw login-flow page actions"""

    def set_browser_type(self, browser: BrowserName) -> None:
        """Select the browser driver used by the next init()"""
        ...

    async def init(self) -> None:
        """Launch the browser and open a page"""
        ...

    def current_url_has_path(self, pathname: str) -> bool:
        """
        Check the current page location.

        Args:
            pathname: One of the login-flow pathnames

        Returns:
            True if the current URL path starts with the pathname
        """
        ...

    async def log_in(self, credentials: Credentials) -> None:
        """Submit credentials on the login form"""
        ...

    async def enter_confirmation_code(self, code: str) -> None:
        """Submit a challenge (confirmation) code"""
        ...

    async def enter_two_factor_code(self, code: str) -> None:
        """Submit a two-factor authentication code"""
        ...

    async def refresh_with_bookmarks_redirect(self) -> None:
        """Reload the login flow so a successful login lands on the bookmarks page"""
        ...

    async def go_to_bookmarks(self) -> None:
        """Navigate to the bookmarks page"""
        ...

    async def log_out(self) -> None:
        """Drive the logout flow"""
        ...

    async def tear_down(self) -> None:
        """Close the page and browser. Safe to call when never initialized."""
        ...

    @property
    def page(self) -> Optional[Page]:
        ...


class BookmarksSessionPort(Protocol):
    """Port for the component that owns the authenticated session used by a task"""

    PROGRESS_EVENTS: List[str]
    progress: ProgressEmitter

    async def open(self) -> Page:
        """
        Authenticate and open the bookmarks page.

        Returns:
            The bookmarks page

        Raises:
            AuthenticationError: If the session can't reach the logged-in state
        """
        ...

    async def close(self) -> None:
        """Log out silently and release the browser"""
        ...


class TweetSourcePort(Protocol):
    """Port for reading batches of tweets off an opened bookmarks page"""

    def extract(self, page: Page) -> AsyncIterator[TweetSet]:
        """
        Yield successive batches of tweets until the timeline is exhausted.

        Raises:
            ExtractionFailure: If a batch can't be read or parsed
        """
        ...


class ExporterPort(Protocol):
    """Port for export sinks"""

    async def export(self, tweets: List[Dict[str, Any]]) -> None:
        """
        Write an ordered list of plain tweet objects.

        Raises:
            ExportFailure: If the write fails
        """
        ...
