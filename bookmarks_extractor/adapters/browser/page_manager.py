"""
Playwright page manager for the Twitter login flow.

Performs the raw page actions of each login step. It never decides whether a
step succeeded; the session controller inspects the resulting location with
current_url_has_path() and drives the state machine from there.
"""

import logging
import os
from typing import Optional
from urllib.parse import quote, urlparse

from playwright.async_api import (
    Browser, BrowserContext, Page, Playwright,
    TimeoutError as PlaywrightTimeoutError, async_playwright
)

from ...core.client import PATHNAMES
from ...core.domain import BrowserName, Credentials
from ...core.exceptions import BrowserSessionError

logger = logging.getLogger(__name__)


class Selectors:
    """DOM selectors of the login flow"""

    USERNAME = 'input[autocomplete="username"]'
    # Shown instead of the password field after "unusual login activity"
    IDENTIFIER = 'input[data-testid="ocfEnterTextTextInput"]'
    PASSWORD = 'input[name="password"]'
    CHALLENGE_CODE = 'input[name="challenge_response"]'
    TWO_FA_CODE = 'input[data-testid="ocfEnterTextTextInput"], input[name="text"]'
    LOGOUT_CONFIRM = '[data-testid="confirmationSheetConfirm"]'


class PageManager:
    """Owns the Playwright browser and the single page of a session"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        executable_path: Optional[str] = None,
        headless: bool = True,
        timeout_ms: int = 30000
    ):
        """
        Initialize page manager.

        Args:
            base_url: Twitter base URL
            executable_path: Browser binary to launch instead of the bundled one
            headless: Whether to run browser in headless mode
            timeout_ms: Timeout for browser operations in milliseconds
        """
        self.base_url = (base_url or os.getenv('TWITTER_URL', 'https://x.com')).rstrip('/')
        self.executable_path = executable_path
        self.headless = headless
        self.timeout = timeout_ms
        self.browser_type = BrowserName.CHROMIUM

        # Browser state
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def page(self) -> Optional[Page]:
        return self._page

    @property
    def login_url(self) -> str:
        redirect = quote(PATHNAMES.bookmarks, safe='')
        return f"{self.base_url}{PATHNAMES.login}?redirect_after_login={redirect}"

    def set_browser_type(self, browser: BrowserName) -> None:
        self.browser_type = browser

    async def init(self) -> None:
        """
        Launch the browser and open the page.

        Raises:
            BrowserSessionError: If browser creation fails
        """
        try:
            if not self._playwright:
                self._playwright = await async_playwright().start()

            if not self._browser:
                launcher = getattr(self._playwright, self.browser_type.value)
                self._browser = await launcher.launch(
                    headless=self.headless,
                    executable_path=self.executable_path
                )

            if not self._context:
                self._context = await self._browser.new_context(
                    viewport={'width': 1280, 'height': 900}
                )

            if not self._page:
                self._page = await self._context.new_page()
                self._page.set_default_timeout(self.timeout)
                self._page.set_default_navigation_timeout(self.timeout)

        except Exception as e:
            raise BrowserSessionError(f"Failed to create browser session: {str(e)}")

    def current_url_has_path(self, pathname: str) -> bool:
        """Check whether the current location is at (or below) a pathname"""
        if not self._page:
            return False

        path = urlparse(self._page.url).path or '/'
        if pathname == '/':
            return path == '/'
        return path == pathname or path.startswith(pathname.rstrip('/') + '/')

    async def _wait_for_login_step(self) -> None:
        """Wait until the page settles on one of the login-flow destinations"""
        destinations = (PATHNAMES.bookmarks, PATHNAMES.challenge_code, PATHNAMES.two_fa_code)

        def reached(url: str) -> bool:
            path = urlparse(url).path
            return any(path.startswith(destination) for destination in destinations)

        try:
            await self._page.wait_for_url(reached, timeout=self.timeout)
        except PlaywrightTimeoutError:
            logger.debug("Login step did not navigate, still at %s", self._page.url)

    async def _fill_and_submit(self, selector: str, value: str) -> bool:
        try:
            field = await self._page.wait_for_selector(selector, timeout=self.timeout)
        except PlaywrightTimeoutError:
            logger.debug("Field %s never appeared", selector)
            return False

        await field.fill(value)
        await field.press('Enter')
        return True

    async def log_in(self, credentials: Credentials) -> None:
        await self._page.goto(self.login_url)

        if not await self._fill_and_submit(Selectors.USERNAME, credentials.username):
            return

        # Twitter sometimes asks for the e-mail or phone before the password
        identifier = await self._page.query_selector(Selectors.IDENTIFIER)
        if identifier and credentials.email:
            await identifier.fill(credentials.email)
            await identifier.press('Enter')

        if not await self._fill_and_submit(Selectors.PASSWORD, credentials.password):
            return

        await self._wait_for_login_step()

    async def _wait_to_leave(self, pathname: str) -> None:
        try:
            await self._page.wait_for_url(
                lambda url: not urlparse(url).path.startswith(pathname),
                timeout=self.timeout
            )
        except PlaywrightTimeoutError:
            logger.debug("Code rejected, still at %s", self._page.url)

    async def enter_confirmation_code(self, code: str) -> None:
        if await self._fill_and_submit(Selectors.CHALLENGE_CODE, code):
            await self._wait_to_leave(PATHNAMES.challenge_code)

    async def enter_two_factor_code(self, code: str) -> None:
        if await self._fill_and_submit(Selectors.TWO_FA_CODE, code):
            await self._wait_to_leave(PATHNAMES.two_fa_code)

    async def refresh_with_bookmarks_redirect(self) -> None:
        await self._page.goto(self.login_url)
        await self._page.wait_for_load_state('domcontentloaded')

    async def go_to_bookmarks(self) -> None:
        await self._page.goto(f"{self.base_url}{PATHNAMES.bookmarks}")
        await self._page.wait_for_load_state('domcontentloaded')

    async def log_out(self) -> None:
        await self._page.goto(f"{self.base_url}/logout")
        if not await self._confirm_logout():
            return

        try:
            await self._page.wait_for_url(
                lambda url: urlparse(url).path in ('', PATHNAMES.logged_out),
                timeout=self.timeout
            )
        except PlaywrightTimeoutError:
            logger.debug("Logout did not redirect, still at %s", self._page.url)

    async def _confirm_logout(self) -> bool:
        try:
            await self._page.click(Selectors.LOGOUT_CONFIRM, timeout=self.timeout)
            return True
        except PlaywrightTimeoutError:
            logger.debug("Logout confirmation never appeared")
            return False

    async def tear_down(self) -> None:
        """Close page, context and browser. Safe to call more than once."""
        try:
            if self._page and not self._page.is_closed():
                await self._page.close()

            if self._context:
                await self._context.close()

            if self._browser:
                await self._browser.close()

            if self._playwright:
                await self._playwright.stop()

        except Exception as e:
            logger.debug("Ignoring browser cleanup error: %s", e)
        finally:
            self._page = None
            self._context = None
            self._browser = None
            self._playwright = None
