"""
Bookmarks page manager

Owns the session controller of a run and turns its login flow into a single
open() call that returns the authenticated bookmarks page. Client outcomes
are republished on a progress channel so the task can forward them.
"""

import logging
from typing import Optional

from playwright.async_api import Page

from ...core.client import Client, PATHNAMES
from ...core.domain import TaskOptions
from ...core.events import ClientEvent, ProgressEmitter, Subscription
from ...core.exceptions import AuthenticationError, BrowserSessionError
from .page_manager import PageManager

logger = logging.getLogger(__name__)


class BookmarksPageManager:
    """Opens and closes the authenticated bookmarks page of one run"""

    BROWSER_LAUNCH = "page-manager:browser:launch"
    LOGIN = "page-manager:login"
    BOOKMARKS_OPEN = "page-manager:bookmarks:open"

    PROGRESS_EVENTS = [
        BROWSER_LAUNCH,
        LOGIN,
        BOOKMARKS_OPEN,
    ]

    def __init__(
        self,
        options: TaskOptions,
        client: Optional[Client] = None,
        max_code_attempts: int = 3,
        base_url: Optional[str] = None
    ):
        """
        Args:
            options: Task options carrying credentials, browser settings and the code provider
            client: Session controller to drive; built from the options when omitted
            max_code_attempts: How many codes to ask for before giving up
            base_url: Twitter base URL; TWITTER_URL or https://x.com when omitted
        """
        self.options = options
        self.max_code_attempts = max_code_attempts
        self.progress = ProgressEmitter()

        self.client = client or Client(PageManager(
            base_url=base_url,
            executable_path=options.browser_path,
            headless=options.headless,
            timeout_ms=options.timeout_ms
        ))
        self._last_message: Optional[str] = None
        self._client_events = self._listen_to_client()

    def _listen_to_client(self) -> Subscription:
        subscription = Subscription()
        for event in (ClientEvent.ACTION_REQUIRED, ClientEvent.INTERNAL_ERROR, ClientEvent.USER_ERROR):
            subscription.add(self.client.on(event, self._on_client_message))
        return subscription

    def _on_client_message(self, message: str, *detail: str) -> None:
        self._last_message = " ".join((message,) + detail)
        self.progress.emit_message_event(self._last_message)

    async def open(self) -> Page:
        """
        Launch the browser, log in and navigate to the bookmarks page.

        Raises:
            BrowserSessionError: If the browser could not be started
            AuthenticationError: If the login flow did not reach the logged-in state
        """
        await self.client.init(self.options.browser_name)
        if not self.client.ready:
            # The client message was already published on the channel
            raise BrowserSessionError(
                f"Could not launch {self.options.browser_name}.",
                {'reason': self._last_message}
            )
        self.progress.emit_progress_event(self.BROWSER_LAUNCH)

        await self.client.log_in(self.options.credentials)
        await self._resolve_codes()
        if not self.client.logged_in:
            raise AuthenticationError(
                f"Could not log in as {self.options.credentials.username}.",
                username=self.options.credentials.username,
                reason=self._last_message
            )
        self.progress.emit_progress_event(self.LOGIN)

        page_manager = self.client.page_manager
        if not page_manager.current_url_has_path(PATHNAMES.bookmarks):
            await page_manager.go_to_bookmarks()
        self.progress.emit_progress_event(self.BOOKMARKS_OPEN)

        return page_manager.page

    async def _resolve_codes(self) -> None:
        """Ask for codes while the client waits on a code-entry page"""
        code_provider = self.options.code_provider
        if code_provider is None:
            return

        attempts = 0
        while ((self.client.needs_2fa_code or self.client.needs_confirmation_code)
               and attempts < self.max_code_attempts):
            attempts += 1
            code = await code_provider(self._last_message or "A code is necessary to proceed.")
            if self.client.needs_2fa_code:
                await self.client.enter_two_factor_code(code.strip())
            else:
                await self.client.enter_confirmation_code(code.strip())

    async def close(self) -> None:
        """Log out silently and release the browser"""
        try:
            await self.client.tear_down()
        except Exception as e:
            logger.warning("Failed to close browser session: %s", e)
        finally:
            self._client_events.unsubscribe()
