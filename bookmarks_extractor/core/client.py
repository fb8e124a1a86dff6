"""
Session controller

Drives one browser session through the login flow (password, 2FA code,
challenge code) and exposes a logged-in / logged-out boundary. Nothing here
raises: rejected input and browser failures are reported as client events so
an interactive front-end can prompt and retry.
"""

import logging
from dataclasses import dataclass

from .domain import BrowserName, Credentials, State
from .events import ClientEvent, EventEmitter
from .ports import LoginPageManagerPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pathnames:
    """URL paths that identify each step of the login flow"""

    bookmarks: str = "/i/bookmarks"
    challenge_code: str = "/account/login_challenge"
    two_fa_code: str = "/account/login_verification"
    # Logging out lands back on the root page
    logged_out: str = "/"
    login: str = "/i/flow/login"


PATHNAMES = Pathnames()


class Client(EventEmitter):
    """
    Authentication state machine for a single browser session.

    The controller is not ready until init() succeeds. Every operation other
    than log_out() and tear_down() reports an internal_error when called
    before that.
    """

    NOT_READY_MESSAGE = "The browser hasn't been initialized yet."

    def __init__(self, page_manager: LoginPageManagerPort):
        super().__init__()
        self.page_manager = page_manager
        self.ready = False

        self.state = State.INACTIVE
        self.last_auth_attempt_failed = False
        self.last_code_attempt_failed = False

    @property
    def logged_out(self) -> bool:
        """True until the session is past the login gate"""
        return (self.state in (State.INACTIVE, State.LOGGED_OUT)
                or self.needs_confirmation_code
                or self.needs_2fa_code)

    @property
    def logged_in(self) -> bool:
        return self.state == State.LOGGED_IN

    @property
    def needs_confirmation_code(self) -> bool:
        return self.state == State.NEEDS_CONFIRMATION_CODE

    @property
    def needs_2fa_code(self) -> bool:
        return self.state == State.NEEDS_2FA_CODE

    def _assert_ready(self) -> bool:
        if not self.ready:
            self.emit(ClientEvent.INTERNAL_ERROR, self.NOT_READY_MESSAGE)
        return self.ready

    async def _drive(self, failure: str, action, *args) -> bool:
        """Run a page action, reporting any browser error as an internal_error"""
        try:
            await action(*args)
        except Exception as e:
            logger.error("%s %s", failure, e)
            self.emit(ClientEvent.INTERNAL_ERROR, failure, str(e))
            return False
        return True

    async def init(self, browser_name: str) -> None:
        """Bind the controller to a supported browser driver and launch it"""
        browser = BrowserName.lookup(browser_name)
        if browser is None:
            choices = ", ".join(f'"{name}"' for name in BrowserName.names())
            self.emit(ClientEvent.USER_ERROR, f"Please choose from {choices}.")
            return

        self.page_manager.set_browser_type(browser)
        if not await self._drive("The browser could not be started.", self.page_manager.init):
            return

        self.ready = True
        self.state = State.LOGGED_OUT
        logger.info("Browser %s started", browser.value)
        self.emit(ClientEvent.SUCCESS)

    async def log_in(self, credentials: Credentials) -> None:
        if not self._assert_ready():
            return

        self.last_auth_attempt_failed = False
        if not await self._drive("The login page could not be submitted.",
                                 self.page_manager.log_in, credentials):
            return
        if not self.page_manager.current_url_has_path(PATHNAMES.bookmarks):
            await self._handle_login_issue()
            return

        self.state = State.LOGGED_IN
        logger.info("Logged in as %s", credentials.username)
        self.emit(ClientEvent.SUCCESS)

    async def _handle_login_issue(self) -> None:
        if self.page_manager.current_url_has_path(PATHNAMES.challenge_code):
            self.state = State.NEEDS_CONFIRMATION_CODE
            self.emit(ClientEvent.ACTION_REQUIRED,
                      "Your confirmation code is necessary to proceed.")
        elif self.page_manager.current_url_has_path(PATHNAMES.two_fa_code):
            self.state = State.NEEDS_2FA_CODE
            self.emit(ClientEvent.ACTION_REQUIRED,
                      "Your 2FA code is necessary to proceed. Please check your device.")
        else:
            self.last_auth_attempt_failed = True
            if not await self._drive("The login page could not be reloaded.",
                                     self.page_manager.refresh_with_bookmarks_redirect):
                return
            self.emit(ClientEvent.USER_ERROR, "Your credentials were incorrect.")

    async def enter_confirmation_code(self, code: str) -> None:
        await self._enter_code(
            code,
            submit=self.page_manager.enter_confirmation_code,
            code_path=PATHNAMES.challenge_code,
            rejected_message="Your challenge code was incorrect.",
        )

    async def enter_two_factor_code(self, code: str) -> None:
        await self._enter_code(
            code,
            submit=self.page_manager.enter_two_factor_code,
            code_path=PATHNAMES.two_fa_code,
            rejected_message="Your 2FA code was incorrect.",
        )

    async def _enter_code(self, code: str, submit, code_path: str, rejected_message: str) -> None:
        if not self._assert_ready():
            return

        self.last_code_attempt_failed = False
        if not await self._drive("The code could not be submitted.", submit, code):
            return
        if self.page_manager.current_url_has_path(code_path):
            self.last_code_attempt_failed = True
            self.emit(ClientEvent.USER_ERROR, rejected_message)
            return

        # The code page was left behind; only report success once the
        # bookmarks page is actually reachable.
        if not self.page_manager.current_url_has_path(PATHNAMES.bookmarks):
            if not await self._drive("The bookmarks page could not be opened.",
                                     self.page_manager.go_to_bookmarks):
                return

        if not self.page_manager.current_url_has_path(PATHNAMES.bookmarks):
            self.last_code_attempt_failed = True
            self.emit(ClientEvent.USER_ERROR,
                      "The code was accepted but the bookmarks page could not be reached.")
            return

        self.state = State.LOGGED_IN
        self.emit(ClientEvent.SUCCESS)

    async def log_out(self, emit_event: bool = True) -> None:
        if not self.ready:
            return

        if not await self._drive("Logging out failed.", self.page_manager.log_out):
            return

        if self.page_manager.current_url_has_path(PATHNAMES.logged_out):
            self.state = State.LOGGED_OUT
            if emit_event:
                self.emit(ClientEvent.SUCCESS)
            return

        # A mismatched landing page is only logged, never escalated
        logger.warning("Not at logged out page after logging out")

    async def tear_down(self) -> None:
        """Log out if needed, then release the browser. Valid from any state."""
        if self.logged_in:
            await self.log_out(emit_event=False)

        await self._drive("The browser could not be closed.", self.page_manager.tear_down)
        self.ready = False
        self.state = State.INACTIVE
        self.emit(ClientEvent.SUCCESS)
