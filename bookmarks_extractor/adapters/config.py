"""
Configuration adapter

Reads credentials and browser settings from environment variables, loading a
``.env`` file first when one is present.
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv

from ..core.domain import BrowserName, Credentials
from ..core.exceptions import ConfigurationError

# Load environment variables
load_dotenv()


class EnvironmentConfigAdapter:
    """Configuration adapter that reads from environment variables"""

    def get_credentials(self) -> Credentials:
        """
        Get credentials from environment variables.

        Raises:
            ConfigurationError: If username or password is missing
        """
        username = os.getenv('TWITTER_USERNAME', '')
        password = os.getenv('TWITTER_PASSWORD', '')

        missing = [name for name, value in (('TWITTER_USERNAME', username),
                                            ('TWITTER_PASSWORD', password)) if not value]
        if missing:
            raise ConfigurationError(
                "Twitter credentials not found. "
                "Set TWITTER_USERNAME and TWITTER_PASSWORD environment variables",
                missing=missing
            )

        return Credentials(
            username=username,
            password=password,
            email=os.getenv('TWITTER_EMAIL') or None
        )

    def get_browser_config(self) -> Dict[str, Any]:
        """Get browser configuration from environment"""
        browser_name = os.getenv('BOOKMARKS_BROWSER', BrowserName.CHROMIUM.value)
        timeout = os.getenv('BOOKMARKS_TIMEOUT_MS', '30000')
        try:
            timeout_ms = int(timeout)
        except ValueError:
            raise ConfigurationError(f"BOOKMARKS_TIMEOUT_MS must be an integer, got: {timeout}")

        return {
            'browser_name': browser_name,
            'browser_path': os.getenv('BOOKMARKS_BROWSER_PATH') or None,
            'headless': os.getenv('BOOKMARKS_HEADLESS', 'true').lower() == 'true',
            'timeout_ms': timeout_ms
        }

    def validate_config(self) -> None:
        """
        Validate that required configuration is present.

        Raises:
            ConfigurationError: Naming the first missing or malformed setting
        """
        self.get_credentials()
        self.get_browser_config()
