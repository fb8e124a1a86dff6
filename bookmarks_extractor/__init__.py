"""
Twitter Bookmarks Extractor

A hexagonal architecture implementation that signs into Twitter with a
Playwright browser, collects bookmarked tweets and exports them.
"""

__version__ = "1.0.0"
__description__ = "Bookmarked tweet extraction with an interactive login state machine"
