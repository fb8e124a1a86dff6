"""
Domain-Specific Exceptions

Defines the error taxonomy of the bookmarks extractor. Session controller
errors are reported as events rather than raised; the classes here are used
where an error has to cross a call boundary (pipeline failures, exports,
configuration) or to tag an event with its kind.
"""

from typing import Any, Dict, List, Optional


class BookmarksDomainError(Exception):
    """Base exception for all bookmarks extractor domain errors"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class UserError(BookmarksDomainError):
    """Caller-supplied input was rejected (bad password, bad code, unknown browser)"""
    pass


class InternalError(BookmarksDomainError):
    """An operation was invoked before its preconditions held"""
    pass


class AuthenticationError(UserError):
    """Raised when the login flow rejected the credentials or codes it was given"""

    def __init__(self, message: str, username: Optional[str] = None, **context):
        super().__init__(message, context)
        self.username = username


class BrowserSessionError(BookmarksDomainError):
    """Raised when browser session operations fail"""
    pass


class ExtractionFailure(BookmarksDomainError):
    """Raised when pulling or parsing a batch of tweets fails"""

    def __init__(self, message: str, batch_index: Optional[int] = None, **context):
        super().__init__(message, context)
        self.batch_index = batch_index


class ExportFailure(BookmarksDomainError):
    """Raised when writing tweets to an export sink fails"""

    def __init__(self, message: str, destination: Optional[str] = None, **context):
        super().__init__(message, context)
        self.destination = destination


class ConfigurationError(BookmarksDomainError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message, {'missing': missing or []})
        self.missing = missing or []
