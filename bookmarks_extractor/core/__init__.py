"""
Core domain layer

Contains the session state machine, the extraction pipeline, the task
orchestrator and the port interfaces, independent of Playwright and of any
output format.
"""

from .domain import (
    BrowserName,
    Credentials,
    EventCompleteRatio,
    State,
    TaskOptions,
    Tweet,
    TweetSet
)

from .events import (
    ClientEvent,
    EventEmitter,
    MessageEvent,
    ProgressEmitter,
    ProgressEvent,
    Subscription
)

from .client import Client, PATHNAMES
from .pipeline import ExtractionPipeline, Observer
from .task import ExtractionTask

from .exceptions import (
    BookmarksDomainError,
    UserError,
    InternalError,
    AuthenticationError,
    BrowserSessionError,
    ExtractionFailure,
    ExportFailure,
    ConfigurationError
)

__all__ = [
    # Domain models
    'BrowserName',
    'Credentials',
    'EventCompleteRatio',
    'State',
    'TaskOptions',
    'Tweet',
    'TweetSet',

    # Events
    'ClientEvent',
    'EventEmitter',
    'MessageEvent',
    'ProgressEmitter',
    'ProgressEvent',
    'Subscription',

    # Services
    'Client',
    'PATHNAMES',
    'ExtractionPipeline',
    'Observer',
    'ExtractionTask',

    # Exceptions
    'BookmarksDomainError',
    'UserError',
    'InternalError',
    'AuthenticationError',
    'BrowserSessionError',
    'ExtractionFailure',
    'ExportFailure',
    'ConfigurationError'
]
