"""
Core domain models for bookmark extraction.

These models define the value objects used throughout the application,
independent of any browser or output concerns.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, List, Optional


class State(Enum):
    """Authentication state of a session controller"""

    INACTIVE = "inactive"
    LOGGED_OUT = "logged_out"
    NEEDS_2FA_CODE = "needs_2fa_code"
    NEEDS_CONFIRMATION_CODE = "needs_confirmation_code"
    LOGGED_IN = "logged_in"


class BrowserName(Enum):
    """Browser drivers a session controller can be bound to"""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"

    @classmethod
    def names(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def lookup(cls, name: str) -> Optional['BrowserName']:
        """Return the member for a driver name, or None if unsupported"""
        for member in cls:
            if member.value == name:
                return member
        return None


@dataclass(frozen=True)
class Credentials:
    """Login credentials; the password never appears in repr"""

    username: str
    password: str = field(repr=False)
    # Asked for by the "unusual activity" identifier prompt
    email: Optional[str] = None


@dataclass(frozen=True)
class Tweet:
    """One bookmarked tweet. Identity is the tweet id."""

    id: str
    text: str = ""
    author_name: Optional[str] = None
    author_handle: Optional[str] = None
    timestamp: Optional[str] = None
    url: Optional[str] = None
    reply_count: int = 0
    retweet_count: int = 0
    like_count: int = 0
    media_type: str = "none"

    def to_dict(self) -> Dict[str, Any]:
        """Plain object used by exporters"""
        return asdict(self)


class TweetSet:
    """
    Order-preserving, id-deduplicating collection of tweets.

    Instances are never mutated; union returns a new set so that a caller
    holding an older set keeps a consistent snapshot.
    """

    __slots__ = ('_tweets',)

    def __init__(self, tweets: Iterable[Tweet] = ()):
        ordered: Dict[str, Tweet] = {}
        for tweet in tweets:
            ordered.setdefault(tweet.id, tweet)
        self._tweets = ordered

    def union(self, other: 'TweetSet') -> 'TweetSet':
        """Merge another set; ids already present keep their first-seen tweet and position"""
        merged = TweetSet()
        merged._tweets = dict(self._tweets)
        for tweet_id, tweet in other._tweets.items():
            merged._tweets.setdefault(tweet_id, tweet)
        return merged

    def ids(self) -> List[str]:
        return list(self._tweets)

    def issuperset(self, other: 'TweetSet') -> bool:
        return self._tweets.keys() >= other._tweets.keys()

    def to_list(self, limit: Optional[int] = None) -> List[Tweet]:
        """Tweets in first-seen order, capped at limit when one is given"""
        tweets = list(self._tweets.values())
        if limit is None:
            return tweets
        return tweets[:limit]

    def __contains__(self, tweet_id: object) -> bool:
        return tweet_id in self._tweets

    def __iter__(self) -> Iterator[Tweet]:
        return iter(list(self._tweets.values()))

    def __len__(self) -> int:
        return len(self._tweets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TweetSet):
            return NotImplemented
        return list(self._tweets.items()) == list(other._tweets.items())

    def __repr__(self) -> str:
        return f"TweetSet(size={len(self)})"


@dataclass(frozen=True)
class EventCompleteRatio:
    """Completion ratio carried by extraction progress events"""

    complete: int
    total: int

    def __post_init__(self):
        if self.complete < 0 or self.total < 0:
            raise ValueError(
                f"Completion ratio must be non-negative, got: {self.complete}/{self.total}"
            )


SuccessCallback = Callable[[], Any]
ErrorCallback = Callable[[BaseException], Any]
# Called with the prompt message, returns the code the user typed
CodeProvider = Callable[[str], Awaitable[str]]


def _noop_success() -> None:
    pass


def _noop_error(error: BaseException) -> None:
    pass


@dataclass(frozen=True)
class TaskOptions:
    """Configuration captured once per extraction run"""

    credentials: Credentials
    browser_name: str = BrowserName.CHROMIUM.value
    browser_path: Optional[str] = None
    headless: bool = True
    timeout_ms: int = 30000
    max_limit: Optional[int] = None     # None means unbounded
    file_name: Optional[str] = None     # None skips the file export
    success_callback: SuccessCallback = _noop_success
    error_callback: ErrorCallback = _noop_error
    code_provider: Optional[CodeProvider] = None

    def __post_init__(self):
        if self.max_limit is not None and self.max_limit < 0:
            raise ValueError(f"max_limit must be non-negative, got: {self.max_limit}")

    @property
    def bounded(self) -> bool:
        return self.max_limit is not None
