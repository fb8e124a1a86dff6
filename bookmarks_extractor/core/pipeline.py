"""
Extraction pipeline

Pulls batches of tweets from an opened bookmarks page, merges them into a
growing TweetSet and stops either once the configured limit is exceeded or
when the timeline runs out. The whole accumulated set is handed to the
observer after every merge.
"""

import asyncio
import inspect
import logging
import traceback
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from .domain import EventCompleteRatio, TweetSet
from .events import ProgressEmitter, Subscription
from .exceptions import InternalError
from .ports import Page, TweetSourcePort

logger = logging.getLogger(__name__)


def _ignore(*args: Any) -> None:
    pass


@dataclass
class Observer:
    """Callbacks of a pipeline subscriber. Each may be a coroutine function."""

    next: Callable[[TweetSet], Any] = _ignore
    error: Callable[[BaseException], Any] = _ignore
    complete: Callable[[], Any] = _ignore


async def invoke_callback(callback: Callable[..., Any], *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


def format_trace(error: BaseException) -> Optional[str]:
    """Formatted traceback of an exception, or None when it carries none"""
    if error.__traceback__ is None:
        return None
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


class PipelineSubscription(Subscription):
    """Subscription to a running pipeline; join() waits for the run to finish"""

    def __init__(self):
        super().__init__()
        self.task: Optional[asyncio.Task] = None

    async def join(self) -> None:
        if self.task is not None:
            await asyncio.shield(self.task)


class ExtractionPipeline:
    """
    Bounded accumulator over a paginated tweet source.

    Only one batch is ever being pulled at a time. Unsubscribing does not
    interrupt a pull in flight; it suppresses every callback and event that
    would follow it.
    """

    EXTRACTION_PROGRESS = "extractor:tweets:extraction"

    def __init__(
        self,
        open_session: Callable[[], Awaitable[Page]],
        source: TweetSourcePort,
        max_limit: Optional[int] = None,
        progress: Optional[ProgressEmitter] = None,
        progress_tag: str = EXTRACTION_PROGRESS
    ):
        """
        Args:
            open_session: Coroutine function returning the authenticated bookmarks page
            source: Tweet source that reads batches off the page
            max_limit: Stop once more than this many distinct tweets are collected
            progress: Channel receiving ratio and diagnostic message events
            progress_tag: Tag of the ratio events
        """
        self.open_session = open_session
        self.source = source
        self.max_limit = max_limit
        self.progress = progress or ProgressEmitter()
        self.progress_tag = progress_tag
        self._started = False

    def subscribe(self, observer: Observer) -> PipelineSubscription:
        """Start the pipeline on the running event loop"""
        subscription = PipelineSubscription()
        subscription.task = asyncio.ensure_future(self.run(observer, subscription))
        return subscription

    async def run(self, observer: Observer, subscription: Optional[Subscription] = None) -> None:
        """Run the pipeline to completion, reporting to the observer"""
        if self._started:
            raise InternalError("An extraction pipeline can only be run once")
        self._started = True
        subscription = subscription or Subscription()

        try:
            page = await self.open_session()
            batches = self.source.extract(page).__aiter__()
        except Exception as e:
            await self._fail(observer, subscription, e)
            return

        tweets = TweetSet()
        batch_index = 0
        try:
            while not subscription.closed:
                try:
                    batch = await batches.__anext__()
                except StopAsyncIteration:
                    logger.info("Bookmarks exhausted after %d tweets", len(tweets))
                    break
                except Exception as e:
                    await self._fail(observer, subscription, e)
                    return

                if subscription.closed:
                    return

                tweets = tweets.union(batch)
                batch_index += 1
                logger.debug("Batch %d merged, %d tweets collected", batch_index, len(tweets))

                await invoke_callback(observer.next, tweets)
                self._emit_progress(tweets, subscription)

                if self._limit_exceeded(tweets):
                    logger.info("Limit of %d tweets exceeded, stopping", self.max_limit)
                    break
        finally:
            aclose = getattr(batches, "aclose", None)
            if aclose is not None:
                await aclose()

        if not subscription.closed:
            await invoke_callback(observer.complete)

    def _limit_exceeded(self, tweets: TweetSet) -> bool:
        return self.max_limit is not None and len(tweets) > self.max_limit

    def _emit_progress(self, tweets: TweetSet, subscription: Subscription) -> None:
        if self.max_limit is None or subscription.closed:
            return

        ratio = EventCompleteRatio(
            complete=min(len(tweets), self.max_limit),
            total=self.max_limit
        )
        self.progress.emit_progress_event(self.progress_tag, ratio)

    async def _fail(self, observer: Observer, subscription: Subscription, error: Exception) -> None:
        if subscription.closed:
            logger.debug("Pipeline error after unsubscribe: %s", error)
            return

        logger.error("Extraction failed: %s", error)
        self.progress.emit_message_event(str(error))
        trace = format_trace(error)
        if trace:
            self.progress.emit_message_event(trace)

        await invoke_callback(observer.error, error)
