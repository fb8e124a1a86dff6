"""
Extraction task orchestration

Sequences one run: open the session, stream bookmarks through the extraction
pipeline, cap the result at the configured limit, export it and release the
browser. Progress from the session and from the pipeline is surfaced on a
single progress channel.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .domain import TaskOptions, TweetSet
from .events import ProgressEmitter, Subscription
from .pipeline import ExtractionPipeline, Observer, invoke_callback
from .ports import BookmarksSessionPort, ExporterPort, TweetSourcePort

logger = logging.getLogger(__name__)

FileExporterFactory = Callable[[str], ExporterPort]


class ExtractionTask(ProgressEmitter):
    """
    Orchestrates a complete bookmark extraction.

    Events forwarded from the session and the ratio/message events of the
    pipeline all arrive on this emitter, so a front-end only needs to listen
    here.
    """

    EXPORT_TWEETS = "extractor:export:tweets"
    BOOKMARKED_TWEETS_EXTRACTION = ExtractionPipeline.EXTRACTION_PROGRESS
    BOOKMARKED_TWEETS_EXTRACT_COMPLETE = "extractor:tweets:complete"

    PROGRESS_EVENTS = [
        BOOKMARKED_TWEETS_EXTRACTION,
        BOOKMARKED_TWEETS_EXTRACT_COMPLETE,
        EXPORT_TWEETS,
    ]

    def __init__(
        self,
        options: TaskOptions,
        session: BookmarksSessionPort,
        source: TweetSourcePort,
        console_exporter: ExporterPort,
        file_exporter_factory: Optional[FileExporterFactory] = None
    ):
        """
        Args:
            options: Options of this run
            session: Owner of the authenticated browser session
            source: Tweet source used by the pipeline
            console_exporter: Human-readable sink, always written
            file_exporter_factory: Builds the structured file sink from the file name
        """
        super().__init__()
        self.options = options
        self.session = session
        self.console_exporter = console_exporter
        self.file_exporter_factory = file_exporter_factory

        self.tweets = TweetSet()
        self.pipeline = ExtractionPipeline(
            open_session=session.open,
            source=source,
            max_limit=options.max_limit,
            progress=self,
            progress_tag=self.BOOKMARKED_TWEETS_EXTRACTION
        )

        self._event_forwarder: Subscription = session.progress.forward_to(self)
        self._tweet_stream: Subscription = Subscription()
        self._stopped = False

    @property
    def num_events(self) -> int:
        """Number of progress steps a full run reports, used to size progress bars"""
        page_manager_events = len(self.session.PROGRESS_EVENTS)

        task_specific_events = len(self.PROGRESS_EVENTS) - 1
        if self.options.max_limit is not None:
            task_specific_events += self.options.max_limit

        return page_manager_events + task_specific_events

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def run(self) -> None:
        """Run the extraction and wait until it has completed or failed"""
        observer = Observer(
            next=self._on_extract_tweets,
            error=self._on_error,
            complete=self._on_complete
        )

        self._tweet_stream = stream = self.pipeline.subscribe(observer)
        await stream.join()

    def _on_extract_tweets(self, tweets: TweetSet) -> None:
        # The pipeline already reported the ratio on this channel
        self.tweets = tweets

    async def _on_error(self, error: BaseException) -> None:
        await invoke_callback(self.options.error_callback, error)

    async def _on_complete(self) -> None:
        await self.stop()
        await invoke_callback(self.options.success_callback)

    def _stop_forwarding_events(self) -> None:
        self._event_forwarder.unsubscribe()

    def _stop_streaming_tweets(self) -> None:
        self._tweet_stream.unsubscribe()

    def _emit_complete_event(self) -> None:
        self.emit_progress_event(self.BOOKMARKED_TWEETS_EXTRACT_COMPLETE)

    async def _export_tweets(self, tweets: List[Dict[str, Any]]) -> None:
        try:
            file_name = self.options.file_name
            if file_name and self.file_exporter_factory is not None:
                exporter = self.file_exporter_factory(file_name)
                await exporter.export(tweets)
                logger.info("Exported %d tweets to %s", len(tweets), file_name)

            self.emit_progress_event(self.EXPORT_TWEETS)
        except Exception as e:
            logger.error("Failed to export tweets to file: %s", e)
            self.emit_message_event("Failed to export tweets to file.")

    async def _print_tweets(self, tweets: List[Dict[str, Any]]) -> None:
        try:
            await self.console_exporter.export(tweets)
        except Exception as e:
            logger.error("Failed to print tweets: %s", e)
            self.emit_message_event("Failed to print tweets.")

    async def stop(self) -> None:
        """
        Stop streaming and finalize with whatever was collected.

        Forwarding and the pipeline subscription are both torn down before the
        completion event, so no session or pipeline event can follow it. Only
        the first call has any effect.
        """
        if self._stopped:
            return
        self._stopped = True

        self._stop_forwarding_events()
        self._stop_streaming_tweets()
        self._emit_complete_event()

        tweets = self.tweet_dicts(self.tweets, self.options.max_limit)
        await self._export_tweets(tweets)
        await self._print_tweets(tweets)

        await self.session.close()

    @staticmethod
    def tweet_dicts(tweets: TweetSet, max_limit: Optional[int]) -> List[Dict[str, Any]]:
        """Plain tweet objects in first-seen order, hard-capped at the limit"""
        return [tweet.to_dict() for tweet in tweets.to_list(max_limit)]
