"""
CLI Progress Adapter

Renders the task's progress channel as a rich progress bar sized by the
number of events a full run reports.
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn, Progress, TaskID, TaskProgressColumn, TextColumn, TimeElapsedColumn
)

from ...core.events import MessageEvent, ProgressEmitter, ProgressEvent, Subscription

DESCRIPTIONS = {
    "page-manager:browser:launch": "Browser launched",
    "page-manager:login": "Logged in",
    "page-manager:bookmarks:open": "Bookmarks opened",
    "extractor:tweets:extraction": "Extracting bookmarks",
    "extractor:tweets:complete": "Extraction complete",
    "extractor:export:tweets": "Tweets exported",
}


class CLIProgressAdapter:
    """
    Progress bar listener for a progress channel.

    Ratio events advance the bar by the growth of their ``complete`` value,
    every other progress event advances it by one step, so a finished run
    ends at exactly ``total_events``.
    """

    def __init__(self, total_events: int, console: Optional[Console] = None):
        self.console = console or Console()
        self.total_events = max(total_events, 1)
        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console
        )
        self.current_task: Optional[TaskID] = None
        self._extracted = 0
        self._subscription = Subscription()

    def __enter__(self):
        """Context manager entry"""
        self.progress.__enter__()
        self.current_task = self.progress.add_task("Starting browser", total=self.total_events)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self._subscription.unsubscribe()
        self.progress.__exit__(exc_type, exc_val, exc_tb)

    def attach(self, emitter: ProgressEmitter) -> Subscription:
        """Listen to progress and message events of a channel"""
        self._subscription.add(emitter.on_progress(self.on_progress))
        self._subscription.add(emitter.on_message(self.on_message))
        return self._subscription

    def on_progress(self, event: ProgressEvent) -> None:
        if self.current_task is None:
            return

        advance = 1
        description = DESCRIPTIONS.get(event.tag, event.tag)
        if event.ratio is not None:
            advance = max(event.ratio.complete - self._extracted, 0)
            self._extracted = max(event.ratio.complete, self._extracted)
            description = f"{description} ({event.ratio.complete}/{event.ratio.total})"

        self.progress.update(self.current_task, advance=advance, description=description)

    def on_message(self, event: MessageEvent) -> None:
        self.progress.console.print(f"[red]{event.message}[/red]")


class SilentProgressAdapter:
    """Silent progress adapter that performs no operations"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    def attach(self, emitter: ProgressEmitter) -> Subscription:
        """Silent - do nothing"""
        return Subscription()
