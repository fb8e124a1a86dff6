"""
Extraction Task Factory

Infrastructure layer factory wiring the Playwright, parsing and output
adapters into an ExtractionTask, so the core never imports them.
"""

from typing import Optional

from rich.console import Console

from ..core.domain import TaskOptions
from ..core.task import ExtractionTask
from .browser.bookmarks_page_manager import BookmarksPageManager
from .extractors.tweets import TweetExtractor
from .output.json import JSONExporter
from .output.std_out import StdOutExporter


def create_extraction_task(
    options: TaskOptions,
    console: Optional[Console] = None,
    max_code_attempts: int = 3
) -> ExtractionTask:
    """
    Create an extraction task backed by a real browser.

    Args:
        options: Options of the run
        console: Console used by the console exporter
        max_code_attempts: How many 2FA/challenge codes to ask for before giving up

    Returns:
        Configured ExtractionTask
    """
    session = BookmarksPageManager(options, max_code_attempts=max_code_attempts)
    # Permalinks must point at the host the browser logged in to
    base_url = session.client.page_manager.base_url

    return ExtractionTask(
        options=options,
        session=session,
        source=TweetExtractor(base_url=base_url),
        console_exporter=StdOutExporter(console=console),
        file_exporter_factory=JSONExporter
    )
