"""
Console Output Adapter

Prints exported tweets as a rich table.
"""

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table


class StdOutExporter:
    """Human-readable console exporter"""

    def __init__(self, console: Optional[Console] = None, max_text_length: int = 140):
        self.console = console or Console()
        self.max_text_length = max_text_length

    async def export(self, tweets: List[Dict[str, Any]]) -> None:
        if not tweets:
            self.console.print("[yellow]No bookmarked tweets were extracted.[/yellow]")
            return

        table = Table(title=f"Bookmarked tweets ({len(tweets)})", show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Author", style="cyan", no_wrap=True)
        table.add_column("Date", style="green", no_wrap=True)
        table.add_column("Tweet")
        table.add_column("Likes", justify="right")

        for index, tweet in enumerate(tweets, start=1):
            table.add_row(
                str(index),
                tweet.get("author_handle") or tweet.get("author_name") or "",
                (tweet.get("timestamp") or "")[:10],
                self._shorten(tweet.get("text") or ""),
                str(tweet.get("like_count", 0))
            )

        self.console.print(table)

    def _shorten(self, text: str) -> str:
        text = " ".join(text.split())
        if len(text) <= self.max_text_length:
            return text
        return text[:self.max_text_length - 1] + "…"
