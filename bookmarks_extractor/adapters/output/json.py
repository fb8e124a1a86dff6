"""
JSON Output Adapter

Writes the exported tweets as a JSON array of plain objects.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List

from ...core.exceptions import ExportFailure


class JSONExporter:
    """JSON file exporter"""

    def __init__(self, file_name: str, indent: int = 2, ensure_ascii: bool = False):
        self.file_name = file_name
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    async def export(self, tweets: List[Dict[str, Any]]) -> None:
        """
        Save tweets as a JSON file.

        Raises:
            ExportFailure: If the file can't be written
        """
        try:
            await asyncio.to_thread(self._write, tweets)
        except Exception as e:
            raise ExportFailure(
                f"Failed to save JSON to {self.file_name}: {str(e)}",
                destination=self.file_name
            )

    def _write(self, tweets: List[Dict[str, Any]]) -> None:
        path = Path(self.file_name)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(tweets, f, indent=self.indent, ensure_ascii=self.ensure_ascii)
