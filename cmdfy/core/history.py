"""
History ("brain") for cmdfy.
Append-only log of accepted commands, replayed as few-shot examples
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .errors import HistoryError
from .models import FewShotExample

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    """A command the user accepted"""
    query: str
    command: str
    explanation: str = ""
    provider: str = ""
    model: str = ""
    context: str = ""
    timestamp: str = ""

    def to_example(self) -> FewShotExample:
        return FewShotExample(query=self.query, command=self.command, provider=self.provider)


class HistoryStore:
    """JSONL file of HistoryEntry records"""

    def __init__(self, history_file: Optional[Path] = None):
        self.history_file = history_file or Path.home() / ".cmdfy" / "brain.jsonl"

    def record(self, entry: HistoryEntry) -> HistoryEntry:
        """Append an entry, stamping it with the current time"""
        if not entry.query or not entry.command:
            raise HistoryError("query and command are required")

        entry.timestamp = datetime.now().isoformat()
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.history_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(asdict(entry)) + "\n")
        except OSError as e:
            raise HistoryError(f"failed to write history file {self.history_file}: {e}") from e
        return entry

    def recent(self, limit: int = 5) -> List[HistoryEntry]:
        """The `limit` most recent entries, newest first"""
        if limit <= 0 or not self.history_file.exists():
            return []

        try:
            with open(self.history_file, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise HistoryError(f"failed to read history file {self.history_file}: {e}") from e

        entries = []
        for line in lines:
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
                entries.append(HistoryEntry(**{
                    key: data.get(key, "") for key in HistoryEntry.__dataclass_fields__
                }))
            except (json.JSONDecodeError, TypeError, AttributeError):
                # Skip malformed lines
                logger.debug("Skipping malformed history line: %s", line[:80])

        entries.reverse()
        return entries[:limit]

    def examples(self, limit: int = 5) -> List[FewShotExample]:
        return [entry.to_example() for entry in self.recent(limit)]
