"""Practice history storage.

The analysis core never touches history itself; callers inject a
``HistoryRepository`` and hand it finished results.
"""

from __future__ import annotations

import json
import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from cajoncoach.analysis.models import ComparisonResult
from cajoncoach.errors import HistoryError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


@dataclass
class PracticeHistoryItem:
    """A stored practice result with the caller's metadata attached."""
    rhythm_name: str
    bpm: float
    result: dict  # ComparisonResult.to_dict()
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))  # epoch ms

    @classmethod
    def from_result(cls, result: ComparisonResult, rhythm_name: str, bpm: float) -> "PracticeHistoryItem":
        return cls(rhythm_name=rhythm_name, bpm=bpm, result=result.to_dict())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rhythm_name": self.rhythm_name,
            "bpm": self.bpm,
            "timestamp": self.timestamp,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PracticeHistoryItem":
        return cls(
            rhythm_name=data["rhythm_name"],
            bpm=data["bpm"],
            result=data["result"],
            id=data["id"],
            timestamp=data["timestamp"],
        )


class HistoryRepository(Protocol):
    def append(self, record: PracticeHistoryItem) -> list[PracticeHistoryItem]: ...

    def read_all(self) -> list[PracticeHistoryItem]: ...


class InMemoryHistoryRepository:
    """Process-local history, newest first."""

    def __init__(self, limit: int = DEFAULT_LIMIT):
        self.limit = limit
        self._items: list[PracticeHistoryItem] = []

    def append(self, record: PracticeHistoryItem) -> list[PracticeHistoryItem]:
        self._items = [record, *self._items][: self.limit]
        return list(self._items)

    def read_all(self) -> list[PracticeHistoryItem]:
        return list(self._items)


class JsonHistoryRepository:
    """History persisted as a JSON array, newest first, capped at *limit*."""

    def __init__(self, path: Path | str, limit: int = DEFAULT_LIMIT):
        self.path = Path(path)
        self.limit = limit

    def read_all(self) -> list[PracticeHistoryItem]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return [PracticeHistoryItem.from_dict(d) for d in data]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Practice history at {self.path} is unreadable: {e}")
            raise HistoryError(f"Corrupt practice history: {self.path}") from e

    def append(self, record: PracticeHistoryItem) -> list[PracticeHistoryItem]:
        items = [record, *self.read_all()][: self.limit]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps([i.to_dict() for i in items], ensure_ascii=False, default=str),
            encoding="utf-8",
        )
        tmp_path.replace(self.path)
        logger.info(f"Saved practice '{record.rhythm_name}' ({len(items)} items in history)")
        return items


@dataclass(frozen=True)
class HistorySummary:
    rhythm_name: str
    average_accuracy: int  # %, over this rhythm's sessions
    sessions: int  # sessions of this rhythm
    total_sessions: int  # sessions across all rhythms


def summarize(items: list[PracticeHistoryItem], rhythm_name: str) -> HistorySummary:
    """Average accuracy and session counts for one rhythm."""
    matching = [i for i in items if i.rhythm_name == rhythm_name]
    average = 0
    if matching:
        mean = sum(i.result["accuracy"] for i in matching) / len(matching)
        average = int(math.floor(mean + 0.5))
    return HistorySummary(
        rhythm_name=rhythm_name,
        average_accuracy=average,
        sessions=len(matching),
        total_sessions=len(items),
    )
