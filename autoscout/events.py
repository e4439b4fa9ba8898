"""
Crawl events: the lazy sequence a job produces for whatever transport consumes it.
"""
import json
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Tuple

from .models import VehicleRecord


@dataclass(frozen=True)
class CrawlEvent:
    type: ClassVar[str] = ""
    terminal: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class LogEvent(CrawlEvent):
    type: ClassVar[str] = "log"
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "message": self.message}


@dataclass(frozen=True)
class ProgressEvent(CrawlEvent):
    type: ClassVar[str] = "progress"
    value: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value}


@dataclass(frozen=True)
class ResultEvent(CrawlEvent):
    """Full snapshot of every vehicle collected so far, not a delta."""

    type: ClassVar[str] = "result"
    vehicles: Tuple[VehicleRecord, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "vehicles": [v.to_dict() for v in self.vehicles]}


@dataclass(frozen=True)
class ErrorEvent(CrawlEvent):
    type: ClassVar[str] = "error"
    terminal: ClassVar[bool] = True
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "message": self.message}


@dataclass(frozen=True)
class CompleteEvent(CrawlEvent):
    type: ClassVar[str] = "complete"
    terminal: ClassVar[bool] = True


def encode_ndjson(event: CrawlEvent) -> str:
    """One JSON object per line."""
    return json.dumps(event.to_dict(), ensure_ascii=False) + "\n"


def encode_sse(event: CrawlEvent) -> str:
    """Server-sent events frame."""
    return f"data: {json.dumps(event.to_dict(), ensure_ascii=False)}\n\n"
