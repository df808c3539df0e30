"""
Structured JSON logger for match engine events.

Emits JSON-formatted log events for:
- Stage start/complete/error tracking (prefilter, resolver, ranker, explainer)
- Search start/complete summaries with diagnostics counts

Usage:
    events = StructuredLogger(search_id="abc123")
    with StageContext(events, "prefilter") as ctx:
        # ... do work ...
        ctx.add_metadata("kept", 12)
"""

import json
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from dataclasses import dataclass, asdict
from enum import Enum


class EventType(str, Enum):
    """Standard match engine event types."""
    STAGE_START = "stage_start"
    STAGE_COMPLETE = "stage_complete"
    STAGE_ERROR = "stage_error"
    SEARCH_START = "search_start"
    SEARCH_COMPLETE = "search_complete"


class StageStatus(str, Enum):
    """Stage execution status."""
    SUCCESS = "success"
    ERROR = "error"
    FALLBACK = "fallback"


@dataclass
class LogEvent:
    """Structured log event with all optional fields."""
    timestamp: str
    event: str
    search_id: str
    stage: Optional[str] = None
    status: Optional[str] = None
    duration_ms: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_json(self) -> str:
        """Convert to JSON string, excluding None values."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        return json.dumps(data)


class StructuredLogger:
    """
    Structured JSON logger for match engine events.

    Emits JSON lines to stdout for log aggregators.
    """

    def __init__(self, search_id: str, enabled: bool = True):
        self.search_id = search_id
        self.enabled = enabled

    def _emit(self, event: LogEvent) -> None:
        if self.enabled:
            print(event.to_json(), file=sys.stdout, flush=True)

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def emit(
        self,
        event: str,
        stage: Optional[str] = None,
        status: Optional[str] = None,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        """Emit a custom log event."""
        self._emit(
            LogEvent(
                timestamp=self._now(),
                event=event,
                search_id=self.search_id,
                stage=stage,
                status=status,
                duration_ms=duration_ms,
                metadata=metadata,
                error=error,
            )
        )

    def stage_start(self, stage: str) -> None:
        self.emit(event=EventType.STAGE_START.value, stage=stage)

    def stage_complete(
        self,
        stage: str,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
        status: str = StageStatus.SUCCESS.value,
    ) -> None:
        self.emit(
            event=EventType.STAGE_COMPLETE.value,
            stage=stage,
            status=status,
            duration_ms=duration_ms,
            metadata=metadata,
        )

    def stage_error(
        self,
        stage: str,
        error: str,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.emit(
            event=EventType.STAGE_ERROR.value,
            stage=stage,
            status=StageStatus.ERROR.value,
            duration_ms=duration_ms,
            error=error,
            metadata=metadata,
        )

    def search_start(self, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.emit(event=EventType.SEARCH_START.value, metadata=metadata)

    def search_complete(
        self,
        status: str = "success",
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log search completion.

        Args:
            status: Final status (success, fallback, error)
            duration_ms: Total duration
            metadata: Diagnostics counts
        """
        self.emit(
            event=EventType.SEARCH_COMPLETE.value,
            status=status,
            duration_ms=duration_ms,
            metadata=metadata,
        )


class StageContext:
    """
    Context manager for automatic stage timing.

    Usage:
        with StageContext(events, "ranker") as ctx:
            ctx.add_metadata("matches", 5)
    """

    def __init__(self, logger: StructuredLogger, stage: str):
        self.logger = logger
        self.stage = stage
        self.metadata: Dict[str, Any] = {}
        self.status = StageStatus.SUCCESS.value
        self._start_time: float = 0

    def __enter__(self) -> "StageContext":
        self._start_time = time.time()
        self.logger.stage_start(self.stage)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        duration_ms = int((time.time() - self._start_time) * 1000)

        if exc_type is not None:
            self.logger.stage_error(
                self.stage,
                str(exc_val) or exc_type.__name__,
                duration_ms,
                self.metadata or None,
            )
            return False  # Re-raise exception

        self.logger.stage_complete(
            self.stage,
            duration_ms,
            self.metadata or None,
            status=self.status,
        )
        return False

    def add_metadata(self, key: str, value: Any) -> None:
        """Add metadata to be included in completion event."""
        self.metadata[key] = value


def get_structured_logger(search_id: str, enabled: bool = True) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        search_id: Search ID for event correlation
        enabled: Whether to emit events

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(search_id, enabled)
