"""
Centralized error handling for the mission match service.

Defines the exception taxonomy raised by the match engine and the
collector used to track recoverable, per-item provider failures so they
surface in search diagnostics instead of aborting the request.
"""

import logging
from typing import List, Optional
from dataclasses import dataclass, field
from datetime import datetime


# ===== Exception taxonomy =====


class MatchEngineError(Exception):
    """Base class for errors that end a search request."""

    status_code: int = 500
    code: str = "MATCH_ENGINE_ERROR"

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        data = {"error": self.message, "code": self.code}
        if self.details:
            data["details"] = self.details
        return data


class ConfigurationError(MatchEngineError):
    """Provider credentials or required settings are missing."""

    status_code = 500
    code = "CONFIGURATION_ERROR"


class EmptyInputError(MatchEngineError):
    """Empty mission or a session without candidates."""

    status_code = 400
    code = "EMPTY_INPUT"


class NoMatchesError(MatchEngineError):
    """The pipeline ran but nothing relevant survived."""

    status_code = 404
    code = "NO_RELEVANT_MATCHES"


class SearchTimeoutError(MatchEngineError):
    """The end-to-end search deadline expired."""

    status_code = 408
    code = "REQUEST_TIMEOUT"


class EmbeddingProviderError(MatchEngineError):
    """The mission itself could not be embedded."""

    status_code = 502
    code = "EMBEDDING_PROVIDER_ERROR"


class MissionParseError(MatchEngineError):
    """The chat model did not return usable mission attributes."""

    status_code = 502
    code = "MISSION_PARSE_ERROR"


# ===== Recoverable failure tracking =====


@dataclass
class PipelineError:
    """
    Structured error information for a recovered stage failure.

    Provides consistent error tracking with severity and recoverability.
    """

    stage: str  # e.g., "resolver", "explainer"
    operation: str  # e.g., "embed_batch", "explain_match"
    severity: str  # "critical", "high", "medium", "low"
    message: str
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    recoverable: bool = True
    exception_type: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "stage": self.stage,
            "operation": self.operation,
            "severity": self.severity,
            "message": self.message,
            "timestamp": self.timestamp,
            "recoverable": self.recoverable,
            "exception_type": self.exception_type,
        }


class ErrorCollector:
    """
    Collects errors during a search.

    Provides aggregation and summary capabilities for diagnostics.
    """

    def __init__(self):
        self.errors: List[PipelineError] = []

    def add(self, error: PipelineError) -> None:
        self.errors.append(error)

    def add_error(
        self,
        stage: str,
        operation: str,
        message: str,
        severity: str = "medium",
        recoverable: bool = True,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Convenience method to add an error with parameters."""
        self.errors.append(
            PipelineError(
                stage=stage,
                operation=operation,
                message=message,
                severity=severity,
                recoverable=recoverable,
                exception_type=type(exception).__name__ if exception else None,
            )
        )

    def count(self, stage: Optional[str] = None) -> int:
        """Number of collected errors, optionally for a single stage."""
        if stage is None:
            return len(self.errors)
        return sum(1 for e in self.errors if e.stage == stage)

    def get_error_messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def summary(self) -> dict:
        """Get error summary statistics."""
        by_severity = {"critical": 0, "high": 0, "medium": 0, "low": 0}
        by_stage: dict = {}
        for error in self.errors:
            if error.severity in by_severity:
                by_severity[error.severity] += 1
            by_stage[error.stage] = by_stage.get(error.stage, 0) + 1
        return {
            "total": len(self.errors),
            "by_severity": by_severity,
            "by_stage": by_stage,
        }


def log_on_exception(
    logger: logging.Logger,
    operation: str,
    level: int = logging.WARNING,
    include_traceback: bool = False,
):
    """
    Context manager for logging exceptions without swallowing them silently.

    Usage:
        with log_on_exception(logger, "MongoDB upsert", level=logging.ERROR, include_traceback=True):
            collection.bulk_write(...)
    """

    class ExceptionLogger:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None:
                logger.log(level, f"[{operation}] Failed: {exc_val}", exc_info=include_traceback)
            # Never suppress
            return False

    return ExceptionLogger()
