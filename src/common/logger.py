"""
Logging for the match service.

Engine code logs through a ``SearchLogAdapter`` bound to the search id and
the stage it runs in, so one search can be followed across the prefilter,
resolver, ranker and explainer:

    [search:1f3a9c2e] [resolver] Embedding 42 candidates in 5 batches

The same two values are attached to every record as ``search_id`` and
``stage`` attributes; the json format emits them as separate fields.
"""

import json
import logging
import os
import sys
from typing import Any, MutableMapping, Optional, Tuple

SEARCH_ID_LENGTH = 8

# HTTP and driver clients that log every request at INFO
_CHATTY_LOGGERS = ("httpx", "openai", "pymongo")


def debug_mode_enabled() -> bool:
    """DEBUG_MODE=true turns on DEBUG for every engine logger."""
    return os.getenv("DEBUG_MODE", "false").lower() == "true"


class SearchLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the bound search id and stage."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        search_id = self.extra.get("search_id")
        stage = self.extra.get("stage")
        kwargs["extra"] = {**kwargs.get("extra", {}), "search_id": search_id, "stage": stage}

        prefix = []
        if search_id:
            prefix.append(f"[search:{search_id[:SEARCH_ID_LENGTH]}]")
        if stage:
            prefix.append(f"[{stage}]")
        if prefix:
            return f"{' '.join(prefix)} {msg}", kwargs
        return msg, kwargs

    def bind(self, search_id: Optional[str] = None, stage: Optional[str] = None) -> "SearchLogAdapter":
        """Same underlying logger, with search_id and/or stage replaced."""
        context = dict(self.extra)
        if search_id is not None:
            context["search_id"] = search_id
        if stage is not None:
            context["stage"] = stage
        return SearchLogAdapter(self.logger, context)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with search_id/stage when present."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key in ("search_id", "stage"):
            value = getattr(record, key, None)
            if value:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Log level name (case-insensitive)
        format: "simple" for human-readable lines, "json" for log aggregators
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(
    name: str,
    search_id: Optional[str] = None,
    stage: Optional[str] = None,
    debug_mode: Optional[bool] = None,
) -> SearchLogAdapter:
    """
    Logger for engine code.

    Args:
        name: Logger name (usually __name__)
        search_id: Search to tag messages with
        stage: Stage name ("engine", "resolver", "explainer")
        debug_mode: Force DEBUG on this logger; None follows DEBUG_MODE
    """
    logger = logging.getLogger(name)
    enabled = debug_mode if debug_mode is not None else debug_mode_enabled()
    if enabled:
        logger.setLevel(logging.DEBUG)
    return SearchLogAdapter(logger, {"search_id": search_id, "stage": stage})
