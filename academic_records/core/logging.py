"""Structured logging configuration for the academic records core.

Provides JSON-formatted logs with entity context so that validation
warnings (pattern repairs, legacy reconstruction) can be traced back to
the record that produced them by whatever log aggregator the host uses.
"""
import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO, Union


# Context attributes copied from ``extra=...`` into the JSON payload
CONTEXT_FIELDS = (
    "entity",
    "entity_id",
    "field",
    "country",
    "country_code",
    "pattern",
    "original_pattern",
    "phone_number",
    "domain",
    "matches",
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs one JSON object per record with timestamp, level, logger,
    message, source location and any known context attributes.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string.

        Args:
            record: LogRecord to format

        Returns:
            JSON string with log data
        """
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        if hasattr(record, "extra_fields"):
            log_obj.update(record.extra_fields)

        for attr in CONTEXT_FIELDS:
            if hasattr(record, attr):
                log_obj[attr] = getattr(record, attr)

        return json.dumps(log_obj, default=str, ensure_ascii=False)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that stamps a fixed context onto every record.

    Example:
        >>> logger = ContextLogger(base_logger, {"entity": "Student"})
        >>> logger.warning("Legacy record loaded", extra={"entity_id": "s-1"})
        # Record carries both entity and entity_id
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Return ``kwargs`` with a fresh ``extra`` holding the bound context.

        The mapping passed by the caller is left untouched; on a key clash
        the bound context wins.
        """
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs


PLAIN_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(
    level: Union[str, int] = "INFO",
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Route all records to a single console handler on the root logger.

    Args:
        level: Level name (DEBUG ... CRITICAL) or numeric level
        json_format: Emit one JSON object per record instead of plain text
        stream: Destination stream, stdout when omitted

    Returns:
        Configured root logger

    Raises:
        ValueError: ``level`` is not a known level name
    """
    numeric_level = _resolve_level(level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)
    return root_logger


def get_logger(
    name: str, context: Optional[Dict[str, Any]] = None
) -> Union[logging.Logger, ContextLogger]:
    """Module logger, wrapped in a ``ContextLogger`` when ``context`` is given.

    The context is copied, so later changes to the caller's dict do not
    leak into records.

    Example:
        >>> logger = get_logger(__name__, {"entity": "PhoneNumberConfig"})
        >>> logger.warning("Auto-fixed regex pattern", extra={"country": "Vietnam"})
    """
    logger = logging.getLogger(name)
    return ContextLogger(logger, dict(context)) if context else logger
