# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with install context
# PURPOSE: Consistent, queryable logging across the installation pipeline
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging

Provides structured logging for the dataset installer, either as JSON
lines (for log aggregation) or as human-readable text (for the CLI).

Features:
- Component-based loggers
- Contextual fields (install_id, dataset_name, cache_name, phase)
- Named checkpoints marking pipeline milestones

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("services.production")

    with log_context(install_id="a1b2", dataset_name="ortho"):
        logger.info("Offering sources", extra={"file_count": 5})
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from enum import Enum


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    CLASSIFIER = "classifier"
    PRODUCER = "producer"
    COORDINATOR = "coordinator"
    EMITTER = "emitter"
    BINDER = "binder"
    STORE = "store"
    CLI = "cli"


@dataclass
class LogContext:
    """
    Context for structured logging.

    Thread-local storage for contextual fields. Each install runs on its
    own worker thread, so contexts never leak between installs.
    """
    install_id: Optional[str] = None
    dataset_name: Optional[str] = None
    cache_name: Optional[str] = None
    producer: Optional[str] = None
    phase: Optional[str] = None
    component: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {}
        for key, value in asdict(self).items():
            if value is not None and key != "extra":
                result[key] = value
        if self.extra:
            result.update(self.extra)
        return result


_context_stack = threading.local()


def _get_context_stack() -> list:
    """Get thread-local context stack."""
    if not hasattr(_context_stack, "stack"):
        _context_stack.stack = []
    return _context_stack.stack


def get_current_context() -> LogContext:
    """Get current logging context."""
    stack = _get_context_stack()
    if stack:
        return stack[-1]
    return LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Context manager for adding logging context.

    Args:
        **kwargs: Context fields to add (unknown names go into extra)

    Example:
        with log_context(dataset_name="ortho", phase="offering"):
            logger.info("Offering sources")
    """
    parent = get_current_context()
    known = {"install_id", "dataset_name", "cache_name", "producer", "phase", "component"}
    extra = {**parent.extra, **kwargs.get("extra", {})}
    for key, value in kwargs.items():
        if key not in known and key != "extra":
            extra[key] = value

    new_context = LogContext(
        install_id=kwargs.get("install_id", parent.install_id),
        dataset_name=kwargs.get("dataset_name", parent.dataset_name),
        cache_name=kwargs.get("cache_name", parent.cache_name),
        producer=kwargs.get("producer", parent.producer),
        phase=kwargs.get("phase", parent.phase),
        component=kwargs.get("component", parent.component),
        extra=extra,
    )

    stack = _get_context_stack()
    stack.append(new_context)
    try:
        yield new_context
    finally:
        stack.pop()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easy parsing by log aggregators.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_context: bool = True,
        include_source: bool = True,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_context = include_context
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = _utcnow().isoformat()

        log_data["level"] = record.levelname
        log_data["logger"] = record.name
        log_data["message"] = record.getMessage()

        if self.include_context:
            context_dict = get_current_context().to_dict()
            if context_dict:
                log_data["context"] = context_dict

        if hasattr(record, "extra") and record.extra:
            log_data["data"] = record.extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_source:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """
    Human-readable formatter for development and the CLI.

    Includes the dataset and phase inline for easy reading.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human reading."""
        timestamp = _utcnow().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        context_parts = []
        if context.dataset_name:
            context_parts.append(f"dataset={context.dataset_name}")
        if context.phase:
            context_parts.append(f"phase={context.phase}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        result = f"{timestamp} {level} {record.name}{context_str}: {record.getMessage()}"

        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"

        return result


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in log records.

    Automatically includes thread-local context in all log messages.
    """

    def process(self, msg, kwargs):
        """Process log record to include context."""
        context = get_current_context()

        extra = dict(kwargs.get("extra") or {})
        extra.update(context.to_dict())

        # Stored as a single attribute for formatter access
        kwargs["extra"] = {"extra": extra}

        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "services.production")
        component: Optional component type for categorization

    Returns:
        ContextLogger instance
    """
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, {"component": component})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter(include_context=True)
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named pipeline checkpoint.

    Args:
        name: Checkpoint name (e.g., "install_started", "production_rolled_back")
        data: Optional checkpoint data
        logger: Optional specific logger to use
    """
    if logger is None:
        logger = logging.getLogger("checkpoint")

    checkpoint_data: Dict[str, Any] = {
        "checkpoint": name,
        "timestamp": _utcnow().isoformat(),
    }

    context = get_current_context()
    if context.install_id:
        checkpoint_data["install_id"] = context.install_id
    if context.dataset_name:
        checkpoint_data["dataset_name"] = context.dataset_name

    if data:
        checkpoint_data["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": checkpoint_data})


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
