"""Structured logging for the orchestration core.

Every entry is a structlog event with key-value fields. Entries pick up:
- process-wide fields set with ``set_global_context``
- the scoped ``LogContext`` (agent, task, collaboration, correlation id)
  managed by ``log_context``
- fields bound to the logger itself with ``AgentLogger.bind``

Output goes to the console, or through the standard library's rotating
file handler when a ``FileExporter`` is configured.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, TextIO, Union

import structlog
from structlog.types import Processor

ROOT_LOGGER = "agent_orchestrator"


class LogLevel(str, Enum):
    """Severity names accepted by ``LogConfig`` and ``AgentLogger.log``."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_int(self) -> int:
        """Numeric level as used by the ``logging`` module."""
        return logging.getLevelName(self.name)


_CONTEXT_FIELDS = ("correlation_id", "agent_name", "task_id", "collaboration_id")


@dataclass
class LogContext:
    """Fields attached to every entry logged in the current scope.

    Attributes:
        correlation_id: Ties together entries about one task across agents.
        agent_name: Agent doing the work.
        task_id: Task being worked on.
        collaboration_id: Collaboration being driven.
        extra: Any other scoped fields.
    """

    correlation_id: Optional[str] = None
    agent_name: Optional[str] = None
    task_id: Optional[str] = None
    collaboration_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, followed by ``extra``."""
        result = {
            name: getattr(self, name) for name in _CONTEXT_FIELDS if getattr(self, name)
        }
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> "LogContext":
        """Copy of this context with ``kwargs`` merged into ``extra``."""
        return LogContext(
            **{name: getattr(self, name) for name in _CONTEXT_FIELDS},
            extra={**self.extra, **kwargs},
        )


_log_context: ContextVar[Optional[LogContext]] = ContextVar(
    "agent_orchestrator_log_context", default=None
)

_global_context: Dict[str, Any] = {}


def set_context(context: LogContext) -> None:
    _log_context.set(context)


def get_context() -> Optional[LogContext]:
    return _log_context.get()


def clear_context() -> None:
    _log_context.set(None)


@contextmanager
def log_context(**fields: Any) -> Iterator[LogContext]:
    """Temporarily extend the current log context.

    Known fields (``agent_name``, ``task_id``, ``collaboration_id``,
    ``correlation_id``) replace the current values; anything else lands in
    ``extra``. The previous context is restored on exit.
    """
    current = get_context() or LogContext()
    known = {name: fields.pop(name, getattr(current, name)) for name in _CONTEXT_FIELDS}
    token = _log_context.set(LogContext(**known, extra={**current.extra, **fields}))
    try:
        yield _log_context.get()
    finally:
        _log_context.reset(token)


def set_global_context(**kwargs: Any) -> None:
    """Add fields to every entry logged by this process."""
    _global_context.update(kwargs)


def clear_global_context() -> None:
    _global_context.clear()


def get_global_context() -> Dict[str, Any]:
    return dict(_global_context)


@dataclass
class LogExporter:
    """Where rendered entries go."""

    name: str
    min_level: LogLevel = LogLevel.DEBUG


@dataclass
class ConsoleExporter(LogExporter):
    """Write entries to a stream, stderr by default."""

    name: str = "console"
    stream: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool = True


@dataclass
class FileExporter(LogExporter):
    """Write JSON entries to a size-rotated file."""

    name: str = "file"
    path: Union[str, Path] = "agent_orchestrator.log"
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5


@dataclass
class LogConfig:
    """Configuration for ``configure_logging``.

    Attributes:
        level: Entries below this level are dropped.
        exporters: Destinations; a single console exporter when empty.
        include_caller: Add file, function and line fields.
        json_format: Render JSON on the console too.
    """

    level: LogLevel = LogLevel.INFO
    exporters: List[LogExporter] = field(default_factory=list)
    include_caller: bool = False
    json_format: bool = False

    def __post_init__(self) -> None:
        self.exporters = self.exporters or [ConsoleExporter()]


_configured = False


def _shared_processors(config: LogConfig) -> List[Processor]:
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if config.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())
    return processors


def _file_handler(exporter: FileExporter) -> logging.Handler:
    path = Path(exporter.path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path, maxBytes=exporter.max_bytes, backupCount=exporter.backup_count
    )
    handler.setLevel(exporter.min_level.to_int())
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def configure_logging(config: Optional[LogConfig] = None) -> None:
    """Configure structlog for the orchestration core.

    Console-only setups print through structlog directly. With any file
    exporter, entries are rendered as JSON and handed to the stdlib
    ``agent_orchestrator`` logger, which owns the rotating file handlers
    (and a stream handler for the console exporter, if any). Calling this
    again replaces the previous handlers.
    """
    global _configured
    config = config or LogConfig()
    files = [e for e in config.exporters if isinstance(e, FileExporter)]
    console = next((e for e in config.exporters if isinstance(e, ConsoleExporter)), None)

    processors = _shared_processors(config)
    if config.json_format or files:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=bool(console and console.colors)))

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    logger_factory: Any
    if files:
        root.setLevel(config.level.to_int())
        for exporter in files:
            root.addHandler(_file_handler(exporter))
        if console:
            stream_handler = logging.StreamHandler(console.stream)
            stream_handler.setLevel(console.min_level.to_int())
            root.addHandler(stream_handler)
        logger_factory = structlog.stdlib.LoggerFactory()
    else:
        logger_factory = structlog.PrintLoggerFactory(
            file=console.stream if console else sys.stderr
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(config.level.to_int()),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )
    _configured = True


class AgentLogger:
    """Structured logger that merges global, scoped and bound fields.

    Later sources win: global context, then the current ``LogContext``,
    then bound fields, then the call's own keyword arguments.
    """

    def __init__(self, name: str, bound: Optional[Dict[str, Any]] = None):
        """Initialize the logger.

        Args:
            name: Dotted logger name, usually ``__name__``.
            bound: Fields added to every entry of this logger.
        """
        self.name = name
        self._bound = dict(bound or {})
        self._logger = structlog.get_logger(name)

    def _fields(self, extra: Dict[str, Any]) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"logger": self.name, **_global_context}
        current = get_context()
        if current:
            fields.update(current.to_dict())
        fields.update(self._bound)
        fields.update(extra)
        return fields

    def bind(self, **kwargs: Any) -> "AgentLogger":
        """New logger with ``kwargs`` added to the bound fields."""
        return AgentLogger(self.name, {**self._bound, **kwargs})

    def debug(self, event: str, **kwargs: Any) -> None:
        self._logger.debug(event, **self._fields(kwargs))

    def info(self, event: str, **kwargs: Any) -> None:
        self._logger.info(event, **self._fields(kwargs))

    def warning(self, event: str, **kwargs: Any) -> None:
        self._logger.warning(event, **self._fields(kwargs))

    def error(self, event: str, **kwargs: Any) -> None:
        self._logger.error(event, **self._fields(kwargs))

    def critical(self, event: str, **kwargs: Any) -> None:
        self._logger.critical(event, **self._fields(kwargs))

    def exception(self, event: str, **kwargs: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self._logger.exception(event, **self._fields(kwargs))

    def log(self, level: LogLevel, event: str, **kwargs: Any) -> None:
        getattr(self, LogLevel(level).value)(event, **kwargs)


_loggers: Dict[str, AgentLogger] = {}


def get_logger(name: str = ROOT_LOGGER) -> AgentLogger:
    """Return the shared logger for ``name``.

    The first call configures logging with defaults unless
    ``configure_logging`` already ran.
    """
    if not _configured:
        configure_logging()
    return _loggers.setdefault(name, AgentLogger(name))
