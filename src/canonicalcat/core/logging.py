"""Logging setup for ccat.

structlog events are rendered by stdlib handlers, one per configured output.
Console outputs go quiet while a spinner owns the terminal; file outputs keep
everything. ``ccat generate`` binds a ``run_id`` into structlog's context so
the lines of one run can be picked out of a shared log file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from canonicalcat.core.progress import is_console_suppressed

if TYPE_CHECKING:
    from canonicalcat.config.models import LoggingConfig, LogOutputConfig

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
]

# First file output, named in the CLI error when a run fails
_log_file_path: Path | None = None


def bind_run_id(run_id: str | None = None) -> str:
    """Tag every following record in this context with a run id."""
    rid = run_id or uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(run_id=rid)
    return rid


def get_log_file_path() -> Path | None:
    return _log_file_path


class ConsoleSuppressingFilter(logging.Filter):
    """Drop console records while a Rich live display is drawing."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        return not is_console_suppressed()


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _build_handler(output: LogOutputConfig, level: int) -> logging.Handler:
    handler: logging.Handler
    if output.destination in ("stderr", "stdout"):
        stream = sys.stderr if output.destination == "stderr" else sys.stdout
        handler = logging.StreamHandler(stream)
        handler.addFilter(ConsoleSuppressingFilter())
        colors = stream.isatty()
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        colors = False

    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)

    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_PRE_CHAIN)
    )
    return handler


def configure_logging(config: LoggingConfig | None = None, *, level: str = "INFO") -> None:
    """(Re)configure structlog and the root logger.

    Without ``config`` a single console output on stderr is set up at ``level``.
    Calling again replaces every handler installed before.
    """
    global _log_file_path
    from canonicalcat.config.models import LoggingConfig

    if config is None:
        config = LoggingConfig(level=level)  # type: ignore[arg-type]
    root_level = _level(config.level)

    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration must reach loggers created at import time
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(root_level)

    _log_file_path = None
    for output in config.outputs:
        if output.destination not in ("stderr", "stdout") and _log_file_path is None:
            _log_file_path = Path(output.destination)
        output_level = _level(output.level) if output.level else root_level
        root.addHandler(_build_handler(output, output_level))
