"""Logging utilities."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


_outline_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("eduforge_outline_id", default="-")
_op_var: contextvars.ContextVar[str] = contextvars.ContextVar("eduforge_op", default="-")


class _ContextFilter(logging.Filter):
    """Inject outline context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.outline_id = _outline_id_var.get()  # type: ignore[attr-defined]
        record.op = _op_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def outline_context(*, outline_id: str, op: str | None = None) -> Any:
    """Temporarily bind outline context for structured logging.

    Args:
        outline_id: Outline identifier.
        op: Optional operation name (e.g. ``generate``, ``save``).
    """

    token_outline = _outline_id_var.set(outline_id)
    token_op = _op_var.set(op or _op_var.get())
    try:
        yield
    finally:
        _outline_id_var.reset(token_outline)
        _op_var.reset(token_op)


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Logging level name.
    """

    # stdout carries command output (outline JSON), so logs go to stderr.
    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_time=True, show_level=True)
    handler.addFilter(_ContextFilter())

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s outline=%(outline_id)s op=%(op)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    # Avoid duplicate handlers if configure_logging is called multiple times
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(handler)
    else:
        for h in root.handlers:
            if isinstance(h, RichHandler):
                h.addFilter(_ContextFilter())
                h.setFormatter(formatter)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log the active exception with its traceback.

    The bound outline context is attached by the handler filter; `context` adds call-specific
    fields such as the model name.
    """

    if context:
        logger.exception("%s | context=%s", msg, context)
    else:
        logger.exception("%s", msg)
