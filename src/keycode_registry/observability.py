"""Structured logging helpers shared by the pipeline stages.

Purpose
    Keep every emission of logging data predictable and contextual so a run
    over the firmware keycode tree can be followed from the first loaded file
    to the written artifact, without forcing a specific logging backend.

Contents
    - ``RUN_ID``: context variable storing the active run identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_run_id``: binds or clears the active run identifier.
    - ``log_debug`` / ``log_info`` / ``log_warning`` / ``log_error``: emit
      structured entries via a single private emitter.
    - ``make_event``: convenience builder for category/version event payloads.

System Integration
    Used by the merger, the reconciliation engine, the adapters, and the
    composition root. The domain layer stays free from logging concerns.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

RUN_ID: ContextVar[str | None] = ContextVar("keycode_registry_run_id", default=None)
"""Identifier of the build run currently in progress, if any."""

_LOGGER: Final[logging.Logger] = logging.getLogger("keycode_registry")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving the CLI (or any host
        application) full control over handler and formatter configuration.
    """

    return _LOGGER


def bind_run_id(run_id: str | None) -> None:
    """Bind or clear the active run identifier.

    Examples
    --------
    >>> bind_run_id('run-1')
    >>> RUN_ID.get()
    'run-1'
    >>> bind_run_id(None)
    >>> RUN_ID.get() is None
    True
    """

    RUN_ID.set(run_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the run context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the run context."""

    _emit(logging.INFO, message, fields)


def log_warning(message: str, **fields: Any) -> None:
    """Emit a structured warning log entry that includes the run context."""

    _emit(logging.WARNING, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the run context."""

    _emit(logging.ERROR, message, fields)


def make_event(
    category: str,
    version: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for a category/version event.

    Examples
    --------
    >>> make_event('_', '0.0.1', {'keys': 3})
    {'category': '_', 'version': '0.0.1', 'keys': 3}
    """

    event: dict[str, Any] = {"category": category, "version": version}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_run(fields)})


def _with_run(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the current run identifier to the provided structured fields."""

    context = {"run_id": RUN_ID.get()}
    context.update(fields)
    return context
