"""Public package surface for the keycode registry builder.

Exposes the two pure pipeline stages (:func:`merge_corpus` and
:func:`reconcile`), the full run (:func:`build_registry`), and the logging
hooks so ``import keycode_registry`` and ``python -m keycode_registry`` share
the same entry points.
"""

from __future__ import annotations

from .application.merge import merge_corpus
from .application.reconcile import RegistryIndex, humanize, reconcile, reconcile_with_diagnostics
from .core import BuildReport, build_registry, run_pipeline
from .domain.errors import ConfigurationError, ParseError, PatternMismatchError, RegistryError
from .domain.keycodes import (
    DEFAULT_CATEGORY,
    RESET_KEY,
    ExistingDescriptor,
    KeycodeDefinition,
    KeycodeName,
    MismatchDiagnostic,
    OutputDescriptor,
    VersionLayer,
)
from .observability import bind_run_id, get_logger
from .settings import Settings, resolve_settings

__all__ = [
    "BuildReport",
    "ConfigurationError",
    "DEFAULT_CATEGORY",
    "ExistingDescriptor",
    "KeycodeDefinition",
    "KeycodeName",
    "MismatchDiagnostic",
    "OutputDescriptor",
    "ParseError",
    "PatternMismatchError",
    "RESET_KEY",
    "RegistryError",
    "RegistryIndex",
    "Settings",
    "VersionLayer",
    "bind_run_id",
    "build_registry",
    "get_logger",
    "humanize",
    "merge_corpus",
    "reconcile",
    "reconcile_with_diagnostics",
    "resolve_settings",
    "run_pipeline",
]
