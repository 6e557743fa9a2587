"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by adapters, the pipeline stages, and the
composition root. Every error in this module is fatal: a run that raises one
aborts before the output artifact is written.

Contents
--------
* :class:`RegistryError` – umbrella base class for all pipeline failures.
* :class:`ConfigurationError` – a required input source is missing or
  unreadable, or the run settings are invalid.
* :class:`ParseError` – structured content is malformed or a keycode's hex
  key does not parse.
* :class:`PatternMismatchError` – a source file name does not follow the
  ``keycodes_<version>[_<category>]`` naming pattern.

Non-fatal symbolic name disagreements are not exceptions; they are reported as
:class:`keycode_registry.domain.keycodes.MismatchDiagnostic` values.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base type for all exceptions emitted by ``keycode_registry``.

    Callers that do not need fine-grained handling catch this single type.
    """


class ConfigurationError(RegistryError):
    """Raised when a required input source is missing or the settings are invalid.

    Typical Sources
    ---------------
    The source directory, the description override table, the optional
    registry file, and the ``keycode-registry.toml`` settings file.
    """


class ParseError(RegistryError):
    """Raised when an input artifact cannot be turned into the expected structure.

    Typical Sources
    ---------------
    HJSON source files, the registry document, and hex keycode keys met during
    reconciliation.
    """


class PatternMismatchError(RegistryError):
    """Raised when a source file name does not carry a parseable version.

    Why
    ----
    A file without a version cannot be placed in the layering order, so the
    run stops instead of guessing.
    """
