"""Application-layer reconciliation of merged keycodes with curated data.

Purpose
-------
Turn the merged firmware table into the ordered list of descriptors the
keyboard configuration tool ships, consulting the description override table
and the curated registry as read-only collaborators.

Contents
    - ``humanize``: symbolic name to display label.
    - ``RegistryIndex``: read-only lookup over curated records by code.
    - ``reconcile`` / ``reconcile_with_diagnostics``: public entry points.
    - ``parse_code``: hex key to integer code.

Fallback rules
--------------
* label: registry label, firmware label, humanized name.
* description: override, registry description, label.
* name.long: always the firmware symbolic name.
* name.short: first alias when present and non-empty, else the symbolic name.
* keywords: copied from the registry record, else ``[label]``.
* ascii: copied from the registry record, never synthesised.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Final, Iterable, Optional

from ..domain.errors import ParseError
from ..domain.keycodes import (
    ExistingDescriptor,
    KeycodeDefinition,
    KeycodeName,
    MismatchDiagnostic,
    OutputDescriptor,
)
from ..observability import log_info, log_warning

_PREFIXES: Final[tuple[str, ...]] = ("QK_", "KC_")
_HEX_KEY: Final[re.Pattern[str]] = re.compile(r"(0[xX])?[0-9A-Fa-f]+")


def humanize(name: str) -> str:
    """Return a display label derived from symbolic *name*.

    Examples
    --------
    >>> humanize("QK_MOD_TAP")
    'Mod Tap'
    >>> humanize("KC_A")
    'A'
    >>> humanize("CUSTOM_FOO_BAR")
    'Custom Foo Bar'
    """

    for prefix in _PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix) :]
            break
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split("_"))


class RegistryIndex:
    """Read-only view of the curated registry keyed by numeric code.

    When the registry lists a code more than once, the first record wins.
    """

    def __init__(self, descriptors: Iterable[ExistingDescriptor] = ()) -> None:
        index: dict[int, ExistingDescriptor] = {}
        for descriptor in descriptors:
            index.setdefault(descriptor.code, descriptor)
        self._index = index

    def lookup(self, code: int) -> Optional[ExistingDescriptor]:
        """Return the curated record for *code* or ``None``."""

        return self._index.get(code)

    def __len__(self) -> int:
        return len(self._index)


def parse_code(hex_code: str) -> int:
    """Parse a hex keycode key such as ``"0x7E00"``.

    Examples
    --------
    >>> parse_code("0x0004")
    4
    >>> parse_code("zz")
    Traceback (most recent call last):
    ...
    keycode_registry.domain.errors.ParseError: Keycode key 'zz' is not a hexadecimal number
    """

    if not isinstance(hex_code, str) or _HEX_KEY.fullmatch(hex_code) is None:
        raise ParseError(f"Keycode key {hex_code!r} is not a hexadecimal number")
    return int(hex_code, 16)


def reconcile(
    table: Mapping[str, KeycodeDefinition],
    overrides: Mapping[str, str],
    registry: RegistryIndex,
) -> list[OutputDescriptor]:
    """Return the descriptors for *table* in ascending code order.

    Mismatch diagnostics are logged; use :func:`reconcile_with_diagnostics`
    to collect them as values.
    """

    descriptors, _ = reconcile_with_diagnostics(table, overrides, registry)
    return descriptors


def reconcile_with_diagnostics(
    table: Mapping[str, KeycodeDefinition],
    overrides: Mapping[str, str],
    registry: RegistryIndex,
) -> tuple[list[OutputDescriptor], list[MismatchDiagnostic]]:
    """Reconcile *table* and return ``(descriptors, diagnostics)``.

    Raises
    ------
    ParseError
        When a hex key does not parse, or two keys denote the same code.
    """

    by_code: dict[int, KeycodeDefinition] = {}
    for hex_code, definition in table.items():
        code = parse_code(hex_code)
        if code in by_code:
            raise ParseError(f"Keycode {hex_code!r} duplicates code {code:#06x}")
        by_code[code] = definition

    descriptors: list[OutputDescriptor] = []
    diagnostics: list[MismatchDiagnostic] = []
    for code in sorted(by_code):
        definition = by_code[code]
        existing = registry.lookup(code)
        if existing is not None and existing.name.long != definition.key:
            diagnostic = MismatchDiagnostic(code=code, source_name=definition.key, registry_name=existing.name.long)
            log_warning("keycode_mismatch", code=code, source=definition.key, registry=existing.name.long)
            diagnostics.append(diagnostic)
        descriptors.append(_describe(code, definition, overrides, existing))

    log_info("registry_reconciled", keys=len(descriptors), mismatches=len(diagnostics))
    return descriptors, diagnostics


def _describe(
    code: int,
    definition: KeycodeDefinition,
    overrides: Mapping[str, str],
    existing: Optional[ExistingDescriptor],
) -> OutputDescriptor:
    label = _first_text(
        existing.label if existing else None,
        definition.label,
        humanize(definition.key),
    )
    description = _first_text(
        overrides.get(definition.key),
        existing.description if existing else None,
        label,
    )
    short = definition.aliases[0] if definition.aliases else None
    return OutputDescriptor(
        description=description,
        code=code,
        label=label,
        name=KeycodeName(long=definition.key, short=short or definition.key),
        keywords=existing.keywords if existing else (label,),
        ascii=existing.ascii if existing else None,
    )


def _first_text(*candidates: Optional[str]) -> str:
    """Return the first non-empty candidate, or ``""`` when all are empty."""

    for candidate in candidates:
        if candidate:
            return candidate
    return ""
