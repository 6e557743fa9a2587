"""Domain value objects describing keycodes before and after reconciliation.

Purpose
-------
Anchor the immutable records that flow through the pipeline: raw firmware
definitions, per-version layers, curated registry entries, and the emitted
descriptors. This module contains no I/O.

Contents
--------
* :data:`RESET_KEY` / :data:`DEFAULT_CATEGORY` – reserved markers used by the
  firmware keycode files.
* :class:`KeycodeDefinition` – one firmware keycode definition.
* :class:`VersionLayer` – the definitions one version contributes to one
  category, with the reset directive lifted out of the key space.
* :class:`KeycodeName` – long/short symbolic names.
* :class:`ExistingDescriptor` – a record from the curated registry.
* :class:`OutputDescriptor` – the emitted record.
* :class:`MismatchDiagnostic` – non-fatal name disagreement.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final, Optional

from .errors import ParseError

RESET_KEY: Final[str] = "!reset!"
"""Sentinel key inside a ``keycodes`` section that discards the category so far."""

DEFAULT_CATEGORY: Final[str] = "_"
"""Category marker for files without a ``_<category>`` suffix."""


@dataclass(frozen=True, slots=True)
class KeycodeDefinition:
    """A single keycode as defined by one firmware version.

    Attributes
    ----------
    key:
        Symbolic name (``"KC_A"``).
    group:
        Optional firmware grouping (``"basic"``, ``"quantum"`` ...).
    aliases:
        Ordered alternative names; the first one is the short name.
    label:
        Optional display label supplied by the firmware.
    """

    key: str
    group: Optional[str] = None
    aliases: Optional[tuple[str, ...]] = None
    label: Optional[str] = None

    @classmethod
    def from_mapping(cls, raw: object, *, code: str = "?") -> KeycodeDefinition:
        """Build a definition from a raw ``keycodes`` entry.

        Examples
        --------
        >>> KeycodeDefinition.from_mapping({"key": "KC_A", "aliases": ["A"]})
        KeycodeDefinition(key='KC_A', group=None, aliases=('A',), label=None)
        """

        if not isinstance(raw, Mapping):
            raise ParseError(f"Keycode {code} is not a mapping")
        key = raw.get("key")
        if not isinstance(key, str) or not key:
            raise ParseError(f"Keycode {code} has no symbolic name")
        aliases = raw.get("aliases")
        if aliases is not None:
            if not isinstance(aliases, (list, tuple)) or not all(isinstance(alias, str) for alias in aliases):
                raise ParseError(f"Keycode {code} ({key}) has malformed aliases")
            aliases = tuple(aliases)
        return cls(
            key=key,
            group=_optional_text(raw, "group", code),
            aliases=aliases,
            label=_optional_text(raw, "label", code),
        )


@dataclass(frozen=True, slots=True)
class VersionLayer:
    """Definitions contributed by one version of one category.

    ``reset`` is ``True`` when the layer carried the :data:`RESET_KEY`
    sentinel. The sentinel itself never appears in ``definitions``.
    """

    definitions: Mapping[str, KeycodeDefinition] = field(default_factory=dict)
    reset: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> VersionLayer:
        """Parse a raw ``keycodes`` section, lifting the reset sentinel out.

        Examples
        --------
        >>> layer = VersionLayer.from_mapping({"!reset!": {}, "0x02": {"key": "KC_B"}})
        >>> layer.reset, list(layer.definitions)
        (True, ['0x02'])
        """

        definitions = {
            code: KeycodeDefinition.from_mapping(entry, code=code)
            for code, entry in raw.items()
            if code != RESET_KEY
        }
        return cls(definitions=definitions, reset=RESET_KEY in raw)


@dataclass(frozen=True, slots=True)
class KeycodeName:
    """Long (canonical) and short (first alias) symbolic names."""

    long: str
    short: str


@dataclass(frozen=True, slots=True)
class ExistingDescriptor:
    """A record from the curated registry that predates this run."""

    code: int
    name: KeycodeName
    description: Optional[str] = None
    label: Optional[str] = None
    keywords: tuple[str, ...] = ()
    ascii: Optional[str] = None

    @classmethod
    def from_mapping(cls, raw: object) -> ExistingDescriptor:
        """Build a record from either the flat output shape or the nested legacy shape.

        The legacy shape nests everything but the description below
        ``keycodeInfo`` and calls the description ``desc``.

        Examples
        --------
        >>> legacy = {"desc": "Letter A", "keycodeInfo": {"code": 4, "name": {"long": "KC_A", "short": "KC_A"}}}
        >>> ExistingDescriptor.from_mapping(legacy).description
        'Letter A'
        """

        if not isinstance(raw, Mapping):
            raise ParseError("Registry entry is not a mapping")
        if isinstance(raw.get("keycodeInfo"), Mapping):
            info: Mapping[str, Any] = raw["keycodeInfo"]
            description = raw.get("desc")
        else:
            info = raw
            description = raw.get("description")
        code = info.get("code")
        if not isinstance(code, int) or isinstance(code, bool):
            raise ParseError(f"Registry entry has no integer code: {code!r}")
        name = info.get("name")
        if not isinstance(name, Mapping) or not isinstance(name.get("long"), str):
            raise ParseError(f"Registry entry {code} has no long name")
        keywords = info.get("keywords") or ()
        if not isinstance(keywords, (list, tuple)):
            raise ParseError(f"Registry entry {code} has malformed keywords")
        return cls(
            code=code,
            name=KeycodeName(long=name["long"], short=_scalar_text(name.get("short"), "short", code) or name["long"]),
            description=_scalar_text(description, "description", code),
            label=_scalar_text(info.get("label"), "label", code),
            keywords=tuple(str(word) for word in keywords),
            ascii=_scalar_text(info.get("ascii"), "ascii", code),
        )


@dataclass(frozen=True, slots=True)
class OutputDescriptor:
    """The enriched record emitted for one keycode."""

    description: str
    code: int
    label: str
    name: KeycodeName
    keywords: tuple[str, ...]
    ascii: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        """Return the JSON-ready mapping; ``ascii`` is omitted when absent.

        Examples
        --------
        >>> OutputDescriptor("Zzz", 5, "Zzz", KeycodeName("KC_ZZZ", "KC_ZZZ"), ("Zzz",)).to_dict()
        {'description': 'Zzz', 'code': 5, 'label': 'Zzz', 'name': {'long': 'KC_ZZZ', 'short': 'KC_ZZZ'}, 'keywords': ['Zzz']}
        """

        payload: dict[str, object] = {
            "description": self.description,
            "code": self.code,
            "label": self.label,
            "name": {"long": self.name.long, "short": self.name.short},
            "keywords": list(self.keywords),
        }
        if self.ascii is not None:
            payload["ascii"] = self.ascii
        return payload


@dataclass(frozen=True, slots=True)
class MismatchDiagnostic:
    """Source and registry disagree on the symbolic name of ``code``."""

    code: int
    source_name: str
    registry_name: str

    def __str__(self) -> str:
        return f"Keycode mismatch at {self.code:#06x}: {self.source_name} vs {self.registry_name}"


def _optional_text(raw: Mapping[str, object], field_name: str, code: str) -> Optional[str]:
    value = raw.get(field_name)
    if value is None or isinstance(value, str):
        return value
    raise ParseError(f"Keycode {code} has a non-text {field_name}")


def _scalar_text(value: object, field_name: str, code: int) -> Optional[str]:
    """Return *value* as text; YAML loads an unquoted ``1`` as a number."""

    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ParseError(f"Registry entry {code} has a non-text {field_name}: {value!r}")
