"""Firmware keycode file loader.

Purpose
-------
Walk the firmware ``data/constants/keycodes`` directory, decode each
``keycodes_<version>[_<category>].hjson`` file with the ``hjson`` library, and
group the ``keycodes`` sections into a :data:`SourceCorpus`.

Contents
--------
* :data:`FILENAME_PATTERN` – the accepted file naming pattern.
* :func:`parse_filename` – split a file name into ``(version, category)``.
* :class:`HjsonSourceLoader` – the :class:`~keycode_registry.application.ports.SourceLoader`
  implementation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Final, Optional

import hjson

from ...application.merge import SourceCorpus
from ...domain.errors import ConfigurationError, ParseError, PatternMismatchError
from ...domain.keycodes import DEFAULT_CATEGORY, VersionLayer
from ...observability import log_debug, log_error, log_info, make_event

SOURCE_SUFFIX: Final[str] = ".hjson"
FILENAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^keycodes_(\d+\.\d+\.\d+)(_[a-z_]+)?\.hjson$")


def parse_filename(filename: str) -> tuple[str, str]:
    """Return ``(version, category)`` encoded in *filename*.

    Examples
    --------
    >>> parse_filename("keycodes_0.0.1.hjson")
    ('0.0.1', '_')
    >>> parse_filename("keycodes_0.0.2_quantum.hjson")
    ('0.0.2', 'quantum')
    >>> parse_filename("keycodes_latest.hjson")
    Traceback (most recent call last):
    ...
    keycode_registry.domain.errors.PatternMismatchError: File name keycodes_latest.hjson does not match keycodes_<MAJOR.MINOR.PATCH>[_<category>].hjson
    """

    match = FILENAME_PATTERN.match(filename)
    if match is None:
        raise PatternMismatchError(
            f"File name {filename} does not match keycodes_<MAJOR.MINOR.PATCH>[_<category>].hjson"
        )
    version, suffix = match.groups()
    category = suffix[1:] if suffix else DEFAULT_CATEGORY
    return version, category


class HjsonSourceLoader:
    """Load every firmware keycode file below a directory."""

    def load(self, directory: Path) -> SourceCorpus:
        """Return ``category -> version -> layer`` for the files in *directory*.

        Raises
        ------
        ConfigurationError
            When *directory* does not exist.
        PatternMismatchError
            When an ``.hjson`` file name carries no parseable version.
        ParseError
            When a file does not decode into the expected structure.
        """

        if not directory.is_dir():
            raise ConfigurationError(f"Keycode source directory not found: {directory}")
        corpus: dict[str, dict[str, Optional[VersionLayer]]] = {}
        for path in sorted(directory.iterdir()):
            if path.suffix != SOURCE_SUFFIX or not path.is_file():
                continue
            version, category = parse_filename(path.name)
            layer = self._load_layer(path)
            corpus.setdefault(category, {})[version] = layer
            log_debug(
                "source_file_loaded",
                **make_event(category, version, {"path": str(path), "keys": len(layer.definitions) if layer else 0}),
            )
        log_info("source_corpus_loaded", path=str(directory), categories=sorted(corpus))
        return corpus

    def _load_layer(self, path: Path) -> Optional[VersionLayer]:
        """Decode *path* and return its ``keycodes`` layer, ``None`` when absent."""

        try:
            document = hjson.loads(path.read_text(encoding="utf-8"))
        except (hjson.HjsonDecodeError, UnicodeDecodeError) as exc:
            log_error("source_file_invalid", path=str(path), error=str(exc))
            raise ParseError(f"Invalid HJSON in {path}: {exc}") from exc
        if not isinstance(document, Mapping):
            raise ParseError(f"File {path} did not produce a mapping")
        ranges = document.get("ranges")
        if ranges is not None and not isinstance(ranges, Mapping):
            raise ParseError(f"File {path} has a malformed ranges section")
        keycodes = document.get("keycodes")
        if keycodes is None:
            return None
        if not isinstance(keycodes, Mapping):
            raise ParseError(f"File {path} has a malformed keycodes section")
        try:
            return VersionLayer.from_mapping(keycodes)
        except ParseError as exc:
            raise ParseError(f"{path}: {exc}") from exc
