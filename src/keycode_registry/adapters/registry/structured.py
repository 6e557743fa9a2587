"""Curated registry loaders.

Purpose
-------
Read the descriptor records that predate this run from a JSON or YAML
document. Both the flat descriptor shape written by this project and the
nested ``{desc, keycodeInfo}`` shape of the legacy registry are accepted.

Contents
--------
* :class:`StructuredRegistryLoader` – suffix-dispatching loader.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from ...domain.errors import ConfigurationError, ParseError
from ...domain.keycodes import ExistingDescriptor
from ...observability import log_debug, log_error


class StructuredRegistryLoader:
    """Load curated registry records from ``.json``, ``.yaml`` or ``.yml`` files."""

    def load(self, path: Path) -> list[ExistingDescriptor]:
        """Return the registry records stored at *path* in document order.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> doc = Path(tmp.name) / "registry.json"
        >>> _ = doc.write_text('[{"code": 4, "name": {"long": "KC_A", "short": "KC_A"}}]', encoding="utf-8")
        >>> [record.code for record in StructuredRegistryLoader().load(doc)]
        [4]
        >>> tmp.cleanup()
        """

        if not path.is_file():
            raise ConfigurationError(f"Registry file not found: {path}")
        document = self._decode(path)
        if document is None:
            document = []
        if not isinstance(document, list):
            raise ParseError(f"Registry file {path} did not produce a list")
        try:
            records = [ExistingDescriptor.from_mapping(entry) for entry in document]
        except ParseError as exc:
            raise ParseError(f"{path}: {exc}") from exc
        log_debug("registry_loaded", path=str(path), records=len(records))
        return records

    def _decode(self, path: Path) -> Any:
        suffix = path.suffix.lower()
        payload = path.read_bytes()
        if suffix == ".json":
            try:
                return json.loads(payload)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                log_error("registry_invalid", path=str(path), format="json", error=str(exc))
                raise ParseError(f"Invalid JSON in {path}: {exc}") from exc
        if suffix in {".yaml", ".yml"}:
            try:
                return yaml.safe_load(payload)
            except yaml.YAMLError as exc:
                log_error("registry_invalid", path=str(path), format="yaml", error=str(exc))
                raise ParseError(f"Invalid YAML in {path}: {exc}") from exc
        raise ConfigurationError(f"Unsupported registry format: {path}")
