"""Description override table loader.

Reads the tab separated ``symbolic name -> description`` table curated next
to the registry. One record per line, no header.
"""

from __future__ import annotations

from pathlib import Path

from ...domain.errors import ConfigurationError
from ...observability import log_debug, log_info


class TsvOverrideLoader:
    """Load the description override table from a TSV file."""

    def load(self, path: Path) -> dict[str, str]:
        """Return the override mapping stored at *path*.

        Blank lines are skipped, lines without a tab are skipped with a debug
        event, and a later record for the same name replaces an earlier one.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> table = Path(tmp.name) / "descriptions.tsv"
        >>> _ = table.write_bytes(b"KC_A\\tLetter A\\r\\nKC_B\\tLetter B\\r\\n")
        >>> TsvOverrideLoader().load(table)
        {'KC_A': 'Letter A', 'KC_B': 'Letter B'}
        >>> tmp.cleanup()
        """

        if not path.is_file():
            raise ConfigurationError(f"Description override table not found: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"Description override table unreadable: {path}: {exc}") from exc

        overrides: dict[str, str] = {}
        for number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            name, separator, description = line.partition("\t")
            if not separator:
                log_debug("override_line_skipped", path=str(path), line=number)
                continue
            overrides[name] = description
        log_info("overrides_loaded", path=str(path), keys=len(overrides))
        return overrides
