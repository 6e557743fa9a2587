"""Descriptor list writer.

Serialises the reconciled descriptors as one human-formatted JSON array. The
document is written to a temporary sibling first and moved into place, so a
failed run never leaves a truncated artifact behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Sequence

from ...domain.keycodes import OutputDescriptor
from ...observability import log_info

_CREATE_MODE = 0o666


class JsonDescriptorWriter:
    """Write descriptors as a 2-space indented JSON array."""

    def write(self, path: Path, descriptors: Sequence[OutputDescriptor]) -> None:
        """Replace *path* with the serialised *descriptors*."""

        body = json.dumps([descriptor.to_dict() for descriptor in descriptors], indent=2, ensure_ascii=False) + "\n"
        path.parent.mkdir(parents=True, exist_ok=True)
        handle, temporary = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                stream.write(body)
            os.chmod(temporary, _CREATE_MODE & ~_current_umask())
            os.replace(temporary, path)
        except BaseException:
            Path(temporary).unlink(missing_ok=True)
            raise
        log_info("output_written", path=str(path), keys=len(descriptors))


def _current_umask() -> int:
    """Return the process umask; ``mkstemp`` ignores it and creates files as 0600."""

    umask = os.umask(0)
    os.umask(umask)
    return umask
