"""Application-layer ports describing the external collaborators.

Purpose
-------
Define the structural contracts that adapters must satisfy so the composition
root can orchestrate the pipeline without depending on concrete
implementations. The merger and the reconciliation engine never see these
ports; they receive plain in-memory structures.

Contents
--------
* :class:`SourceLoader` – groups firmware keycode files into a corpus.
* :class:`OverrideLoader` – reads the flat description override table.
* :class:`RegistryLoader` – reads the curated registry records.
* :class:`DescriptorWriter` – serialises the final descriptor list.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Protocol, Sequence, runtime_checkable

from ..domain.keycodes import ExistingDescriptor, OutputDescriptor
from .merge import SourceCorpus


@runtime_checkable
class SourceLoader(Protocol):
    """Read a directory of versioned keycode files into a :data:`SourceCorpus`."""

    def load(self, directory: Path) -> SourceCorpus:
        """Return ``category -> version -> layer`` or raise a ``RegistryError``."""


@runtime_checkable
class OverrideLoader(Protocol):
    """Read the symbolic name to description override table."""

    def load(self, path: Path) -> Mapping[str, str]:
        """Return the override mapping or raise ``ConfigurationError``."""


@runtime_checkable
class RegistryLoader(Protocol):
    """Read curated descriptor records that predate this run."""

    def load(self, path: Path) -> Sequence[ExistingDescriptor]:
        """Return the records in document order."""


@runtime_checkable
class DescriptorWriter(Protocol):
    """Persist the descriptor list as the single output artifact."""

    def write(self, path: Path, descriptors: Sequence[OutputDescriptor]) -> None:
        """Write *descriptors* to *path* completely or not at all."""
