"""Composition root for ``keycode_registry``.

Purpose
-------
Provide the single entry point that wires the adapters to the two pure
pipeline stages. The run is strictly sequential: load, merge, reconcile,
write. Any :class:`RegistryError` aborts the run before the writer is called,
so either one complete artifact is produced or none is.

Contents
--------
* :class:`BuildReport` – what a completed run produced.
* :func:`run_pipeline` – merge and reconcile in-memory inputs.
* :func:`build_registry` – full run driven by :class:`Settings`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

from .adapters.output.json_writer import JsonDescriptorWriter
from .adapters.overrides.tsv import TsvOverrideLoader
from .adapters.registry.structured import StructuredRegistryLoader
from .adapters.source.hjson_loader import HjsonSourceLoader
from .application.merge import SourceCorpus, merge_corpus
from .application.ports import DescriptorWriter, OverrideLoader, RegistryLoader, SourceLoader
from .application.reconcile import RegistryIndex, reconcile_with_diagnostics
from .domain.errors import ConfigurationError, ParseError, PatternMismatchError, RegistryError
from .domain.keycodes import ExistingDescriptor, MismatchDiagnostic, OutputDescriptor
from .observability import bind_run_id, log_info
from .settings import Settings


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Outcome of a completed run."""

    descriptors: tuple[OutputDescriptor, ...]
    diagnostics: tuple[MismatchDiagnostic, ...]
    output_path: Optional[Path] = None


def run_pipeline(
    corpus: SourceCorpus,
    overrides: Mapping[str, str],
    registry: Iterable[ExistingDescriptor] = (),
) -> BuildReport:
    """Merge *corpus* and reconcile it against *overrides* and *registry*.

    Examples
    --------
    >>> from keycode_registry.domain.keycodes import VersionLayer
    >>> corpus = {"_": {"0.0.1": VersionLayer.from_mapping({"0x0005": {"key": "KC_ZZZ"}})}}
    >>> report = run_pipeline(corpus, {})
    >>> report.descriptors[0].to_dict()["keywords"]
    ['Zzz']
    """

    table = merge_corpus(corpus)
    descriptors, diagnostics = reconcile_with_diagnostics(table, overrides, RegistryIndex(registry))
    return BuildReport(descriptors=tuple(descriptors), diagnostics=tuple(diagnostics))


def build_registry(
    settings: Settings,
    *,
    source_loader: SourceLoader | None = None,
    override_loader: OverrideLoader | None = None,
    registry_loader: RegistryLoader | None = None,
    writer: DescriptorWriter | None = None,
) -> BuildReport:
    """Run the whole pipeline described by *settings* and write the artifact.

    Inputs are loaded in a fixed order: override table, curated registry,
    firmware corpus. Adapters default to the HJSON/TSV/JSON implementations
    and may be replaced for tests or alternative sources.

    Raises
    ------
    ConfigurationError, ParseError, PatternMismatchError
        Propagated unchanged; nothing is written.
    """

    bind_run_id(uuid.uuid4().hex)
    try:
        overrides = (override_loader or TsvOverrideLoader()).load(settings.overrides_path)
        registry: Iterable[ExistingDescriptor] = ()
        if settings.registry_path is not None:
            registry = (registry_loader or StructuredRegistryLoader()).load(settings.registry_path)
        else:
            log_info("registry_skipped", path=None)
        corpus = (source_loader or HjsonSourceLoader()).load(settings.source_dir)

        report = run_pipeline(corpus, overrides, registry)
        (writer or JsonDescriptorWriter()).write(settings.output_path, report.descriptors)
        log_info("build_complete", keys=len(report.descriptors), mismatches=len(report.diagnostics))
        return BuildReport(report.descriptors, report.diagnostics, settings.output_path)
    finally:
        bind_run_id(None)


__all__ = [
    "BuildReport",
    "ConfigurationError",
    "ParseError",
    "PatternMismatchError",
    "RegistryError",
    "build_registry",
    "run_pipeline",
]
