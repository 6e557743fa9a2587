"""Adapter contract tests for the default ports implementation.

Verify the default adapters keep satisfying the application-layer ports so the
composition root can swap them without touching the pipeline stages.
"""

from __future__ import annotations

from pathlib import Path

from keycode_registry import Settings, build_registry
from keycode_registry.adapters.output.json_writer import JsonDescriptorWriter
from keycode_registry.adapters.overrides.tsv import TsvOverrideLoader
from keycode_registry.adapters.registry.structured import StructuredRegistryLoader
from keycode_registry.adapters.source.hjson_loader import HjsonSourceLoader
from keycode_registry.application import ports
from keycode_registry.domain.keycodes import ExistingDescriptor, KeycodeName, VersionLayer


def test_default_adapters_fulfil_ports() -> None:
    assert isinstance(HjsonSourceLoader(), ports.SourceLoader)
    assert isinstance(TsvOverrideLoader(), ports.OverrideLoader)
    assert isinstance(StructuredRegistryLoader(), ports.RegistryLoader)
    assert isinstance(JsonDescriptorWriter(), ports.DescriptorWriter)


class _MemorySource:
    def load(self, directory: Path):
        return {"_": {"0.0.1": VersionLayer.from_mapping({"0x0006": {"key": "KC_NEW"}})}}


class _MemoryOverrides:
    def load(self, path: Path):
        return {}


class _MemoryRegistry:
    def load(self, path: Path):
        return [ExistingDescriptor(code=6, name=KeycodeName("KC_OLD", "KC_OLD"))]


class _MemoryWriter:
    def __init__(self) -> None:
        self.written: list = []

    def write(self, path: Path, descriptors) -> None:
        self.written.extend(descriptors)


def test_build_accepts_injected_collaborators(tmp_path: Path) -> None:
    writer = _MemoryWriter()
    assert isinstance(writer, ports.DescriptorWriter)
    report = build_registry(
        Settings(tmp_path, tmp_path / "overrides.tsv", tmp_path / "registry.json", tmp_path / "out.json"),
        source_loader=_MemorySource(),
        override_loader=_MemoryOverrides(),
        registry_loader=_MemoryRegistry(),
        writer=writer,
    )
    assert [descriptor.name.long for descriptor in writer.written] == ["KC_NEW"]
    assert len(report.diagnostics) == 1
    assert not (tmp_path / "out.json").exists()
