"""Fixtures that lay out a firmware keycode tree and its curated companions."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


@dataclass
class FirmwareSandbox:
    """Temporary workspace mirroring the inputs of a build run."""

    root: Path

    @property
    def source_dir(self) -> Path:
        return self.root / "keycodes"

    @property
    def overrides_path(self) -> Path:
        return self.root / "keycode-descriptions.tsv"

    @property
    def registry_path(self) -> Path:
        return self.root / "registry.json"

    @property
    def output_path(self) -> Path:
        return self.root / "out" / "keycodes.json"

    def write_source(self, filename: str, body: str) -> Path:
        path = self.source_dir / filename
        path.write_text(body, encoding="utf-8")
        return path

    def write_overrides(self, rows: Mapping[str, str]) -> Path:
        body = "".join(f"{name}\t{description}\r\n" for name, description in rows.items())
        self.overrides_path.write_text(body, encoding="utf-8", newline="")
        return self.overrides_path

    def write_registry(self, records: list[dict[str, object]]) -> Path:
        self.registry_path.write_text(json.dumps(records), encoding="utf-8")
        return self.registry_path

    def read_output(self) -> list[dict[str, object]]:
        return json.loads(self.output_path.read_text(encoding="utf-8"))


def create_firmware_sandbox(tmp_path: Path) -> FirmwareSandbox:
    """Return a sandbox with an empty source directory and override table."""

    sandbox = FirmwareSandbox(root=tmp_path)
    sandbox.source_dir.mkdir(parents=True, exist_ok=True)
    sandbox.write_overrides({})
    return sandbox


BASIC_0_0_1 = """
{
  ranges: {
    "0x0000/0x00FF": { define: "QK_BASIC" }
  }
  keycodes: {
    "0x0004": { group: "basic", key: "KC_A", label: "a" }
    "0x0005": { group: "basic", key: "KC_B" }
    "0x0029": { group: "basic", key: "KC_ESCAPE", aliases: ["KC_ESC"] }
  }
}
"""

QUANTUM_0_0_1 = """
{
  keycodes: {
    "0x7C00": { group: "quantum", key: "QK_BOOTLOADER", aliases: ["QK_BOOT"] }
  }
}
"""

QUANTUM_0_0_2 = """
{
  keycodes: {
    // the whole quantum range is renumbered in this release
    "!reset!": {}
    "0x7C01": { group: "quantum", key: "QK_REBOOT", aliases: ["QK_RBT"] }
  }
}
"""

RANGES_ONLY = """
{
  ranges: {
    "0x5200/0x001F": { define: "QK_TO" }
  }
}
"""
