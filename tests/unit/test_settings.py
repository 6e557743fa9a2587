from __future__ import annotations

from pathlib import Path

import pytest

from keycode_registry.domain.errors import ConfigurationError
from keycode_registry.settings import SETTINGS_FILENAME, default_env_prefix, resolve_settings


def test_default_env_prefix() -> None:
    assert default_env_prefix("keycode-registry") == "KEYCODE_REGISTRY"


def test_defaults_resolve_against_cwd(tmp_path: Path) -> None:
    settings = resolve_settings(cwd=tmp_path, environ={})
    assert settings.source_dir == tmp_path / "../qmk_firmware/data/constants/keycodes"
    assert settings.overrides_path == tmp_path / "keycode-descriptions.tsv"
    assert settings.registry_path is None
    assert settings.output_path == tmp_path / "output.json"


def test_layers_apply_in_precedence_order(tmp_path: Path) -> None:
    (tmp_path / SETTINGS_FILENAME).write_text(
        'source_dir = "firmware"\noutput_path = "from-file.json"\nregistry_path = "registry.yaml"\n',
        encoding="utf-8",
    )
    settings = resolve_settings(
        cwd=tmp_path,
        environ={"KEYCODE_REGISTRY_OUTPUT_PATH": "from-env.json", "KEYCODE_REGISTRY_SOURCE_DIR": "env-firmware"},
        overrides={"source_dir": Path("/abs/firmware"), "output_path": None},
    )
    assert settings.source_dir == Path("/abs/firmware")
    assert settings.output_path == tmp_path / "from-env.json"
    assert settings.registry_path == tmp_path / "registry.yaml"


def test_unrelated_environment_is_ignored(tmp_path: Path) -> None:
    settings = resolve_settings(cwd=tmp_path, environ={"KEYCODE_REGISTRY_COLOUR": "blue", "OUTPUT_PATH": "x"})
    assert settings.output_path == tmp_path / "output.json"


def test_unknown_file_key_is_rejected(tmp_path: Path) -> None:
    (tmp_path / SETTINGS_FILENAME).write_text('colour = "blue"\n', encoding="utf-8")
    with pytest.raises(ConfigurationError, match="colour"):
        resolve_settings(cwd=tmp_path, environ={})


def test_non_path_value_is_rejected(tmp_path: Path) -> None:
    (tmp_path / SETTINGS_FILENAME).write_text("output_path = 3\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        resolve_settings(cwd=tmp_path, environ={})


def test_malformed_settings_file(tmp_path: Path) -> None:
    (tmp_path / SETTINGS_FILENAME).write_text("source_dir = \n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        resolve_settings(cwd=tmp_path, environ={})
