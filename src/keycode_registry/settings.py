"""Run settings resolved from layered sources.

Purpose
-------
Tell the composition root where the firmware keycode tree, the override
table, the optional curated registry, and the output artifact live.

Precedence
----------
Lowest to highest: built-in defaults, ``keycode-registry.toml`` in the
working directory, ``KEYCODE_REGISTRY_<KEY>`` environment variables, and
explicit overrides (CLI options).

Contents
--------
* :class:`Settings` – resolved, immutable paths for one run.
* :func:`default_env_prefix` – canonical environment prefix for a slug.
* :func:`resolve_settings` – apply the layers above.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Final, Mapping, Optional

from .domain.errors import ConfigurationError
from .observability import log_debug

SLUG: Final[str] = "keycode-registry"
SETTINGS_FILENAME: Final[str] = f"{SLUG}.toml"

_DEFAULTS: Final[dict[str, Optional[str]]] = {
    "source_dir": "../qmk_firmware/data/constants/keycodes",
    "overrides_path": "keycode-descriptions.tsv",
    "registry_path": None,
    "output_path": "output.json",
}


@dataclass(frozen=True, slots=True)
class Settings:
    """Paths used by one build run."""

    source_dir: Path
    overrides_path: Path
    registry_path: Optional[Path]
    output_path: Path


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('keycode-registry')
    'KEYCODE_REGISTRY'
    """

    return slug.replace("-", "_").upper()


def resolve_settings(
    *,
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Merge defaults, the settings file, environment and *overrides*.

    Relative paths resolve against *cwd* (defaults to the process working
    directory). ``None`` values in *overrides* are ignored so unset CLI
    options fall through to lower layers.

    Examples
    --------
    >>> settings = resolve_settings(cwd=Path("/work"), environ={"KEYCODE_REGISTRY_OUTPUT_PATH": "out.json"})
    >>> settings.output_path.as_posix(), settings.registry_path
    ('/work/out.json', None)
    """

    base = cwd or Path.cwd()
    values: dict[str, Any] = dict(_DEFAULTS)
    for layer, payload in (
        ("file", _load_file(base / SETTINGS_FILENAME)),
        ("env", _load_env(os.environ if environ is None else environ)),
        ("explicit", {key: value for key, value in (overrides or {}).items() if value is not None}),
    ):
        _check_keys(layer, payload)
        if payload:
            log_debug("settings_layer_applied", layer=layer, keys=sorted(payload))
        values.update(payload)

    registry = values["registry_path"]
    return Settings(
        source_dir=_resolve(base, values["source_dir"]),
        overrides_path=_resolve(base, values["overrides_path"]),
        registry_path=_resolve(base, registry) if registry else None,
        output_path=_resolve(base, values["output_path"]),
    )


def _load_file(path: Path) -> dict[str, Any]:
    """Return the settings stored in *path*, or nothing when it does not exist."""

    if not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def _load_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``KEYCODE_REGISTRY_<KEY>`` variables for known keys."""

    prefix = f"{default_env_prefix(SLUG)}_"
    return {
        key[len(prefix) :].lower(): value
        for key, value in environ.items()
        if key.startswith(prefix) and key[len(prefix) :].lower() in _DEFAULTS
    }


def _check_keys(layer: str, payload: Mapping[str, Any]) -> None:
    known = {field.name for field in fields(Settings)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ConfigurationError(f"Unknown settings in {layer} layer: {', '.join(unknown)}")
    for key, value in payload.items():
        if not isinstance(value, (str, Path)):
            raise ConfigurationError(f"Setting {key} in {layer} layer must be a path, got {value!r}")


def _resolve(base: Path, value: str | Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path
