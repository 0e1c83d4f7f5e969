"""Load LiveConfig from mdlive.yaml / mdlive.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from mdlive._errors import ConfigError
from mdlive.config import LiveConfig

_KNOWN_KEYS = frozenset({
    "host", "port", "live", "open_browser", "watch_backend",
    "poll_interval_ms", "debounce_ms", "queue_size", "heartbeat_interval",
    "title",
})


def load_config(
    source: Path,
    config_dir: Path | None = None,
    **overrides: object,
) -> LiveConfig:
    """Load LiveConfig for *source*, optionally merging mdlive.yaml.

    Looks for mdlive.yaml, mdlive.yml, or mdlive.toml in *config_dir*
    (defaults to the directory holding *source*). Overrides whose value is
    None are ignored so unset CLI flags do not mask file values.

    Raises:
        ConfigError: If the config file is malformed or holds bad values.

    """
    source = Path(source)
    directory = config_dir if config_dir is not None else source.resolve().parent
    file_config = _read_mdlive_config(directory)
    given = {k: v for k, v in overrides.items() if v is not None}
    merged = {**file_config, **given}
    try:
        return LiveConfig(source=source, **merged)
    except TypeError as exc:
        msg = f"Invalid configuration: {exc}"
        raise ConfigError(msg) from exc


def _read_mdlive_config(directory: Path) -> dict[str, object]:
    """Read mdlive config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("mdlive.yaml", "mdlive.yml"):
        path = directory / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = directory / "mdlive.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return _flatten_mdlive_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_mdlive_section(data)


def _flatten_mdlive_section(data: dict[str, object]) -> dict[str, object]:
    """Extract mdlive.* keys into top-level config.

    Keys under an ``mdlive`` section win over the same keys at top level.
    Unknown top-level keys are dropped; unknown keys inside the section are
    an error.
    """
    result: dict[str, object] = {
        k: v for k, v in data.items() if k != "mdlive" and k in _KNOWN_KEYS
    }
    section = data.get("mdlive")
    if isinstance(section, dict):
        for k, v in section.items():
            if k not in _KNOWN_KEYS:
                msg = f"Unknown mdlive config key: {k!r}"
                raise ConfigError(msg)
            result[k] = v
    return result
