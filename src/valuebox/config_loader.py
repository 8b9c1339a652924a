"""Load ValueBoxConfig from valuebox.yaml if present.

Merges file config with keyword overrides. Overrides take precedence.
"""

from __future__ import annotations

from pathlib import Path

from valuebox._errors import ConfigError
from valuebox.config import ValueBoxConfig

_KNOWN_KEYS = frozenset({
    "host", "port", "static_prefix", "marker_class", "id_override_attr",
    "binding_name", "animation_name", "animation_version", "animation_script",
    "animation_dir", "animation_duration",
})


def load_config(root: Path, **overrides: object) -> ValueBoxConfig:
    """Load ValueBoxConfig from root, optionally merging valuebox.yaml.

    Looks for valuebox.yaml, valuebox.yml, or valuebox.toml in root. If found,
    loads and merges with overrides. Overrides take precedence.

    Raises:
        ConfigError: If the merged config names an unknown key.

    """
    file_config = _read_config_file(root)
    merged = {**file_config, **overrides}
    unknown = sorted(set(merged) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown valuebox config keys: {', '.join(unknown)}"
        raise ConfigError(msg)
    if "port" in merged:
        merged["port"] = int(merged["port"])  # type: ignore[call-overload]
    if "animation_duration" in merged:
        merged["animation_duration"] = float(merged["animation_duration"])  # type: ignore[arg-type]
    return ValueBoxConfig(root=root, **merged)  # type: ignore[arg-type]


def _read_config_file(root: Path) -> dict[str, object]:
    """Read config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("valuebox.yaml", "valuebox.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "valuebox.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    import yaml

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError:
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError:
        return {}
    return _flatten_section(data)


def _flatten_section(data: dict[str, object]) -> dict[str, object]:
    """Extract valuebox.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("valuebox")
    if isinstance(section, dict):
        for k, v in section.items():
            result[k] = v
    for k, v in data.items():
        if k != "valuebox" and k in _KNOWN_KEYS:
            result[k] = v
    return result
