"""TOML configuration loader with deep merge support."""

import os
import tomllib
from pathlib import Path
from typing import Any

ENV_PREFIX = "DFCONNECTOR_"

BUNDLED_CONFIG_DIR = Path(__file__).parent / "toml"


def get_config_dir() -> Path:
    """Directory holding default.toml and the environment files.

    DFCONNECTOR_CONFIG_DIR selects it, otherwise the defaults shipped with
    the package are used. The working directory is never searched: the
    connector runs inside the host project's test tree.
    """
    config_dir_env = os.environ.get(f"{ENV_PREFIX}CONFIG_DIR")
    if not config_dir_env:
        return BUNDLED_CONFIG_DIR

    path = Path(config_dir_env)
    if not path.is_dir():
        raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
    return path


def get_environment() -> str:
    """Environment name from DFCONNECTOR_ENV (default 'development')."""
    return os.environ.get(f"{ENV_PREFIX}ENV", "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base, recursing into nested tables."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Settings from default.toml with {DFCONNECTOR_ENV}.toml merged over it.

    Both files are optional; model defaults apply for anything missing.
    """
    config_dir = get_config_dir()
    config: dict[str, Any] = {}
    for name in ("default.toml", f"{get_environment()}.toml"):
        path = config_dir / name
        if path.is_file():
            config = deep_merge(config, load_toml(path))
    return config
