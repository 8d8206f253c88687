"""
Load channel configuration documents from disk (JSON or TOML).
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict

import orjson

from ..exceptions import InvalidConfigurationError


def load_config(path: str | Path) -> Dict[str, Any]:
    """Read a ``.json`` or ``.toml`` channel configuration file.

    Raises:
        InvalidConfigurationError: the file is missing, unreadable, of an
            unsupported type, or does not contain a top-level mapping.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".toml"):
        raise InvalidConfigurationError(
            f"unsupported config file type '{suffix or path.name}' (expected .json or .toml)",
            details={"path": str(path)},
        )

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise InvalidConfigurationError(f"cannot read {path}: {exc.strerror}", details={"path": str(path)}) from exc

    try:
        data = orjson.loads(raw) if suffix == ".json" else tomllib.loads(raw.decode("utf-8"))
    except (orjson.JSONDecodeError, tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise InvalidConfigurationError(f"cannot parse {path}: {exc}", details={"path": str(path)}) from exc

    if not isinstance(data, dict):
        raise InvalidConfigurationError(
            f"{path} must contain a mapping of channel name to options",
            details={"path": str(path)},
        )
    return data
