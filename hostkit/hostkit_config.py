from __future__ import annotations
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import yaml

ENV_DEBUG = "HOSTKIT_DEBUG"
ENV_NO_COLOR = ("NO_COLOR", "HOSTKIT_NO_COLOR")
ENV_COMPILED_PATH = "HOSTKIT_COMPILED_PATH"
ENV_SOURCE_PATH = "HOSTKIT_SOURCE_PATH"
ENV_NATIVE_PATH = "HOSTKIT_NATIVE_PATH"


def debug_enabled() -> bool:
    return bool(os.environ.get(ENV_DEBUG))


def color_enabled() -> bool:
    return not any(os.environ.get(name) for name in ENV_NO_COLOR)


def dbg(*parts):
    if os.environ.get(ENV_DEBUG):
        try:
            print("[DBG]", *parts, file=sys.stderr)
        except Exception:
            pass


@dataclass
class LoaderConfig:
    """Settings for a sub-module: its name, root directory and search paths.

    Each path is a ';'-delimited list of directory prefixes. A path of None
    disables the corresponding search strategy.
    """
    name: str
    root: str = ""
    compiled_path: Optional[str] = None
    source_path: Optional[str] = None
    native_path: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'LoaderConfig':
        if not isinstance(data, Mapping):
            raise ValueError(f"loader config must be a mapping, not {type(data).__name__}")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("loader config requires a 'name'")
        return cls(
            name=name,
            root=str(data.get("root") or ""),
            compiled_path=_path_value(data.get("compiled_path")),
            source_path=_path_value(data.get("source_path")),
            native_path=_path_value(data.get("native_path")),
        )

    @classmethod
    def from_env(cls, name: str, root: str = "") -> 'LoaderConfig':
        return cls(
            name=name,
            root=root,
            compiled_path=os.environ.get(ENV_COMPILED_PATH),
            source_path=os.environ.get(ENV_SOURCE_PATH),
            native_path=os.environ.get(ENV_NATIVE_PATH),
        )


def _path_value(value: Any) -> Optional[str]:
    # YAML lists are accepted as an alternative to ';'-joined strings
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ";".join(str(v) for v in value)
    return str(value)


def load_config(path: str) -> LoaderConfig:
    """Read a YAML loader configuration file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    dbg("load_config", path, "keys", list(data.keys()) if isinstance(data, dict) else type(data).__name__)
    return LoaderConfig.from_mapping(data)


__all__ = [
    "LoaderConfig",
    "load_config",
    "debug_enabled",
    "color_enabled",
    "dbg",
]
