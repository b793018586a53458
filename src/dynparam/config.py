from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping
import tomllib

from dynparam.generation.model import DiagnosticStream, GenerateSettings

DEFAULT_CONFIG_NAME = "dynparam.toml"
GENERATE_SECTION = "generate"

ConfigTable = Dict[str, Any]


def _read_table(path: Path) -> ConfigTable:
    # Missing, unreadable and malformed files all read as empty.
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> ConfigTable:
    """Load ``config_path``, or ``dynparam.toml`` under ``root`` (default: cwd)."""
    path = config_path or (root or Path.cwd()) / DEFAULT_CONFIG_NAME
    return _read_table(path)


def generate_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> ConfigTable:
    section = load_config(root=root, config_path=config_path).get(GENERATE_SECTION)
    if not isinstance(section, dict):
        return {}
    return section


def _split_names(value: Any) -> List[str]:
    raw = [value] if isinstance(value, str) else value
    if not isinstance(raw, (list, tuple)):
        return []
    names: List[str] = []
    for entry in raw:
        if isinstance(entry, str):
            names.extend(part.strip() for part in entry.split(",") if part.strip())
    return names


def merge_payload(payload: Mapping[str, Any], defaults: Mapping[str, Any]) -> ConfigTable:
    """Overlay explicit values on config defaults; ``None`` means "not given"."""
    merged = dict(defaults)
    merged.update({key: value for key, value in payload.items() if value is not None})
    return merged


def settings_from_payload(payload: Mapping[str, Any]) -> GenerateSettings:
    """Build validated settings from a merged ``[generate]`` payload.

    Keys that are absent fall back to the ``GenerateSettings`` defaults. Value
    problems are reported by ``GenerateSettings`` itself as ``ConfigError``.
    """
    options: ConfigTable = {
        "extra_reserved_names": tuple(_split_names(payload.get("reserved_names")))
    }
    if payload.get("function_name") is not None:
        options["function_name"] = str(payload["function_name"])
    if payload.get("marker") is not None:
        options["marker"] = str(payload["marker"])
    if payload.get("diagnostic_stream") is not None:
        options["diagnostic_stream"] = DiagnosticStream.parse(
            str(payload["diagnostic_stream"])
        )
    return GenerateSettings(**options)
