"""Loads the JSON configuration and exposes typed accessors for its sections."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = "config/config.json"

PARSER_DEFAULTS: dict[str, Any] = {
    "timezone": "Europe/Helsinki",
    "encoding": "ISO-8859-15",
    "listing_id_prefix": "item_",
}

_CONFIG_CACHE: dict[Path, dict[str, Any]] = {}


def load_json(path: str | Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8-sig") as f:
        return json.load(f)


def dump_json(path: str | Path, payload: Any) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")


def load_config(config_path: str | Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Load the config file without caching; a missing file yields an empty config."""
    if not Path(config_path).exists():
        return {}
    return load_json(config_path)


def load_cached_config(config_path: str | Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Load and cache a config payload for repeated read-only access."""
    cache_key = Path(config_path)
    cached = _CONFIG_CACHE.get(cache_key)
    if cached is None:
        cached = load_config(cache_key)
        _CONFIG_CACHE[cache_key] = cached
    return cached


def load_cached_config_section(
    section: str,
    default: Mapping[str, Any] | None = None,
    config_path: str | Path = DEFAULT_CONFIG_PATH,
) -> dict[str, Any]:
    """Return one config section as a plain dict, layered over ``default``."""
    out = dict(default or {})
    value = load_cached_config(config_path).get(section)
    if isinstance(value, dict):
        out.update(value)
    return out


def reset_cached_config(config_path: str | Path | None = None) -> None:
    """Clear cached config values so future reads see updated on-disk data."""
    if config_path is None:
        _CONFIG_CACHE.clear()
        return
    _CONFIG_CACHE.pop(Path(config_path), None)


def parser_settings(config_path: str | Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Return the ``parser`` section merged over the defaults; blank values keep the default."""
    section = load_cached_config_section("parser", config_path=config_path)
    out = dict(PARSER_DEFAULTS)
    out.update({key: value for key, value in section.items() if value not in (None, "")})
    return out


def coerce_positive_float(value: Any, default: float) -> float:
    """Coerce a value to a positive float, falling back to ``default``."""
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default
