"""Runtime settings read from the environment once at import.

Env vars (defaults in brackets):
  COORDS_PROJECTION_LOAD_TIMEOUT_S  [5.0]   projection engine load timeout
  COORDS_SEARCH_DEBOUNCE_S          [0.3]   live search debounce delay
  COORDS_DEFAULT_PREFERENCE         [auto]  auto | tm | zone
  COORDS_DEFAULT_TARGET_WKID        [3006]  map spatial reference when none is given
  COORDS_CACHE_TTL_SECONDS          [3600]  transform cache TTL
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    projection_load_timeout_s: float = 5.0
    search_debounce_s: float = 0.3
    default_preference: str = "auto"
    default_target_wkid: int = 3006
    cache_ttl_seconds: int = 3600


_PREFERENCES = {"auto", "tm", "zone"}


def load_settings() -> Settings:
    overrides = {}
    for f in fields(Settings):
        env_key = f"COORDS_{f.name.upper()}"
        raw = os.environ.get(env_key)
        if raw is None:
            continue
        cast = type(f.default)
        try:
            value = cast(raw.strip().lower()) if cast is str else cast(raw)
        except ValueError:
            logger.warning("ignoring invalid %s=%r", env_key, raw)
            continue
        if f.name == "default_preference" and value not in _PREFERENCES:
            logger.warning("ignoring invalid %s=%r", env_key, raw)
            continue
        overrides[f.name] = value
    return Settings(**overrides)


SETTINGS = load_settings()


__all__ = ["Settings", "SETTINGS", "load_settings"]
