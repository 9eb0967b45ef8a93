"""Feature flags read from the ``AT_FEATURES`` environment variable.

The variable holds comma-separated tokens: ``name`` or ``name=on`` enables a
flag, ``!name``, ``-name`` or ``name=off`` disables it.

Known flags:

- ``export_cached_bounds``: export labels against the local bounds recorded
  when a series was loaded instead of re-reading the source file.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

__all__ = ["FEATURES_ENV", "EXPORT_CACHED_BOUNDS", "reload", "all_enabled", "is_enabled"]

log = logging.getLogger(__name__)

FEATURES_ENV = "AT_FEATURES"
EXPORT_CACHED_BOUNDS = "export_cached_bounds"

_SWITCHES = {
    "1": True,
    "true": True,
    "on": True,
    "yes": True,
    "enabled": True,
    "0": False,
    "false": False,
    "off": False,
    "no": False,
    "disabled": False,
}


def _key(name: str) -> str:
    return name.strip().lower().replace("-", "_")


def parse_features(raw: str) -> dict[str, bool]:
    features: dict[str, bool] = {}
    for token in (part.strip() for part in raw.split(",")):
        if not token:
            continue
        if token[0] in "!-":
            features[_key(token[1:])] = False
        elif "=" in token:
            name, value = token.split("=", 1)
            state = _SWITCHES.get(value.strip().lower())
            if state is None:
                log.warning("Ignoring feature token %r", token)
                continue
            features[_key(name)] = state
        else:
            features[_key(token)] = True
    return features


@lru_cache(maxsize=1)
def _features() -> dict[str, bool]:
    return parse_features(os.environ.get(FEATURES_ENV, ""))


def reload() -> None:
    """Forget the cached flags so the environment is read again."""

    _features.cache_clear()


def all_enabled() -> dict[str, bool]:
    return dict(_features())


def is_enabled(flag: str, *, default: bool = False) -> bool:
    if not flag:
        raise ValueError("Flag name must be a non-empty string")
    return _features().get(_key(flag), default)
