from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from errors import ValidationError

AUTH_MODES = ("demo", "hashed")

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"
    random_seed: Optional[int] = None   # None -> fixed demo layout
    auth_mode: str = "demo"


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment (or any mapping, for tests)."""
    env = os.environ if env is None else env

    port_raw = env.get("PORT", "3000")
    try:
        port = int(port_raw)
    except ValueError:
        raise ValidationError(f"PORT must be an integer, got {port_raw!r}")

    seed_raw = env.get("PARKING_RANDOM_SEED")
    seed: Optional[int] = None
    if seed_raw:
        try:
            seed = int(seed_raw)
        except ValueError:
            raise ValidationError(f"PARKING_RANDOM_SEED must be an integer, got {seed_raw!r}")

    auth_mode = env.get("PARKING_AUTH", "demo").strip().lower()
    if auth_mode not in AUTH_MODES:
        raise ValidationError(f"PARKING_AUTH must be one of {AUTH_MODES}, got {auth_mode!r}")

    return Settings(
        host=env.get("HOST", "0.0.0.0"),
        port=port,
        debug=env.get("PARKING_DEBUG", "").strip().lower() in _TRUE,
        log_level=env.get("PARKING_LOG_LEVEL", "INFO").upper(),
        random_seed=seed,
        auth_mode=auth_mode,
    )
