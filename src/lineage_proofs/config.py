"""
Runtime configuration.

Settings come from the environment, with a local ``.env`` file loaded once on
import. Clients take explicit constructor arguments that override these.
MERKLE_PATH_LEN is a protocol constant and is intentionally not configurable.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_MAX_LINEAGE_DEPTH,
    DEFAULT_POSEIDON_SERVICE_URL,
    DEFAULT_PRELOAD_DEPTH,
    DEFAULT_REQUEST_TIMEOUT,
)

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment-driven settings."""
    poseidon_service_url: str
    zkp_service_url: Optional[str]
    hash_oracle: str
    record_family: str
    preload_depth: int
    max_lineage_depth: int
    request_timeout: float


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def get_settings() -> Settings:
    """Read the current settings from the environment."""
    timeout = os.getenv("REQUEST_TIMEOUT")
    return Settings(
        poseidon_service_url=os.getenv("POSEIDON_SERVICE_URL", DEFAULT_POSEIDON_SERVICE_URL),
        zkp_service_url=os.getenv("ZKP_SERVICE_URL") or None,
        hash_oracle=os.getenv("HASH_ORACLE", "poseidon-service"),
        record_family=os.getenv("RECORD_FAMILY", "lineage"),
        preload_depth=_int_env("LINEAGE_PRELOAD_DEPTH", DEFAULT_PRELOAD_DEPTH),
        max_lineage_depth=_int_env("LINEAGE_MAX_DEPTH", DEFAULT_MAX_LINEAGE_DEPTH),
        request_timeout=float(timeout) if timeout else float(DEFAULT_REQUEST_TIMEOUT),
    )
