"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in quakewatch/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from quakewatch.core.config import Config
from quakewatch.core.geo import BoundingBox
from quakewatch.core.retry import RetryPolicy


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _resolve_value(value: Any) -> Any:
    """Resolve a ``${VAR}`` placeholder from the environment.

    Non-string values and plain strings are returned unchanged. An unset
    variable resolves to None so the field falls back to "not configured".
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)
        return None

    return value


def _optional_float(value: Any) -> float | None:
    """Convert to float, keeping None."""
    value = _resolve_value(value)
    return None if value is None else float(value)


def _parse_bounds(data: dict[str, Any]) -> BoundingBox:
    """Parse a bounding box from config data."""
    return BoundingBox(
        min_latitude=float(data["min_latitude"]),
        max_latitude=float(data["max_latitude"]),
        min_longitude=float(data["min_longitude"]),
        max_longitude=float(data["max_longitude"]),
    )


def _parse_retry(data: dict[str, Any]) -> RetryPolicy:
    """Parse a retry policy from config data."""
    defaults = RetryPolicy()
    return RetryPolicy(
        max_retries=int(data.get("max_retries", defaults.max_retries)),
        base_delay_seconds=float(data.get("base_delay_seconds", defaults.base_delay_seconds)),
        max_delay_seconds=float(data.get("max_delay_seconds", defaults.max_delay_seconds)),
        multiplier=float(data.get("multiplier", defaults.multiplier)),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    defaults = Config()

    bounds = None
    if data.get("bounds"):
        bounds = _parse_bounds(data["bounds"])

    boundaries_path = _resolve_value(data.get("boundaries_path"))

    return Config(
        poll_interval_seconds=float(data.get("poll_interval_seconds", defaults.poll_interval_seconds)),
        window_minutes=int(data.get("window_minutes", defaults.window_minutes)),
        snapshot_limit=int(data.get("snapshot_limit", defaults.snapshot_limit)),
        proximity_threshold_km=float(
            data.get("proximity_threshold_km", defaults.proximity_threshold_km)
        ),
        min_fetch_magnitude=_optional_float(data.get("min_fetch_magnitude")),
        bounds=bounds,
        boundaries_path=str(boundaries_path) if boundaries_path else None,
        store_backend=_resolve_value(data.get("store_backend", defaults.store_backend)),
        firestore_database=_resolve_value(data.get("firestore_database")),
        firestore_collection=_resolve_value(
            data.get("firestore_collection", defaults.firestore_collection)
        ),
        fetch_timeout_seconds=int(data.get("fetch_timeout_seconds", defaults.fetch_timeout_seconds)),
        retry=_parse_retry(data.get("retry") or {}),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: poll every %ss, %d min window, %s store",
        config.poll_interval_seconds,
        config.window_minutes,
        config.store_backend,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for container deployments without a YAML file.

    Environment variables:
        POLL_INTERVAL_SECONDS: Seconds between feed polls
        WINDOW_MINUTES: Width of the trailing fetch window
        SNAPSHOT_LIMIT: Maximum events per snapshot
        PROXIMITY_THRESHOLD_KM: Near/far cut-off for plate proximity
        MIN_MAGNITUDE: Minimum magnitude to fetch
        BOUNDARIES_PATH: Plate boundary GeoJSON file
        STORE_BACKEND: 'memory' or 'firestore'
        FIRESTORE_DATABASE: Firestore database name
        FIRESTORE_COLLECTION: Firestore collection name
        FETCH_TIMEOUT_SECONDS: Timeout for one feed request
        FETCH_MAX_RETRIES: Retries after a failed feed request

    Returns:
        Config object from environment
    """
    defaults = Config()
    env = os.environ

    min_magnitude = env.get("MIN_MAGNITUDE")

    return Config(
        poll_interval_seconds=float(env.get("POLL_INTERVAL_SECONDS", defaults.poll_interval_seconds)),
        window_minutes=int(env.get("WINDOW_MINUTES", defaults.window_minutes)),
        snapshot_limit=int(env.get("SNAPSHOT_LIMIT", defaults.snapshot_limit)),
        proximity_threshold_km=float(
            env.get("PROXIMITY_THRESHOLD_KM", defaults.proximity_threshold_km)
        ),
        min_fetch_magnitude=float(min_magnitude) if min_magnitude else None,
        boundaries_path=env.get("BOUNDARIES_PATH") or None,
        store_backend=env.get("STORE_BACKEND", defaults.store_backend),
        firestore_database=env.get("FIRESTORE_DATABASE") or None,
        firestore_collection=env.get("FIRESTORE_COLLECTION", defaults.firestore_collection),
        fetch_timeout_seconds=int(env.get("FETCH_TIMEOUT_SECONDS", defaults.fetch_timeout_seconds)),
        retry=RetryPolicy(
            max_retries=int(env.get("FETCH_MAX_RETRIES", defaults.retry.max_retries)),
        ),
    )
