"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from quakewatch.core.geo import BoundingBox
from quakewatch.core.proximity import DEFAULT_THRESHOLD_KM
from quakewatch.core.retry import RetryPolicy


STORE_BACKENDS = ("memory", "firestore")


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        poll_interval_seconds: How often each session polls the feed
        window_minutes: Width of the trailing fetch window
        snapshot_limit: Maximum events pushed in one snapshot
        proximity_threshold_km: Near/far cut-off for plate proximity
        min_fetch_magnitude: Minimum magnitude to fetch from USGS
        bounds: Optional region to restrict the feed query to
        boundaries_path: Plate boundary GeoJSON file (None to disable analysis)
        store_backend: 'memory' or 'firestore'
        firestore_database: Firestore database name (None for default)
        firestore_collection: Firestore collection holding events
        fetch_timeout_seconds: Timeout for one feed request
        retry: Retry policy for feed requests
    """
    poll_interval_seconds: float = 60
    window_minutes: int = 5
    snapshot_limit: int = 500
    proximity_threshold_km: float = DEFAULT_THRESHOLD_KM
    min_fetch_magnitude: float | None = None
    bounds: BoundingBox | None = None
    boundaries_path: str | None = None
    store_backend: str = "memory"
    firestore_database: str | None = None
    firestore_collection: str = "earthquakes"
    fetch_timeout_seconds: int = 30
    retry: RetryPolicy = field(default_factory=RetryPolicy)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_bounds(bounds: BoundingBox, field_name: str) -> list[ValidationError]:
    """Validate a bounding box.

    Pure function.

    Args:
        bounds: Bounding box to validate
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    for name in ("min_latitude", "max_latitude"):
        value = getattr(bounds, name)
        if not -90 <= value <= 90:
            errors.append(ValidationError(
                field=f"{field_name}.{name}",
                message=f"Latitude {value} out of range [-90, 90]",
            ))

    for name in ("min_longitude", "max_longitude"):
        value = getattr(bounds, name)
        if not -180 <= value <= 180:
            errors.append(ValidationError(
                field=f"{field_name}.{name}",
                message=f"Longitude {value} out of range [-180, 180]",
            ))

    if bounds.min_latitude > bounds.max_latitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_latitude ({bounds.min_latitude}) > max_latitude ({bounds.max_latitude})",
        ))

    if bounds.min_longitude > bounds.max_longitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_longitude ({bounds.min_longitude}) > max_longitude ({bounds.max_longitude})",
        ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if config.poll_interval_seconds <= 0:
        errors.append(ValidationError(
            field="poll_interval_seconds",
            message=f"Poll interval must be positive, got {config.poll_interval_seconds}",
        ))

    if config.window_minutes <= 0:
        errors.append(ValidationError(
            field="window_minutes",
            message=f"Fetch window must be positive, got {config.window_minutes}",
        ))
    elif config.window_minutes * 60 < config.poll_interval_seconds:
        # Windows that don't overlap leave gaps between cycles
        errors.append(ValidationError(
            field="window_minutes",
            message=(
                f"Fetch window ({config.window_minutes} min) is shorter than the "
                f"poll interval ({config.poll_interval_seconds}s); events may be missed"
            ),
            severity="warning",
        ))

    if config.snapshot_limit <= 0:
        errors.append(ValidationError(
            field="snapshot_limit",
            message=f"Snapshot limit must be positive, got {config.snapshot_limit}",
        ))

    if config.proximity_threshold_km <= 0:
        errors.append(ValidationError(
            field="proximity_threshold_km",
            message=f"Proximity threshold must be positive, got {config.proximity_threshold_km}",
        ))

    if config.fetch_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="fetch_timeout_seconds",
            message=f"Fetch timeout must be positive, got {config.fetch_timeout_seconds}",
        ))

    if config.retry.max_retries < 0:
        errors.append(ValidationError(
            field="retry.max_retries",
            message=f"Retry count cannot be negative, got {config.retry.max_retries}",
        ))

    if not config.store_backend:
        errors.append(ValidationError(
            field="store_backend",
            message=f"Store backend is not set, expected one of {STORE_BACKENDS}",
        ))
    elif config.store_backend not in STORE_BACKENDS:
        errors.append(ValidationError(
            field="store_backend",
            message=f"Unknown store backend '{config.store_backend}', expected one of {STORE_BACKENDS}",
        ))
    elif config.store_backend == "firestore" and not config.firestore_collection:
        errors.append(ValidationError(
            field="firestore_collection",
            message="Firestore backend needs a collection name",
        ))

    if config.bounds is not None:
        errors.extend(validate_bounds(config.bounds, "bounds"))

    if config.boundaries_path is None:
        errors.append(ValidationError(
            field="boundaries_path",
            message="No plate boundary dataset configured; proximity analysis disabled",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
