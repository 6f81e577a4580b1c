"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from quake_notifier.core.intensity import is_known_scale


# P2PQuake JSON API v2 websocket endpoint
DEFAULT_FEED_URL = "wss://api.p2pquake.net/v2/ws"


@dataclass(frozen=True)
class Destination:
    """A notification destination and its delivery threshold.

    Attributes:
        guild_id: Guild (workspace) identifier
        channel_id: Channel identifier within the guild
        min_intensity: Minimum intensity scale to deliver (inclusive)
        guild_name: Human-readable guild name for logs
        webhook_url: Endpoint that accepts notifications for this channel
    """
    guild_id: str
    channel_id: str
    min_intensity: int
    guild_name: str = ""
    webhook_url: str = ""

    @property
    def name(self) -> str:
        """Label used in logs."""
        return self.guild_name or f"{self.guild_id}/{self.channel_id}"


@dataclass
class FeedConfig:
    """Feed connection configuration.

    Attributes:
        url: Websocket endpoint
        reconnect_delay_seconds: Fixed delay before reconnecting
        handler_workers: Threads available to event handlers
    """
    url: str = DEFAULT_FEED_URL
    reconnect_delay_seconds: float = 1.0
    handler_workers: int = 4


@dataclass
class GeocodingConfig:
    """Geocoding configuration.

    Attributes:
        enabled: Resolve observation point coordinates for map markers
        api_key: Google Maps Platform API key
        region: Region hint for the lookup
        wait_timeout_seconds: How long a caller waits for another
            caller's in-flight lookup of the same address
    """
    enabled: bool = False
    api_key: str = ""
    region: str = "jp"
    wait_timeout_seconds: float = 10.0


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed: Feed connection settings
        geocoding: Geocoding settings
        maps_api_key: API key for static map images (empty disables images)
        destinations: Notification destinations
        firestore_database: Firestore database name (None for default)
        firestore_collection: Firestore collection for the geocode cache
            (None keeps the cache in memory)
    """
    feed: FeedConfig = field(default_factory=FeedConfig)
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    maps_api_key: str = ""
    destinations: list[Destination] = field(default_factory=list)
    firestore_database: str | None = None
    firestore_collection: str | None = None


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


def _is_unresolved(value: str) -> bool:
    return not value or value.startswith("${")


def validate_destination(destination: Destination, field_name: str) -> list[ValidationError]:
    """Validate a single destination.

    Pure function.
    """
    errors = []

    if not destination.guild_id or not destination.channel_id:
        errors.append(ValidationError(
            field=field_name,
            message="guild_id and channel_id are required",
        ))

    if not is_known_scale(destination.min_intensity):
        errors.append(ValidationError(
            field=f"{field_name}.min_intensity",
            message=f"Unknown intensity scale {destination.min_intensity}",
            severity="warning",
        ))

    if _is_unresolved(destination.webhook_url):
        errors.append(ValidationError(
            field=f"{field_name}.webhook_url",
            message="Webhook URL not resolved (still contains placeholder)",
            severity="warning",
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

    if not config.feed.url.startswith(("ws://", "wss://")):
        errors.append(ValidationError(
            field="feed.url",
            message=f"Feed URL must be a websocket URL, got {config.feed.url!r}",
        ))

    if config.feed.reconnect_delay_seconds <= 0:
        errors.append(ValidationError(
            field="feed.reconnect_delay_seconds",
            message=f"Reconnect delay must be positive, got {config.feed.reconnect_delay_seconds}",
        ))

    if config.feed.handler_workers < 1:
        errors.append(ValidationError(
            field="feed.handler_workers",
            message=f"At least one handler worker is required, got {config.feed.handler_workers}",
        ))

    if config.geocoding.enabled and _is_unresolved(config.geocoding.api_key):
        errors.append(ValidationError(
            field="geocoding.api_key",
            message="Geocoding is enabled but no API key is set",
        ))

    for i, destination in enumerate(config.destinations):
        errors.extend(validate_destination(destination, f"destinations[{i}]"))

    if not config.destinations:
        errors.append(ValidationError(
            field="destinations",
            message="No destinations configured",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
