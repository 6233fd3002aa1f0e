"""Analytics backends that usage events are handed to."""

from reporting.telemetry.sender import Sender
from reporting.telemetry.telemetry import (
    TelemetryBackend,
    UsageClient,
    get_usage_client,
    is_telemetry_globally_disabled,
    set_analytics_enabled,
    set_telemetry_log_level,
)

__all__ = [
    "Sender",
    "TelemetryBackend",
    "UsageClient",
    "get_usage_client",
    "is_telemetry_globally_disabled",
    "set_analytics_enabled",
    "set_telemetry_log_level",
]
