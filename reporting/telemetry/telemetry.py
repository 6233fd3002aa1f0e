"""Usage reporting client.

Wraps the configured analytics backend behind the sender contract that usage
events are handed to, using PostHog as the backend.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Mapping, Optional

from reporting.events import AnalyticsConfigEvent
from reporting.telemetry.posthog_client import get_posthog_sender

logger = logging.getLogger("reporting.telemetry")


def is_telemetry_globally_disabled() -> bool:
    """Check if usage reporting is globally disabled via environment variables.

    Returns:
        bool: True if reporting is globally disabled, False otherwise
    """
    telemetry_enabled = os.environ.get("REPORTING_TELEMETRY_ENABLED", "true").lower()
    return telemetry_enabled not in ("1", "true", "yes", "on")


class TelemetryBackend(str, Enum):
    """Available telemetry backend types."""

    POSTHOG = "posthog"
    NONE = "none"


class UsageClient:
    """Sender that delegates to the selected analytics backend."""

    def __init__(self, backend: Optional[str] = None):
        """Initialize the usage client.

        Args:
            backend: Backend to use ("posthog" or "none"); defaults to PostHog
        """
        if is_telemetry_globally_disabled():
            self.backend_type = TelemetryBackend.NONE
            logger.info("Telemetry globally disabled via environment variable")
        elif backend and backend.lower() == TelemetryBackend.NONE.value:
            self.backend_type = TelemetryBackend.NONE
        else:
            self.backend_type = TelemetryBackend.POSTHOG

        self._client = self._initialize_client()
        self._enabled = self.backend_type != TelemetryBackend.NONE

    def _initialize_client(self) -> Any:
        """Initialize the sender for the selected backend."""
        if self.backend_type == TelemetryBackend.POSTHOG:
            logger.debug("Initializing PostHog telemetry client")
            return get_posthog_sender()
        logger.debug("No telemetry client initialized")
        return None

    def send_event(
        self,
        category: str,
        parameter: str,
        label: Optional[str] = None,
        value: Optional[int] = None,
        dimensions: Optional[Mapping[Any, str]] = None,
    ) -> None:
        """Hand one usage event to the backend, if reporting is on."""
        if self._client and self._enabled:
            self._client.send_event(category, parameter, label=label, value=value, dimensions=dimensions)

    def flush(self) -> bool:
        """Flush any pending events to the backend.

        Returns:
            bool: True if successful, False otherwise
        """
        if self._client and self._enabled:
            return self._client.flush()
        return False

    def enable(self) -> None:
        """Enable usage reporting."""
        if self._client and not is_telemetry_globally_disabled():
            self._client.enable()
            self._enabled = True
        else:
            if is_telemetry_globally_disabled():
                logger.info("Cannot enable telemetry: globally disabled via environment variable")
            self._enabled = False

    def disable(self) -> None:
        """Disable usage reporting."""
        if self._client:
            self._client.disable()
        self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled and not is_telemetry_globally_disabled()


# Global usage client instance
_usage_client: Optional[UsageClient] = None


def get_usage_client(backend: Optional[str] = None) -> UsageClient:
    """Get or initialize the global usage client.

    Events never reach for this themselves; callers pass the returned client
    to each event as its sender.
    """
    global _usage_client

    if _usage_client is None:
        _usage_client = UsageClient(backend)

    return _usage_client


def set_analytics_enabled(client: UsageClient, enabled: bool) -> None:
    """Switch usage reporting on or off and report the change.

    The change is reported while reporting is still (or already) on, so
    disabling is sent before the switch and enabling after it.
    """
    if enabled:
        client.enable()
        AnalyticsConfigEvent(enabled=True, sender=client).send()
    else:
        AnalyticsConfigEvent(enabled=False, sender=client).send()
        client.flush()
        client.disable()


def set_telemetry_log_level(level: Optional[int] = None) -> None:
    """Set the logging level for telemetry loggers.

    Without an explicit level, REPORTING_TELEMETRY_LOG_LEVEL is read
    (DEBUG, INFO, WARNING or ERROR); anything else means WARNING.
    """
    if level is None:
        env_level = os.environ.get("REPORTING_TELEMETRY_LOG_LEVEL", "WARNING").upper()
        level = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
        }.get(env_level, logging.WARNING)

    for logger_name in ("reporting.telemetry", "reporting.events", "posthog"):
        logging.getLogger(logger_name).setLevel(level)


set_telemetry_log_level()
