"""Usage event sender backed by PostHog."""

from __future__ import annotations

import logging
import os
import random
import sys
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import posthog

from reporting import __version__
from reporting.dimensions import CustomDimension
from reporting.telemetry.models import Emission

logger = logging.getLogger("reporting.telemetry")

# Controls how frequently telemetry will be sent (percentage)
TELEMETRY_SAMPLE_RATE = 100

DEFAULT_POSTHOG_HOST = "https://eu.i.posthog.com"


@dataclass
class TelemetryConfig:
    """Configuration for the PostHog sender."""

    enabled: bool = True  # opt-out
    sample_rate: float = TELEMETRY_SAMPLE_RATE
    debug: bool = False

    @classmethod
    def from_env(cls) -> TelemetryConfig:
        """Load config from environment variables."""
        # REPORTING_TELEMETRY=off or REPORTING_TELEMETRY_DISABLED=1 turn reporting off
        telemetry_disabled = os.environ.get(
            "REPORTING_TELEMETRY", ""
        ).lower() == "off" or os.environ.get("REPORTING_TELEMETRY_DISABLED", "").lower() in (
            "1",
            "true",
            "yes",
            "on",
        )

        return cls(
            enabled=not telemetry_disabled,
            sample_rate=float(
                os.environ.get("REPORTING_TELEMETRY_SAMPLE_RATE", TELEMETRY_SAMPLE_RATE)
            ),
            debug=os.environ.get("REPORTING_TELEMETRY_DEBUG", "").lower() == "on",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "enabled": self.enabled,
            "sample_rate": self.sample_rate,
        }


def get_posthog_config() -> dict:
    """Get PostHog configuration for anonymous usage reporting.

    The project key is write-only and comes from REPORTING_POSTHOG_API_KEY;
    without one, PostHog stays disabled.
    """
    return {
        "api_key": os.environ.get("REPORTING_POSTHOG_API_KEY", ""),
        "host": os.environ.get("REPORTING_POSTHOG_HOST", DEFAULT_POSTHOG_HOST),
    }


def _wire_key(key: Any) -> str:
    if isinstance(key, CustomDimension):
        return key.cd_key
    return str(key)


class PostHogSender:
    """Sends usage events to PostHog."""

    def __init__(self, config: Optional[TelemetryConfig] = None, storage_dir: Optional[Path] = None):
        """Initialize the PostHog sender.

        Args:
            config: Sender configuration, or None to load from environment
            storage_dir: Where the installation ID is kept; defaults to
                ``.storage`` inside the package
        """
        self.config = config or TelemetryConfig.from_env()
        self.storage_dir = storage_dir or Path(__file__).parent.parent / ".storage"
        self.installation_id = self._get_or_create_installation_id()
        self.initialized = False
        self.queued_events: List[Dict[str, Any]] = []
        self.system_properties = {
            "version": __version__,
            "is_ci": "CI" in os.environ,
            "os": os.name,
            "python_version": sys.version.split()[0],
        }

        if self.config.enabled:
            logger.info(f"Telemetry enabled (sampling at {self.config.sample_rate}%)")
            self._initialize_posthog()
        else:
            logger.info("Telemetry disabled")

    def _initialize_posthog(self) -> bool:
        """Initialize the PostHog client and replay queued events.

        Returns:
            bool: True if initialized successfully, False otherwise
        """
        if self.initialized:
            return True

        posthog_config = get_posthog_config()

        try:
            posthog.api_key = posthog_config["api_key"]
            posthog.host = posthog_config["host"]
            posthog.debug = self.config.debug
            posthog.disabled = not self.config.enabled or not posthog_config["api_key"]

            if not posthog.disabled:
                logger.info(
                    f"Initializing PostHog telemetry with installation ID: {self.installation_id}"
                )
            else:
                logger.info("PostHog telemetry is disabled")

            for event in self.queued_events:
                posthog.capture(
                    distinct_id=self.installation_id,
                    event=event["event"],
                    properties=event["properties"],
                )
            self.queued_events = []

            self.initialized = True
            return True
        except Exception as e:
            logger.warning(f"Failed to initialize PostHog: {e}")
            return False

    def _get_or_create_installation_id(self) -> str:
        """Get or create an installation ID that persists across runs.

        This ID is not tied to any personal information.
        """
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            id_file = self.storage_dir / "installation_id"

            if id_file.exists():
                try:
                    stored_id = id_file.read_text().strip()
                    if stored_id:
                        logger.debug(f"Using existing installation ID: {stored_id}")
                        return stored_id
                except OSError as e:
                    logger.debug(f"Error reading installation ID file: {e}")

            new_id = str(uuid.uuid4())
            try:
                id_file.write_text(new_id)
                logger.debug(f"Created new installation ID: {new_id}")
                return new_id
            except OSError as e:
                logger.warning(f"Could not write installation ID: {e}")
        except OSError as e:
            logger.warning(f"Error accessing storage directory: {e}")

        logger.warning("Using random installation ID (will not persist across runs)")
        return str(uuid.uuid4())

    def send_event(
        self,
        category: str,
        parameter: str,
        label: Optional[str] = None,
        value: Optional[int] = None,
        dimensions: Optional[Mapping[Any, str]] = None,
    ) -> None:
        """Send one usage event.

        Args:
            category: Coarse event bucket, used as the PostHog event name
            parameter: Sub-bucket within the category
            label: Optional descriptive tag
            value: Optional numeric measurement
            dimensions: Custom dimensions keyed by dimension or wire key
        """
        if not self.config.enabled:
            logger.debug(f"Telemetry disabled, skipping event: {category}")
            return

        if random.random() * 100 > self.config.sample_rate:
            logger.debug(
                f"Event sampled out due to sampling rate {self.config.sample_rate}%: {category}"
            )
            return

        emission = Emission(
            category=category,
            parameter=parameter,
            label=label,
            value=value,
            dimensions={_wire_key(key): val for key, val in (dimensions or {}).items()},
        )
        properties = {**self.system_properties, **emission.to_properties()}

        if self.initialized:
            try:
                posthog.capture(
                    distinct_id=self.installation_id, event=category, properties=properties
                )
                logger.debug(f"Sent event to PostHog: {category}/{parameter}")
            except Exception as e:
                logger.warning(f"Failed to send event to PostHog: {e}")
        else:
            logger.debug(f"PostHog not initialized, queuing event for later: {category}")
            self.queued_events.append({"event": category, "properties": properties})
            self._initialize_posthog()

    def flush(self) -> bool:
        """Flush any pending events to PostHog.

        Returns:
            bool: True if successful, False otherwise
        """
        if not self.config.enabled:
            return False

        if not self.initialized and not self._initialize_posthog():
            return False

        try:
            posthog.flush()
            return True
        except Exception as e:
            logger.debug(f"Failed to flush PostHog events: {e}")
            return False

    def enable(self) -> None:
        """Enable usage reporting."""
        self.config.enabled = True
        posthog.disabled = False
        logger.info("Telemetry enabled")
        self._initialize_posthog()

    def disable(self) -> None:
        """Disable usage reporting."""
        self.config.enabled = False
        posthog.disabled = True
        logger.info("Telemetry disabled")


# Global sender instance
_sender: Optional[PostHogSender] = None


def get_posthog_sender() -> PostHogSender:
    """Get or initialize the global PostHog sender."""
    global _sender

    if _sender is None:
        _sender = PostHogSender()

    return _sender
