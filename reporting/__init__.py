"""Usage event reporting for the command line tool."""

__version__ = "0.1.0"

from reporting.dimensions import CustomDimension, use_cd_keys  # noqa: E402
from reporting.events import (  # noqa: E402
    AnalyticsConfigEvent,
    BuildEvent,
    CommandResultEvent,
    DoctorResultEvent,
    HotEvent,
    PubResultEvent,
    UsageEvent,
    send_event,
)

__all__ = [
    "__version__",
    "AnalyticsConfigEvent",
    "BuildEvent",
    "CommandResultEvent",
    "CustomDimension",
    "DoctorResultEvent",
    "HotEvent",
    "PubResultEvent",
    "UsageEvent",
    "send_event",
    "use_cd_keys",
]
