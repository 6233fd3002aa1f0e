"""Usage events reported by the command line tool.

Each event is an immutable record that knows its sender. :func:`send_event`
is the single place where an event is flattened into
``(category, parameter, label, value, dimensions)`` and handed over;
``event.send()`` is shorthand for it.
"""

from __future__ import annotations

import logging
from dataclasses import KW_ONLY, dataclass, field
from typing import TYPE_CHECKING, ClassVar, Optional, Union

from reporting.commands import CommandResult, current_command_name
from reporting.dimensions import CustomDimension, use_cd_keys
from reporting.doctor import DoctorValidator, ValidationResult
from reporting.process import ProcessInfo

if TYPE_CHECKING:
    from reporting.telemetry.sender import Sender

logger = logging.getLogger("reporting.events")

_process_info = ProcessInfo()


class _Sendable:
    def send(self) -> None:
        send_event(self)


@dataclass(frozen=True)
class UsageEvent(_Sendable):
    """A generic usage event that carries no custom dimensions."""

    category: str
    parameter: str
    label: Optional[str] = None
    value: Optional[int] = None
    _: KW_ONLY
    sender: Sender = field(compare=False, repr=False)


@dataclass(frozen=True)
class HotEvent(_Sendable):
    """A hot reload or hot restart.

    On a successful reload the counters describe the scale of the update:
    ``synced_library_count`` against ``final_library_count`` says how much of
    the program changed, ``invalidated_sources_count`` against
    ``synced_library_count`` says how much transfer overhead that cost.
    """

    category: ClassVar[str] = "hot"
    label: ClassVar[Optional[str]] = None
    value: ClassVar[Optional[int]] = None

    parameter: str
    _: KW_ONLY
    target_platform: str
    sdk_name: str
    emulator: bool
    full_restart: bool
    sender: Sender = field(compare=False, repr=False)
    null_safety: Optional[bool] = None
    reason: Optional[str] = None
    final_library_count: Optional[int] = None
    synced_library_count: Optional[int] = None
    synced_classes_count: Optional[int] = None
    synced_procedures_count: Optional[int] = None
    synced_bytes: Optional[int] = None
    invalidated_sources_count: Optional[int] = None
    transfer_time_in_ms: Optional[int] = None
    overall_time_in_ms: Optional[int] = None


@dataclass(frozen=True)
class DoctorResultEvent(_Sendable):
    """The result of a doctor validator.

    A grouped validator is reported as one event per sub-validator; the group
    itself is never reported.
    """

    category: ClassVar[str] = "doctor-result"
    value: ClassVar[Optional[int]] = None

    validator: DoctorValidator
    result: ValidationResult
    _: KW_ONLY
    sender: Sender = field(compare=False, repr=False)

    @property
    def parameter(self) -> str:
        return type(self.validator).__name__

    @property
    def label(self) -> str:
        return self.result.type_str


@dataclass(frozen=True)
class PubResultEvent(_Sendable):
    """The result of a package resolution (pub) invocation."""

    category: ClassVar[str] = "pub-result"
    value: ClassVar[Optional[int]] = None

    _: KW_ONLY
    context: str
    result: str
    sender: Sender = field(compare=False, repr=False)

    @property
    def parameter(self) -> str:
        return self.context

    @property
    def label(self) -> str:
        return self.result


@dataclass(frozen=True)
class BuildEvent(_Sendable):
    """Something worth knowing about a build.

    The parameter is the command running when the event is created, or
    ``"unspecified"`` outside of any command.
    """

    category: ClassVar[str] = "build"
    value: ClassVar[Optional[int]] = None

    label: str
    _: KW_ONLY
    sender: Sender = field(compare=False, repr=False)
    command: Optional[str] = None
    settings: Optional[str] = None
    event_error: Optional[str] = None
    command_name: Optional[str] = None
    parameter: str = field(init=False)

    def __post_init__(self):
        name = self.command_name or current_command_name()
        object.__setattr__(self, "parameter", name or "unspecified")


@dataclass(frozen=True)
class CommandResultEvent(_Sendable):
    """The result of a top-level command, plus the process memory high-water mark."""

    value: ClassVar[Optional[int]] = None

    command_path: str
    result: CommandResult
    _: KW_ONLY
    sender: Sender = field(compare=False, repr=False)
    process_info: Optional[ProcessInfo] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.command_path is None:
            raise ValueError("CommandResultEvent requires a command path")
        if self.result is None:
            raise ValueError("CommandResultEvent requires a command result")

    @property
    def category(self) -> str:
        return self.command_path

    @property
    def parameter(self) -> str:
        return str(self.result)


@dataclass(frozen=True)
class AnalyticsConfigEvent(_Sendable):
    """Analytics reporting being switched on (True) or off (False)."""

    category: ClassVar[str] = "analytics"
    parameter: ClassVar[str] = "enabled"
    value: ClassVar[Optional[int]] = None

    _: KW_ONLY
    enabled: bool
    sender: Sender = field(compare=False, repr=False)

    @property
    def label(self) -> str:
        return "true" if self.enabled else "false"


Event = Union[
    UsageEvent,
    HotEvent,
    DoctorResultEvent,
    PubResultEvent,
    BuildEvent,
    CommandResultEvent,
    AnalyticsConfigEvent,
]


def _send_hot(event: HotEvent) -> None:
    # platform, sdk, emulator and full restart are always reported
    dimensions = use_cd_keys(
        {
            CustomDimension.HOT_EVENT_TARGET_PLATFORM: event.target_platform,
            CustomDimension.HOT_EVENT_SDK_NAME: event.sdk_name,
            CustomDimension.HOT_EVENT_EMULATOR: event.emulator,
            CustomDimension.HOT_EVENT_FULL_RESTART: event.full_restart,
            CustomDimension.HOT_EVENT_REASON: event.reason,
            CustomDimension.HOT_EVENT_FINAL_LIBRARY_COUNT: event.final_library_count,
            CustomDimension.HOT_EVENT_SYNCED_LIBRARY_COUNT: event.synced_library_count,
            CustomDimension.HOT_EVENT_SYNCED_CLASSES_COUNT: event.synced_classes_count,
            CustomDimension.HOT_EVENT_SYNCED_PROCEDURES_COUNT: event.synced_procedures_count,
            CustomDimension.HOT_EVENT_SYNCED_BYTES: event.synced_bytes,
            CustomDimension.HOT_EVENT_INVALIDATED_SOURCES_COUNT: event.invalidated_sources_count,
            CustomDimension.HOT_EVENT_TRANSFER_TIME_IN_MS: event.transfer_time_in_ms,
            CustomDimension.HOT_EVENT_OVERALL_TIME_IN_MS: event.overall_time_in_ms,
            CustomDimension.NULL_SAFETY: event.null_safety,
        }
    )
    event.sender.send_event(event.category, event.parameter, dimensions=dimensions)


def _send_doctor_result(event: DoctorResultEvent) -> None:
    validator = event.validator
    if not validator.is_group:
        event.sender.send_event(event.category, event.parameter, label=event.label)
        return

    sub_validators = validator.sub_validators
    sub_results = validator.sub_results
    if len(sub_validators) != len(sub_results):
        raise ValueError(
            f"{type(validator).__name__} has {len(sub_validators)} sub-validators "
            f"but {len(sub_results)} sub-results"
        )
    for sub_validator, sub_result in zip(sub_validators, sub_results):
        DoctorResultEvent(sub_validator, sub_result, sender=event.sender).send()


def _send_build(event: BuildEvent) -> None:
    dimensions = use_cd_keys(
        {
            CustomDimension.BUILD_EVENT_COMMAND: event.command,
            CustomDimension.BUILD_EVENT_SETTINGS: event.settings,
            CustomDimension.BUILD_EVENT_ERROR: event.event_error,
        }
    )
    event.sender.send_event(event.category, event.parameter, label=event.label, dimensions=dimensions)


def _send_command_result(event: CommandResultEvent) -> None:
    event.sender.send_event("tool-command-result", event.category, label=event.parameter)

    # Separate event so the command result goes out even when maxRss can't be read
    process_info = event.process_info or _process_info
    try:
        max_rss = process_info.max_rss
    except Exception as e:
        logger.debug(f"Querying maxRss failed with error: {e}")
        return
    event.sender.send_event(
        "tool-command-max-rss",
        event.category,
        label=event.parameter,
        value=max_rss,
    )


def send_event(event: Event) -> None:
    """Flatten ``event`` and hand it to its sender."""
    if isinstance(event, HotEvent):
        _send_hot(event)
    elif isinstance(event, DoctorResultEvent):
        _send_doctor_result(event)
    elif isinstance(event, BuildEvent):
        _send_build(event)
    elif isinstance(event, CommandResultEvent):
        _send_command_result(event)
    elif isinstance(event, (UsageEvent, PubResultEvent, AnalyticsConfigEvent)):
        event.sender.send_event(event.category, event.parameter, label=event.label, value=event.value)
    else:
        raise TypeError(f"Not a usage event: {type(event).__name__}")
