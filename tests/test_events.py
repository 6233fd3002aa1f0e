"""Tests for usage events."""

import dataclasses
import logging
from unittest.mock import MagicMock, call

import pytest

from reporting.commands import CommandResult, running_command
from reporting.dimensions import CustomDimension
from reporting.doctor import (
    DoctorValidator,
    GroupedValidator,
    ValidationResult,
    ValidationType,
)
from reporting.events import (
    AnalyticsConfigEvent,
    BuildEvent,
    CommandResultEvent,
    DoctorResultEvent,
    HotEvent,
    PubResultEvent,
    UsageEvent,
    send_event,
)


class AndroidValidator(DoctorValidator):
    def __init__(self):
        super().__init__("Android toolchain")

    def validate(self):
        return ValidationResult(ValidationType.INSTALLED)


class XcodeValidator(DoctorValidator):
    def __init__(self):
        super().__init__("Xcode")

    def validate(self):
        return ValidationResult(ValidationType.MISSING)


class IdeValidator(DoctorValidator):
    def __init__(self):
        super().__init__("IDE")

    def validate(self):
        return ValidationResult(ValidationType.PARTIAL)


class FailingProcessInfo:
    @property
    def max_rss(self):
        raise OSError("getrusage unavailable")


@pytest.fixture
def sender():
    """A sender that records every call."""
    return MagicMock()


class TestUsageEvent:
    """Tests for the generic event."""

    def test_send(self, sender):
        """Test that fields are forwarded without dimensions."""
        UsageEvent("hot", "reload", label="ok", value=12, sender=sender).send()
        sender.send_event.assert_called_once_with("hot", "reload", label="ok", value=12)

    def test_optional_fields_default_to_none(self, sender):
        """Test sending with only the required fields."""
        UsageEvent("doctor", "run", sender=sender).send()
        sender.send_event.assert_called_once_with("doctor", "run", label=None, value=None)

    def test_is_immutable(self, sender):
        """Test that events cannot be changed after construction."""
        event = UsageEvent("hot", "reload", sender=sender)
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.label = "changed"

    def test_send_twice_emits_twice(self, sender):
        """Test that sending again re-emits the same event."""
        event = UsageEvent("hot", "reload", label="ok", sender=sender)
        event.send()
        event.send()
        assert sender.send_event.call_count == 2
        assert sender.send_event.call_args_list[0] == sender.send_event.call_args_list[1]

    def test_send_event_rejects_unknown_objects(self):
        """Test that only usage events can be dispatched."""
        with pytest.raises(TypeError):
            send_event(object())


class TestHotEvent:
    """Tests for hot reload/restart events."""

    def test_populated_fields_only(self, sender):
        """Test that absent counters are left out."""
        HotEvent(
            "reload",
            target_platform="android",
            sdk_name="30",
            emulator=False,
            full_restart=False,
            null_safety=True,
            synced_library_count=3,
            sender=sender,
        ).send()

        sender.send_event.assert_called_once_with(
            "hot",
            "reload",
            dimensions={
                CustomDimension.HOT_EVENT_TARGET_PLATFORM: "android",
                CustomDimension.HOT_EVENT_SDK_NAME: "30",
                CustomDimension.HOT_EVENT_EMULATOR: "false",
                CustomDimension.HOT_EVENT_FULL_RESTART: "false",
                CustomDimension.NULL_SAFETY: "true",
                CustomDimension.HOT_EVENT_SYNCED_LIBRARY_COUNT: "3",
            },
        )

    def test_all_fields(self, sender):
        """Test that every populated field gets its dimension."""
        HotEvent(
            "restart",
            target_platform="ios",
            sdk_name="iOS 14",
            emulator=True,
            full_restart=True,
            null_safety=False,
            reason="manual",
            final_library_count=120,
            synced_library_count=4,
            synced_classes_count=7,
            synced_procedures_count=42,
            synced_bytes=2048,
            invalidated_sources_count=2,
            transfer_time_in_ms=15,
            overall_time_in_ms=310,
            sender=sender,
        ).send()

        dimensions = sender.send_event.call_args.kwargs["dimensions"]
        assert len(dimensions) == 14
        assert dimensions[CustomDimension.HOT_EVENT_REASON] == "manual"
        assert dimensions[CustomDimension.HOT_EVENT_FINAL_LIBRARY_COUNT] == "120"
        assert dimensions[CustomDimension.HOT_EVENT_SYNCED_CLASSES_COUNT] == "7"
        assert dimensions[CustomDimension.HOT_EVENT_SYNCED_PROCEDURES_COUNT] == "42"
        assert dimensions[CustomDimension.HOT_EVENT_SYNCED_BYTES] == "2048"
        assert dimensions[CustomDimension.HOT_EVENT_INVALIDATED_SOURCES_COUNT] == "2"
        assert dimensions[CustomDimension.HOT_EVENT_TRANSFER_TIME_IN_MS] == "15"
        assert dimensions[CustomDimension.HOT_EVENT_OVERALL_TIME_IN_MS] == "310"
        assert dimensions[CustomDimension.HOT_EVENT_EMULATOR] == "true"
        assert dimensions[CustomDimension.NULL_SAFETY] == "false"

    def test_removing_a_field_removes_only_its_key(self, sender):
        """Test that one absent field drops exactly one dimension."""
        fields = dict(
            target_platform="android",
            sdk_name="30",
            emulator=False,
            full_restart=False,
            reason="manual",
            synced_bytes=10,
        )
        HotEvent("reload", sender=sender, **fields).send()
        with_reason = sender.send_event.call_args.kwargs["dimensions"]

        fields["reason"] = None
        HotEvent("reload", sender=sender, **fields).send()
        without_reason = sender.send_event.call_args.kwargs["dimensions"]

        assert set(with_reason) - set(without_reason) == {CustomDimension.HOT_EVENT_REASON}
        assert set(without_reason) <= set(with_reason)

    def test_required_fields_are_always_reported(self, sender):
        """Test the minimal hot event."""
        HotEvent(
            "reload",
            target_platform="web-javascript",
            sdk_name="Chrome",
            emulator=False,
            full_restart=True,
            sender=sender,
        ).send()

        dimensions = sender.send_event.call_args.kwargs["dimensions"]
        assert set(dimensions) == {
            CustomDimension.HOT_EVENT_TARGET_PLATFORM,
            CustomDimension.HOT_EVENT_SDK_NAME,
            CustomDimension.HOT_EVENT_EMULATOR,
            CustomDimension.HOT_EVENT_FULL_RESTART,
        }


class TestBuildEvent:
    """Tests for build events."""

    def test_unspecified_outside_a_command(self, sender):
        """Test the parameter when no command is running."""
        BuildEvent("gradle-r8-failure", sender=sender).send()
        sender.send_event.assert_called_once_with(
            "build", "unspecified", label="gradle-r8-failure", dimensions={}
        )

    def test_uses_current_command(self, sender):
        """Test that the running command becomes the parameter."""
        with running_command("apk"):
            event = BuildEvent("app-using-android-x", sender=sender)
        event.send()
        assert event.parameter == "apk"
        assert sender.send_event.call_args.args == ("build", "apk")

    def test_explicit_command_name(self, sender):
        """Test that an explicit command name wins."""
        with running_command("apk"):
            event = BuildEvent("x", command_name="appbundle", sender=sender)
        assert event.parameter == "appbundle"

    def test_dimensions(self, sender):
        """Test the build dimensions."""
        BuildEvent(
            "xcode-failure",
            command="xcodebuild",
            settings="ENABLE_BITCODE=NO",
            sender=sender,
        ).send()
        assert sender.send_event.call_args.kwargs["dimensions"] == {
            CustomDimension.BUILD_EVENT_COMMAND: "xcodebuild",
            CustomDimension.BUILD_EVENT_SETTINGS: "ENABLE_BITCODE=NO",
        }

    def test_error_dimension(self, sender):
        """Test that the error is reported under its own key."""
        BuildEvent("cmake-failure", event_error="exit code 2", sender=sender).send()
        assert sender.send_event.call_args.kwargs["dimensions"] == {
            CustomDimension.BUILD_EVENT_ERROR: "exit code 2",
        }


class TestDoctorResultEvent:
    """Tests for doctor result events."""

    def test_single_validator(self, sender):
        """Test that a plain validator is one event."""
        validator = AndroidValidator()
        DoctorResultEvent(validator, validator.validate(), sender=sender).send()
        sender.send_event.assert_called_once_with(
            "doctor-result", "AndroidValidator", label="installed"
        )

    def test_grouped_validator_reports_each_sub_validator(self, sender):
        """Test fan-out to the sub-validators without the group itself."""
        group = GroupedValidator([AndroidValidator(), XcodeValidator(), IdeValidator()])
        result = group.validate()

        DoctorResultEvent(group, result, sender=sender).send()

        assert sender.send_event.call_args_list == [
            call("doctor-result", "AndroidValidator", label="installed"),
            call("doctor-result", "XcodeValidator", label="missing"),
            call("doctor-result", "IdeValidator", label="partial"),
        ]

    def test_nested_groups_report_leaves(self, sender):
        """Test that nested groups still report one event per leaf."""
        inner = GroupedValidator([XcodeValidator(), IdeValidator()])
        outer = GroupedValidator([AndroidValidator(), inner])
        result = outer.validate()

        DoctorResultEvent(outer, result, sender=sender).send()

        assert [c.args[1] for c in sender.send_event.call_args_list] == [
            "AndroidValidator",
            "XcodeValidator",
            "IdeValidator",
        ]

    def test_mismatched_group_is_rejected(self, sender):
        """Test that a group without results sends nothing."""
        group = GroupedValidator([AndroidValidator(), XcodeValidator()])
        event = DoctorResultEvent(
            group, ValidationResult(ValidationType.PARTIAL), sender=sender
        )
        with pytest.raises(ValueError):
            event.send()
        sender.send_event.assert_not_called()


class TestPubResultEvent:
    """Tests for pub result events."""

    def test_send(self, sender):
        """Test the pass-through mapping."""
        PubResultEvent(context="create-offline", result="success", sender=sender).send()
        sender.send_event.assert_called_once_with(
            "pub-result", "create-offline", label="success", value=None
        )


class TestCommandResultEvent:
    """Tests for command result events."""

    def test_sends_result_and_max_rss(self, sender):
        """Test both events when memory can be read."""
        process_info = MagicMock(max_rss=123456)
        CommandResultEvent(
            "build/apk", CommandResult.success(), sender=sender, process_info=process_info
        ).send()

        assert sender.send_event.call_args_list == [
            call("tool-command-result", "build/apk", label="success"),
            call("tool-command-max-rss", "build/apk", label="success", value=123456),
        ]

    def test_max_rss_failure_keeps_result(self, sender, caplog):
        """Test that a failed memory query only drops the second event."""
        caplog.set_level(logging.DEBUG, logger="reporting.events")

        CommandResultEvent(
            "run", CommandResult.fail(), sender=sender, process_info=FailingProcessInfo()
        ).send()

        sender.send_event.assert_called_once_with("tool-command-result", "run", label="fail")
        assert "Querying maxRss failed with error: getrusage unavailable" in caplog.text

    def test_default_process_info(self, sender):
        """Test that the process-wide info is used by default."""
        CommandResultEvent("doctor", CommandResult.warning(), sender=sender).send()
        first = sender.send_event.call_args_list[0]
        assert first == call("tool-command-result", "doctor", label="warning")

    @pytest.mark.parametrize(
        "command_path,result",
        [(None, CommandResult.success()), ("run", None)],
    )
    def test_requires_path_and_result(self, sender, command_path, result):
        """Test that missing identifying fields fail at construction."""
        with pytest.raises(ValueError):
            CommandResultEvent(command_path, result, sender=sender)


class TestAnalyticsConfigEvent:
    """Tests for analytics configuration events."""

    @pytest.mark.parametrize("enabled,label", [(True, "true"), (False, "false")])
    def test_send(self, sender, enabled, label):
        """Test that the flag is folded into the label."""
        AnalyticsConfigEvent(enabled=enabled, sender=sender).send()
        sender.send_event.assert_called_once_with(
            "analytics", "enabled", label=label, value=None
        )
