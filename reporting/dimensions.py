"""Custom dimensions attached to usage events.

Every dimension is bound to a fixed wire key (``cd1`` ... ``cd48``). Keys are
append-only: a new structured field gets a new member at the end, never a
reused index.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional


class CustomDimension(str, Enum):
    """Closed registry of custom dimension keys."""

    SESSION_HOST_OS_DETAILS = "cd1"
    SESSION_CHANNEL_NAME = "cd2"
    COMMAND_RUN_IS_EMULATOR = "cd3"
    COMMAND_RUN_TARGET_NAME = "cd4"
    HOT_EVENT_REASON = "cd5"
    HOT_EVENT_FINAL_LIBRARY_COUNT = "cd6"
    HOT_EVENT_SYNCED_LIBRARY_COUNT = "cd7"
    HOT_EVENT_SYNCED_CLASSES_COUNT = "cd8"
    HOT_EVENT_SYNCED_PROCEDURES_COUNT = "cd9"
    HOT_EVENT_SYNCED_BYTES = "cd10"
    HOT_EVENT_INVALIDATED_SOURCES_COUNT = "cd11"
    HOT_EVENT_TRANSFER_TIME_IN_MS = "cd12"
    HOT_EVENT_OVERALL_TIME_IN_MS = "cd13"
    COMMAND_RUN_PROJECT_TYPE = "cd14"
    COMMAND_RUN_PROJECT_HOST_LANGUAGE = "cd15"
    COMMAND_CREATE_ANDROID_LANGUAGE = "cd16"
    COMMAND_CREATE_IOS_LANGUAGE = "cd17"
    COMMAND_RUN_PROJECT_MODULE = "cd18"
    COMMAND_CREATE_PROJECT_TYPE = "cd19"
    COMMAND_PACKAGES_NUMBER_PLUGINS = "cd20"
    COMMAND_PACKAGES_PROJECT_MODULE = "cd21"
    COMMAND_RUN_TARGET_OS_VERSION = "cd22"
    COMMAND_RUN_MODE_NAME = "cd23"
    COMMAND_BUILD_BUNDLE_TARGET_PLATFORM = "cd24"
    COMMAND_BUILD_BUNDLE_IS_MODULE = "cd25"
    COMMAND_RESULT = "cd26"
    HOT_EVENT_TARGET_PLATFORM = "cd27"
    HOT_EVENT_SDK_NAME = "cd28"
    HOT_EVENT_EMULATOR = "cd29"
    HOT_EVENT_FULL_RESTART = "cd30"
    COMMAND_HAS_TERMINAL = "cd31"
    ENABLED_FEATURES = "cd32"
    LOCAL_TIME = "cd33"
    COMMAND_BUILD_AAR_TARGET_PLATFORM = "cd34"
    COMMAND_BUILD_AAR_PROJECT_TYPE = "cd35"
    BUILD_EVENT_COMMAND = "cd36"
    BUILD_EVENT_SETTINGS = "cd37"
    COMMAND_BUILD_APK_TARGET_PLATFORM = "cd38"
    COMMAND_BUILD_APK_BUILD_MODE = "cd39"
    COMMAND_BUILD_APK_SPLIT_PER_ABI = "cd40"
    COMMAND_BUILD_APP_BUNDLE_TARGET_PLATFORM = "cd41"
    COMMAND_BUILD_APP_BUNDLE_BUILD_MODE = "cd42"
    BUILD_EVENT_ERROR = "cd43"
    COMMAND_RESULT_EVENT_MAX_RSS = "cd44"
    COMMAND_RUN_ANDROID_EMBEDDING_VERSION = "cd45"
    COMMAND_PACKAGES_ANDROID_EMBEDDING_VERSION = "cd46"
    NULL_SAFETY = "cd47"
    FAST_REASSEMBLE = "cd48"

    @property
    def cd_key(self) -> str:
        """Wire key sent to the analytics backend."""
        return self.value


DimensionMap = Dict[CustomDimension, str]


def _stringify(value: object) -> str:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def use_cd_keys(parameters: Mapping[CustomDimension, Optional[object]]) -> DimensionMap:
    """Drop absent dimensions and stringify the rest.

    Args:
        parameters: Dimension to raw value; ``None`` marks an absent field

    Returns:
        Dimension map holding only the populated entries
    """
    return {
        dimension: _stringify(value)
        for dimension, value in parameters.items()
        if value is not None
    }
