"""Command results and the name of the command currently running."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

_current_command: ContextVar[Optional[str]] = ContextVar("current_command", default=None)


class ExitStatus(str, Enum):
    """How a top-level command finished."""

    SUCCESS = "success"
    WARNING = "warning"
    FAIL = "fail"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a top-level command invocation."""

    exit_status: ExitStatus

    @classmethod
    def success(cls) -> CommandResult:
        return cls(ExitStatus.SUCCESS)

    @classmethod
    def warning(cls) -> CommandResult:
        return cls(ExitStatus.WARNING)

    @classmethod
    def fail(cls) -> CommandResult:
        return cls(ExitStatus.FAIL)

    def __str__(self) -> str:
        return self.exit_status.value


@contextmanager
def running_command(name: str) -> Iterator[str]:
    """Mark ``name`` as the current command for the duration of the block."""
    token = _current_command.set(name)
    try:
        yield name
    finally:
        _current_command.reset(token)


def current_command_name() -> Optional[str]:
    """Name of the command currently running, if any."""
    return _current_command.get()
