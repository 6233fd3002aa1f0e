"""Contract between usage events and the analytics backend."""

from typing import Mapping, Optional, Protocol


class Sender(Protocol):
    """Anything usage events can be handed to.

    Implementations must not raise back into event code; a failed send is
    dropped.
    """

    def send_event(
        self,
        category: str,
        parameter: str,
        label: Optional[str] = None,
        value: Optional[int] = None,
        dimensions: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Emit one flattened usage event."""
