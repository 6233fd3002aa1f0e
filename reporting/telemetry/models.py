"""Models for telemetry data."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Emission(BaseModel):
    """One flattened usage event as handed to an analytics backend."""

    category: str
    parameter: str
    label: Optional[str] = None
    value: Optional[int] = None
    dimensions: Dict[str, str] = Field(default_factory=dict)
    timestamp: float = Field(default_factory=lambda: datetime.now().timestamp())

    def to_properties(self) -> Dict[str, Any]:
        """Flatten into backend properties, omitting absent fields.

        Dimensions are keyed by their wire key.
        """
        properties: Dict[str, Any] = {"category": self.category, "parameter": self.parameter}
        if self.label is not None:
            properties["label"] = self.label
        if self.value is not None:
            properties["value"] = self.value
        properties.update(self.dimensions)
        return properties
