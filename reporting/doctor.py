"""Doctor validators and their results, as seen by usage reporting."""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple


class ValidationType(str, Enum):
    """Classification of a validator outcome."""

    MISSING = "missing"
    PARTIAL = "partial"
    NOT_AVAILABLE = "notAvailable"
    INSTALLED = "installed"
    CRASH = "crash"


@dataclass(frozen=True)
class ValidationResult:
    """Result of running a single doctor validator."""

    type: ValidationType
    messages: Tuple[str, ...] = ()
    status_info: Optional[str] = None

    @property
    def type_str(self) -> str:
        return self.type.value


class DoctorValidator(metaclass=ABCMeta):
    """A single environment check run by the doctor command."""

    is_group = False

    def __init__(self, title: str):
        self.title = title

    @abstractmethod
    def validate(self) -> ValidationResult:
        """Run the check."""
        raise NotImplementedError


class GroupedValidator(DoctorValidator):
    """Runs several validators and reports them as one.

    ``sub_results`` is index-aligned with ``sub_validators`` once
    :meth:`validate` has run.
    """

    is_group = True

    def __init__(self, sub_validators: Sequence[DoctorValidator], title: Optional[str] = None):
        if not sub_validators:
            raise ValueError("GroupedValidator needs at least one sub-validator")
        super().__init__(title or sub_validators[0].title)
        self.sub_validators: List[DoctorValidator] = list(sub_validators)
        self.sub_results: List[ValidationResult] = []

    def validate(self) -> ValidationResult:
        self.sub_results = [validator.validate() for validator in self.sub_validators]
        return self._merge(self.sub_results)

    @staticmethod
    def _merge(results: Sequence[ValidationResult]) -> ValidationResult:
        merged = results[0].type
        if merged == ValidationType.NOT_AVAILABLE:
            merged = ValidationType.PARTIAL
        elif merged == ValidationType.CRASH:
            merged = ValidationType.MISSING
        messages: List[str] = []
        for result in results:
            if result.type == ValidationType.INSTALLED:
                if merged == ValidationType.MISSING:
                    merged = ValidationType.PARTIAL
            elif result.type in (ValidationType.PARTIAL, ValidationType.NOT_AVAILABLE):
                merged = ValidationType.PARTIAL
            elif merged == ValidationType.INSTALLED:
                merged = ValidationType.PARTIAL
            messages.extend(result.messages)
        return ValidationResult(merged, tuple(messages), results[0].status_info)
