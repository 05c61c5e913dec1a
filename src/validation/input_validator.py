"""Scenario length validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from shared.schemas.errors import ErrorResponse

InputErrorKind = Literal["EMPTY", "TOO_SHORT", "TOO_LONG"]


@dataclass(frozen=True)
class InputValidationResult:
    is_valid: bool
    kind: Optional[InputErrorKind] = None
    message: str = ""

    @property
    def error(self) -> Optional[ErrorResponse]:
        if self.is_valid:
            return None
        return ErrorResponse.validation(self.message)


class InputValidator:
    """Checks that a trimmed scenario is within ``[min_length, max_length]``."""

    def __init__(self, min_length: int = 1, max_length: int = 1500):
        if min_length < 1 or min_length > max_length:
            raise ValueError(
                f"Invalid scenario bounds: min_length={min_length}, max_length={max_length}"
            )
        self.min_length = min_length
        self.max_length = max_length

    def validate(self, scenario: Optional[str]) -> InputValidationResult:
        trimmed = (scenario or "").strip()
        length = len(trimmed)

        if length == 0:
            return InputValidationResult(False, "EMPTY", "Scenario cannot be empty")

        if length < self.min_length:
            return InputValidationResult(
                False,
                "TOO_SHORT",
                f"Scenario must be at least {self.min_length} character(s)",
            )

        if length > self.max_length:
            return InputValidationResult(
                False,
                "TOO_LONG",
                f"Scenario must be {self.max_length} characters or less (currently: {length})",
            )

        return InputValidationResult(True)
