"""Validation of scenario input and generated analysis output."""

from .input_validator import InputValidationResult, InputValidator
from .response_validator import (
    ResponseValidationResult,
    ResponseValidator,
    find_prescriptive_phrases,
    has_image_or_diagram_content,
)
