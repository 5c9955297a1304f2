"""Validation module for verifying plan correctness."""

from laborplan.validation.validator import (
    PlanValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

__all__ = [
    "PlanValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
]
