"""Request validators."""

from validators.estimation_validator import ValidationResult, validate_estimation_request

__all__ = ["ValidationResult", "validate_estimation_request"]
