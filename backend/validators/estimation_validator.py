"""Estimate request validation.

serviceType and description are required and must be non-empty; the
vehicle fields are optional and default to empty strings.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
import structlog

from models.estimation import EstimationInput

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("serviceType", "description")


@dataclass
class ValidationResult:
    """Result of estimate request validation."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)
    parsed: Optional[EstimationInput] = None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _normalize_year(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, str)):
        return value or ""
    return str(value)


def validate_estimation_request(data: Any) -> ValidationResult:
    """Validate an estimate-duration request body.

    Args:
        data: Raw request body

    Returns:
        ValidationResult with is_valid, errors, and the parsed input
    """
    if not isinstance(data, dict):
        return ValidationResult(is_valid=False, errors=["Request body must be a JSON object"])

    missing = [name for name in REQUIRED_FIELDS if _is_blank(data.get(name))]
    if missing:
        logger.info("estimate_request_missing_fields", missing=missing)
        return ValidationResult(
            is_valid=False,
            errors=["serviceType and description are required"],
            missing_fields=missing
        )

    normalized: Dict[str, Any] = {
        "serviceType": str(data["serviceType"]).strip(),
        "description": str(data["description"]),
        "vehicleMake": str(data.get("vehicleMake") or ""),
        "vehicleModel": str(data.get("vehicleModel") or ""),
        "vehicleYear": _normalize_year(data.get("vehicleYear")),
    }

    try:
        parsed = EstimationInput.model_validate(normalized)
    except PydanticValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        return ValidationResult(is_valid=False, errors=errors)

    return ValidationResult(is_valid=True, parsed=parsed)
