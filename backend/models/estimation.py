"""Estimation request and outcome models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ServiceType(str, Enum):
    """Service types offered by the booking form."""

    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    INSPECTION = "inspection"
    OTHER = "other"


class EstimationInput(BaseModel):
    """Input to a duration estimate.

    ``service_type`` is kept as free text: unknown values are estimated
    with the 'other' base hours instead of being rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    service_type: str = Field(..., alias="serviceType", description="repair, maintenance, inspection or other")
    vehicle_make: str = Field(default="", alias="vehicleMake")
    vehicle_model: str = Field(default="", alias="vehicleModel")
    vehicle_year: Optional[Union[int, str]] = Field(default="", alias="vehicleYear")
    description: str = Field(..., description="Free-text job description")


class OutcomeStatus(str, Enum):
    """Result of an external model attempt."""

    SUCCESS = "success"
    UNAVAILABLE = "unavailable"  # disabled or not credentialed
    FAILED = "failed"


@dataclass(frozen=True)
class EstimateOutcome:
    """Tagged result of the external model adapter.

    Only ``SUCCESS`` carries hours; the orchestrator falls back to the
    heuristic for every other status.
    """

    status: OutcomeStatus
    hours: Optional[float] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, hours: float) -> "EstimateOutcome":
        return cls(status=OutcomeStatus.SUCCESS, hours=hours)

    @classmethod
    def unavailable(cls, reason: str) -> "EstimateOutcome":
        return cls(status=OutcomeStatus.UNAVAILABLE, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "EstimateOutcome":
        return cls(status=OutcomeStatus.FAILED, reason=reason)

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS and self.hours is not None

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "hours": self.hours, "reason": self.reason}


class EstimateSource(str, Enum):
    """Which path produced the final estimate."""

    EXTERNAL = "external"
    HEURISTIC = "heuristic"


@dataclass(frozen=True)
class DurationEstimate:
    """Final estimate plus provenance, for logging and the CLI."""

    hours: float
    source: EstimateSource
    external_outcome: EstimateOutcome
