"""Estimator configuration models.

Pydantic models for the duration-estimation parameters:

- ``EstimatorConfig``: a complete (effective) configuration, i.e. the
  built-in defaults with any runtime override applied.
- ``EstimatorOverride``: a partial document of the same shape, persisted
  as a JSON side file by the admin config page.
- ``KeywordRule``: a (pattern, deltaHours) pair matched against the job
  description.

Field names are snake_case in Python and camelCase on the wire / on disk.
"""

import re
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.estimation import ServiceType


# JavaScript-style regex flags accepted from the admin UI. Only i/m/s change
# matching; g/u/y are accepted for compatibility and ignored.
_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "g": 0,
    "u": 0,
    "y": 0,
}


@lru_cache(maxsize=256)
def compile_pattern(pattern: str, flags: str = "i") -> "re.Pattern[str]":
    """Compile a keyword pattern. Matching is always case-insensitive.

    Raises:
        re.error: If the pattern is not a valid regular expression.
    """
    compiled_flags = re.IGNORECASE
    for flag in flags:
        compiled_flags |= _FLAG_MAP.get(flag, 0)
    return re.compile(pattern, compiled_flags)


def normalize_flags(flags: Optional[str]) -> str:
    """Deduplicate flags and make sure the case-insensitive flag is present."""
    seen = []
    for flag in "i" + (flags or ""):
        if flag not in seen:
            seen.append(flag)
    return "".join(seen)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class KeywordRule(_WireModel):
    """Keyword adjustment applied when ``pattern`` matches the description."""

    pattern: str = Field(..., min_length=1, description="Regular expression source text")
    flags: str = Field(default="i", description="Regex flags (JavaScript style, e.g. 'i')")
    delta_hours: float = Field(
        ...,
        alias="deltaHours",
        description="Signed hours added when the pattern matches"
    )

    @field_validator("flags", mode="before")
    @classmethod
    def _check_flags(cls, value: Any) -> str:
        value = value or ""
        if not isinstance(value, str):
            raise ValueError("flags must be a string")
        unknown = sorted(set(value) - set(_FLAG_MAP))
        if unknown:
            raise ValueError(f"unsupported regex flags: {''.join(unknown)}")
        return normalize_flags(value)

    @model_validator(mode="after")
    def _check_compiles(self) -> "KeywordRule":
        try:
            compile_pattern(self.pattern, self.flags)
        except re.error as e:
            raise ValueError(f"invalid pattern {self.pattern!r}: {e}")
        return self

    @property
    def matcher(self) -> "re.Pattern[str]":
        """Compiled matcher for this rule."""
        return compile_pattern(self.pattern, self.flags)

    def matches(self, text: Optional[str]) -> bool:
        """Unanchored, case-insensitive search of ``text``."""
        if not text:
            return False
        return self.matcher.search(text) is not None

    def to_transport(self) -> Dict[str, Any]:
        return {"pattern": self.pattern, "flags": self.flags, "deltaHours": self.delta_hours}


class OpenAISettings(_WireModel):
    """External model settings."""

    enabled: bool = Field(default=True, description="Set to false to force heuristic only")
    model: str = Field(..., min_length=1, description="Chat model identifier")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    system_prompt: str = Field(..., alias="systemPrompt")

    def to_transport(self) -> Dict[str, Any]:
        """Redacted view for the admin API (no prompt, no credential)."""
        return {"enabled": self.enabled, "model": self.model, "temperature": self.temperature}


class EstimatorConfig(_WireModel):
    """Effective estimation configuration."""

    service_type_base_hours: Dict[str, float] = Field(
        ...,
        alias="serviceTypeBaseHours",
        description="Base hours keyed by service type"
    )
    keyword_adjustments: List[KeywordRule] = Field(
        default_factory=list,
        alias="keywordAdjustments",
        description="Ordered keyword rules; all matches accumulate"
    )
    min_hours: float = Field(..., alias="minHours", ge=0.0)
    max_hours: float = Field(..., alias="maxHours", ge=0.0)
    round_to_minutes: int = Field(..., alias="roundToMinutes", gt=0)
    open_ai: OpenAISettings = Field(..., alias="openAI")

    @model_validator(mode="after")
    def _check_bounds(self) -> "EstimatorConfig":
        if self.min_hours > self.max_hours:
            raise ValueError(
                f"minHours ({self.min_hours}) must not exceed maxHours ({self.max_hours})"
            )
        return self

    def base_hours_for(self, service_type: Optional[str]) -> float:
        """Base hours for a service type, falling back to the 'other' entry."""
        hours = self.service_type_base_hours
        if service_type and service_type in hours:
            return hours[service_type]
        return hours.get(ServiceType.OTHER.value, 0.0)

    def to_transport(self) -> Dict[str, Any]:
        """Serialize for ``GET /config`` with patterns as text and openAI redacted."""
        return {
            "serviceTypeBaseHours": dict(self.service_type_base_hours),
            "keywordAdjustments": [rule.to_transport() for rule in self.keyword_adjustments],
            "minHours": self.min_hours,
            "maxHours": self.max_hours,
            "roundToMinutes": self.round_to_minutes,
            "openAI": self.open_ai.to_transport(),
        }


class OpenAIOverride(_WireModel):
    """Partial external model settings."""

    enabled: Optional[bool] = None
    model: Optional[str] = Field(default=None, min_length=1)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")


class EstimatorOverride(_WireModel):
    """Runtime override document: any subset of ``EstimatorConfig`` fields."""

    service_type_base_hours: Optional[Dict[str, float]] = Field(
        default=None, alias="serviceTypeBaseHours"
    )
    keyword_adjustments: Optional[List[KeywordRule]] = Field(
        default=None, alias="keywordAdjustments"
    )
    min_hours: Optional[float] = Field(default=None, alias="minHours", ge=0.0)
    max_hours: Optional[float] = Field(default=None, alias="maxHours", ge=0.0)
    round_to_minutes: Optional[int] = Field(default=None, alias="roundToMinutes", gt=0)
    open_ai: Optional[OpenAIOverride] = Field(default=None, alias="openAI")

    @field_validator("service_type_base_hours")
    @classmethod
    def _check_base_hours(cls, value: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
        if value is None:
            return value
        for service_type, hours in value.items():
            if hours < 0:
                raise ValueError(f"base hours for {service_type!r} cannot be negative")
        return value

    def is_empty(self) -> bool:
        return not self.to_document()

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the on-disk JSON document."""
        return self.model_dump(by_alias=True, exclude_none=True)
