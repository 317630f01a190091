"""Rule-based duration estimate.

hours = base[serviceType] + sum(matching keyword deltas) + year adjustment,
then clamped to [minHours, maxHours] and rounded to the configured minute
granularity. Pure: same input and config always give the same number.
"""

import math
from typing import Optional, Union

import structlog

from config.estimator_defaults import vehicle_year_adjustment
from models.estimator_config import EstimatorConfig

logger = structlog.get_logger()


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def round_to_minutes(hours: float, minutes: int) -> float:
    """Round half-up to the nearest multiple of ``minutes`` / 60 hours."""
    if not minutes or minutes <= 0:
        return hours
    step = minutes / 60
    return math.floor(hours / step + 0.5) * step


def finalize_hours(hours: float, config: EstimatorConfig) -> float:
    """Clamp, round to granularity and trim to 2 decimals.

    If rounding lands outside the clamp range (bounds that are not
    multiples of the granularity), the nearest in-range multiple is used,
    or the bound itself when no multiple fits.
    """
    low, high = config.min_hours, config.max_hours
    value = round_to_minutes(clamp(hours, low, high), config.round_to_minutes)

    if value < low or value > high:
        step = config.round_to_minutes / 60
        if value < low:
            candidate = math.ceil(low / step - 1e-9) * step
        else:
            candidate = math.floor(high / step + 1e-9) * step
        value = candidate if low <= candidate <= high else clamp(value, low, high)

    return round(value, 2)


def keyword_adjustment(description: Optional[str], config: EstimatorConfig) -> float:
    """Sum of deltas for every keyword rule matching the description."""
    if not description:
        return 0.0
    return sum(rule.delta_hours for rule in config.keyword_adjustments if rule.matches(description))


def heuristic_estimate(
    service_type: Optional[str],
    vehicle_year: Optional[Union[int, str]],
    description: Optional[str],
    config: EstimatorConfig
) -> float:
    """Estimate technician hours from service type, description and vehicle year.

    Args:
        service_type: repair / maintenance / inspection / other; anything
            else uses the 'other' base hours.
        vehicle_year: Model year, int or string; unparseable adds nothing.
        description: Free-text job description.
        config: Effective estimator configuration.

    Returns:
        Hours within [minHours, maxHours], rounded to roundToMinutes.
    """
    base = config.base_hours_for(service_type)
    keywords = keyword_adjustment(description, config)
    year = vehicle_year_adjustment(vehicle_year)
    raw = base + keywords + year
    hours = finalize_hours(raw, config)

    logger.debug(
        "heuristic_estimate",
        service_type=service_type,
        base=base,
        keyword_delta=keywords,
        year_delta=year,
        raw=raw,
        hours=hours
    )
    return hours
