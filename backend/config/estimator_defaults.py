"""Built-in duration estimation parameters.

Adjust values here without touching business logic. The admin config page
writes a runtime override on top of these (see services.config_store).
"""

from typing import Any, Dict, Optional, Union

from config.settings import settings
from models.estimation import ServiceType
from models.estimator_config import EstimatorConfig

# Base estimated hours by service type
SERVICE_TYPE_BASE_HOURS = {
    ServiceType.REPAIR.value: 2.5,
    ServiceType.MAINTENANCE.value: 1.5,
    ServiceType.INSPECTION.value: 1.0,
    ServiceType.OTHER.value: 2.0,
}

# Keyword adjustments: if a keyword appears in the description, add/subtract
# hours. Multiple matches accumulate. Swedish terms are intentional.
KEYWORD_ADJUSTMENTS = [
    {"pattern": r"engine|motor|topplock|kolv|kamrem", "flags": "i", "deltaHours": 1.5},
    {"pattern": r"electrical|wiring|alternator|generator", "flags": "i", "deltaHours": 1.0},
    {"pattern": r"diagnos|intermittent", "flags": "i", "deltaHours": 0.5},
    {"pattern": r"brake|broms|bromsar|skiva|belägg", "flags": "i", "deltaHours": 0.5},
    {"pattern": r"oil leak|olj[e]?läck", "flags": "i", "deltaHours": 0.5},
    {"pattern": r"tire|däck|hjul", "flags": "i", "deltaHours": -0.25},
    {"pattern": r"spark plug|tändstift", "flags": "i", "deltaHours": -0.25},
    {"pattern": r"chain|kedja|drev", "flags": "i", "deltaHours": 0.25},
]

# Vehicle year adjustments (older vehicles often take longer).
# Checked in order: first (max_year, hours) with year <= max_year wins.
VEHICLE_YEAR_ADJUSTMENTS = (
    (2005, 0.5),
    (2012, 0.25),
)

# Clamp range for estimates
MIN_HOURS = 0.5
MAX_HOURS = 8.0

# Round to nearest X minutes
ROUND_TO_MINUTES = 15

SYSTEM_PROMPT = (
    "You are a service advisor for moped/motorcycle repairs. Given a task "
    "description and vehicle info, output ONLY a single decimal number "
    "representing estimated technician hours. No units, no words, just the "
    "number. Favor realistic, conservative estimates."
)


def vehicle_year_adjustment(year: Optional[Union[int, str]]) -> float:
    """Extra hours for older vehicles; 0 when the year is missing or unparseable."""
    numeric = parse_year(year)
    if not numeric:
        return 0.0
    for max_year, hours in VEHICLE_YEAR_ADJUSTMENTS:
        if numeric <= max_year:
            return hours
    return 0.0


def parse_year(year: Optional[Union[int, str]]) -> Optional[int]:
    """Parse a model year leniently: leading digits of a string, e.g. '2010cc' -> 2010."""
    if year is None or isinstance(year, bool):
        return None
    if isinstance(year, (int, float)):
        return int(year)
    text = str(year).strip()
    sign = ""
    if text and text[0] in "+-":
        sign, text = text[0], text[1:]
    digits = ""
    for ch in text:
        if not ch.isdigit():
            break
        digits += ch
    if not digits:
        return None
    return int(sign + digits)


def base_config_document() -> Dict[str, Any]:
    """The built-in configuration as a wire/disk shaped document."""
    return {
        "serviceTypeBaseHours": dict(SERVICE_TYPE_BASE_HOURS),
        "keywordAdjustments": [dict(rule) for rule in KEYWORD_ADJUSTMENTS],
        "minHours": MIN_HOURS,
        "maxHours": MAX_HOURS,
        "roundToMinutes": ROUND_TO_MINUTES,
        "openAI": {
            "enabled": True,
            "model": settings.llm_model,
            "temperature": settings.llm_temperature,
            "systemPrompt": SYSTEM_PROMPT,
        },
    }


def base_config() -> EstimatorConfig:
    """Fresh copy of the built-in configuration."""
    return EstimatorConfig.model_validate(base_config_document())
