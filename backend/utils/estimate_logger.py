"""Console summaries for estimates and configuration.

Banner-style output used by the CLI, with a structured log line alongside
for log aggregation.
"""

import json
import structlog
from typing import Dict, Any
from datetime import datetime, timezone

from models.estimation import DurationEstimate, EstimationInput

logger = structlog.get_logger()

BANNER_WIDTH = 72
ESTIMATE_BANNER_CHAR = "═"
CONFIG_BANNER_CHAR = "─"


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _format_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format dictionary as pretty JSON string."""
    try:
        return json.dumps(data, indent=indent, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(data)


def log_estimate(estimation_input: EstimationInput, estimate: DurationEstimate) -> None:
    """Print an estimate summary."""
    timestamp = datetime.now(timezone.utc).isoformat()
    outcome = estimate.external_outcome
    vehicle = f"{estimation_input.vehicle_make} {estimation_input.vehicle_model}".strip() or "-"

    print(ESTIMATE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(ESTIMATE_BANNER_CHAR, "DURATION ESTIMATE"))
    print(ESTIMATE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Timestamp     : {timestamp}")
    print(f"║ Service type  : {estimation_input.service_type}")
    print(f"║ Vehicle       : {vehicle} ({estimation_input.vehicle_year or 'unknown year'})")
    print(f"║ Description   : {estimation_input.description}")
    print(f"║ External      : {outcome.status.value}{f' ({outcome.reason})' if outcome.reason else ''}")
    print(f"║ Source        : {estimate.source.value}")
    print(f"║ Estimate      : {estimate.hours:.2f} h")
    print(ESTIMATE_BANNER_CHAR * BANNER_WIDTH)

    logger.info(
        "estimate_logged",
        service_type=estimation_input.service_type,
        hours=estimate.hours,
        source=estimate.source.value
    )


def log_config(config_data: Dict[str, Any], title: str = "EFFECTIVE ESTIMATOR CONFIG") -> None:
    """Print a transport-shaped configuration document."""
    print(CONFIG_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(CONFIG_BANNER_CHAR, title))
    print(CONFIG_BANNER_CHAR * BANNER_WIDTH)
    for line in _format_json(config_data).split("\n"):
        print(f"  {line}")
    print(CONFIG_BANNER_CHAR * BANNER_WIDTH)
