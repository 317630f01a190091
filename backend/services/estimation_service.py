"""Duration estimation entry point.

Tries the external model once and falls back to the heuristic for any
non-success outcome. No retries: one failed external call means the
heuristic answers for that request.
"""

from typing import Any, Dict, Optional, Union

import structlog

from models.estimation import (
    DurationEstimate,
    EstimateOutcome,
    EstimateSource,
    EstimationInput,
)
from services.config_store import EstimatorConfigProvider
from services.external_estimator import ExternalModelEstimator
from services.heuristic_estimator import heuristic_estimate

logger = structlog.get_logger()


class EstimationService:
    """Orchestrates the external model and heuristic estimators."""

    def __init__(
        self,
        config_provider: Optional[EstimatorConfigProvider] = None,
        external_estimator: Optional[ExternalModelEstimator] = None
    ):
        self.config_provider = config_provider or EstimatorConfigProvider()
        self.external_estimator = external_estimator or ExternalModelEstimator(self.config_provider)

    @staticmethod
    def _coerce_input(data: Union[EstimationInput, Dict[str, Any]]) -> EstimationInput:
        if isinstance(data, EstimationInput):
            return data
        return EstimationInput.model_validate(data)

    def heuristic(self, data: Union[EstimationInput, Dict[str, Any]]) -> float:
        """Heuristic-only estimate using the current configuration."""
        estimation_input = self._coerce_input(data)
        return heuristic_estimate(
            estimation_input.service_type,
            estimation_input.vehicle_year,
            estimation_input.description,
            self.config_provider.current()
        )

    async def estimate_with_source(
        self,
        data: Union[EstimationInput, Dict[str, Any]],
        use_external: bool = True
    ) -> DurationEstimate:
        """Estimate hours and report which path produced them.

        Args:
            data: Estimation input (model or camelCase dict).
            use_external: Set to False to skip the external model.

        Returns:
            DurationEstimate with hours, source and the external outcome.
        """
        estimation_input = self._coerce_input(data)
        # One config snapshot per request
        config = self.config_provider.current()

        if use_external:
            outcome = await self.external_estimator.estimate(estimation_input, config)
        else:
            outcome = EstimateOutcome.unavailable("external model skipped")

        if outcome.is_success:
            estimate = DurationEstimate(
                hours=outcome.hours,
                source=EstimateSource.EXTERNAL,
                external_outcome=outcome
            )
        else:
            hours = heuristic_estimate(
                estimation_input.service_type,
                estimation_input.vehicle_year,
                estimation_input.description,
                config
            )
            estimate = DurationEstimate(
                hours=hours,
                source=EstimateSource.HEURISTIC,
                external_outcome=outcome
            )

        logger.info(
            "duration_estimated",
            service_type=estimation_input.service_type,
            hours=estimate.hours,
            source=estimate.source.value,
            external=outcome.to_dict()
        )
        return estimate

    async def estimate_duration(self, data: Union[EstimationInput, Dict[str, Any]]) -> float:
        """Estimated technician hours; always a number."""
        estimate = await self.estimate_with_source(data)
        return estimate.hours
