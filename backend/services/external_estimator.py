"""External model duration estimate.

Asks a chat model for a single number of technician hours. Every failure
(disabled, no key, timeout, transport error, non-numeric reply) becomes a
non-success ``EstimateOutcome``; nothing is raised to the caller.
"""

import math
import re
from typing import Callable, Optional

import structlog

from config.errors import ErrorCode, ExternalModelError
from config.settings import settings
from models.estimation import EstimateOutcome, EstimationInput
from models.estimator_config import EstimatorConfig
from services.config_store import EstimatorConfigProvider
from services.heuristic_estimator import finalize_hours
from services.llm_service import LLMService

logger = structlog.get_logger()

_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def build_user_prompt(estimation_input: EstimationInput) -> str:
    """Deterministic user prompt for an estimate request."""
    year = estimation_input.vehicle_year or "unknown year"
    return "\n".join([
        f"Service type: {estimation_input.service_type}",
        f"Vehicle: {estimation_input.vehicle_make} {estimation_input.vehicle_model} ({year})",
        f"Task description: {estimation_input.description}",
        "Output only a single number in hours, e.g. 2.5",
    ])


def parse_hours(content: Optional[str]) -> Optional[float]:
    """Extract hours from a model reply.

    Everything except digits and '.' is dropped, then the leading number is
    parsed ('about 2.5 h' -> 2.5). Returns None when nothing numeric is left.
    """
    if not content:
        return None
    cleaned = _NON_NUMERIC.sub("", content.strip())
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


class ExternalModelEstimator:
    """Adapter around the external chat model.

    The API key is read once at construction; without one the adapter
    reports itself unavailable on every call.
    """

    def __init__(
        self,
        config_provider: EstimatorConfigProvider,
        api_key: Optional[str] = None,
        llm_factory: Optional[Callable[..., LLMService]] = None,
        timeout_seconds: Optional[float] = None
    ):
        """Initialize ExternalModelEstimator.

        Args:
            config_provider: Source of the effective configuration.
            api_key: OpenAI API key (default from settings).
            llm_factory: Callable building an LLMService (for tests).
            timeout_seconds: Request timeout (default from settings).
        """
        self.config_provider = config_provider
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.timeout_seconds = timeout_seconds or settings.llm_timeout_seconds
        self._llm_factory = llm_factory or LLMService

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    def _create_llm(self, config: EstimatorConfig) -> LLMService:
        return self._llm_factory(
            model=config.open_ai.model,
            temperature=config.open_ai.temperature,
            api_key=self.api_key,
            timeout_seconds=self.timeout_seconds
        )

    async def estimate(
        self,
        estimation_input: EstimationInput,
        config: Optional[EstimatorConfig] = None
    ) -> EstimateOutcome:
        """Ask the external model for an estimate.

        Args:
            estimation_input: Job and vehicle details.
            config: Effective configuration (read from the provider if omitted).

        Returns:
            SUCCESS with clamped/rounded hours, UNAVAILABLE when disabled or
            uncredentialed, FAILED on any error or unusable reply.
        """
        config = config or self.config_provider.current()

        if not config.open_ai.enabled:
            return EstimateOutcome.unavailable("external model disabled")
        if not self.has_credentials:
            return EstimateOutcome.unavailable("no API key configured")

        try:
            llm = self._create_llm(config)
            result = await llm.generate_with_system_prompt(
                system_prompt=config.open_ai.system_prompt,
                user_message=build_user_prompt(estimation_input)
            )
        except ExternalModelError as e:
            logger.warning("external_estimate_failed", code=e.code, error=e.message, model=config.open_ai.model)
            return EstimateOutcome.failed(e.code)
        except Exception as e:
            logger.warning("external_estimate_error", error=str(e), model=config.open_ai.model)
            return EstimateOutcome.failed(f"unexpected error: {e}")

        content = result.get("content") if isinstance(result, dict) else None
        hours = parse_hours(content)
        if hours is None:
            logger.warning(
                "external_estimate_unparseable",
                model=config.open_ai.model,
                content=(content or "")[:100]
            )
            return EstimateOutcome.failed(ErrorCode.LLM_INVALID_RESPONSE)

        final = finalize_hours(hours, config)
        logger.info("external_estimate", model=config.open_ai.model, raw=hours, hours=final)
        return EstimateOutcome.success(final)
