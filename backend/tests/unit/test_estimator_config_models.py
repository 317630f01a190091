"""Tests for estimator configuration models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from models.estimator_config import EstimatorConfig, EstimatorOverride, KeywordRule
from models.estimation import EstimateOutcome, EstimationInput, OutcomeStatus, ServiceType


class TestKeywordRule:
    """Tests for KeywordRule."""

    def test_parse_wire_shape(self):
        rule = KeywordRule.model_validate({"pattern": "brake", "flags": "i", "deltaHours": 0.5})

        assert rule.pattern == "brake"
        assert rule.delta_hours == 0.5

    def test_always_case_insensitive(self):
        rule = KeywordRule.model_validate({"pattern": "brake", "flags": "", "deltaHours": 0.5})

        assert rule.flags == "i"
        assert rule.matches("BRAKE pads")

    def test_unanchored_search(self):
        rule = KeywordRule(pattern="leak", delta_hours=0.5)

        assert rule.matches("small oil leak at the sump")
        assert not rule.matches("")
        assert not rule.matches(None)

    def test_invalid_pattern(self):
        with pytest.raises(PydanticValidationError):
            KeywordRule(pattern="(unclosed", delta_hours=1.0)

    def test_unsupported_flag(self):
        with pytest.raises(PydanticValidationError):
            KeywordRule.model_validate({"pattern": "x", "flags": "ix", "deltaHours": 1})

    def test_javascript_flags_accepted(self):
        rule = KeywordRule.model_validate({"pattern": "x", "flags": "gi", "deltaHours": 1})

        assert rule.flags == "ig"

    def test_to_transport(self):
        rule = KeywordRule(pattern="chain|kedja", delta_hours=0.25)

        assert rule.to_transport() == {"pattern": "chain|kedja", "flags": "i", "deltaHours": 0.25}


class TestEstimatorConfig:
    """Tests for EstimatorConfig."""

    def test_min_above_max_rejected(self, base_config):
        data = base_config.model_dump(by_alias=True)
        data["minHours"] = 9.0

        with pytest.raises(PydanticValidationError):
            EstimatorConfig.model_validate(data)

    def test_transport_redacts_openai(self, base_config):
        transport = base_config.to_transport()

        assert transport["openAI"] == {"enabled": True, "model": "gpt-4o-mini", "temperature": 0.2}
        assert "systemPrompt" not in transport["openAI"]
        assert transport["minHours"] == 0.5
        assert transport["maxHours"] == 8.0
        assert transport["roundToMinutes"] == 15
        assert transport["keywordAdjustments"][0] == {
            "pattern": "engine|motor|topplock|kolv|kamrem",
            "flags": "i",
            "deltaHours": 1.5
        }

    def test_base_hours_fallback(self, base_config):
        assert base_config.base_hours_for("repair") == 2.5
        assert base_config.base_hours_for("unknown") == 2.0
        assert base_config.base_hours_for("") == 2.0

    def test_defaults_cover_every_service_type(self, base_config):
        assert set(base_config.service_type_base_hours) == {t.value for t in ServiceType}


class TestEstimatorOverride:
    """Tests for EstimatorOverride."""

    def test_document_omits_unset_fields(self):
        override = EstimatorOverride.model_validate({"maxHours": 6, "openAI": {"enabled": False}})

        assert override.to_document() == {"maxHours": 6.0, "openAI": {"enabled": False}}

    def test_negative_base_hours_rejected(self):
        with pytest.raises(PydanticValidationError):
            EstimatorOverride.model_validate({"serviceTypeBaseHours": {"repair": -1}})


class TestEstimationModels:
    """Tests for estimation input and outcome."""

    def test_input_from_camel_case(self):
        data = EstimationInput.model_validate({
            "serviceType": "maintenance",
            "description": "oil change",
            "vehicleYear": "2011"
        })

        assert data.service_type == "maintenance"
        assert data.vehicle_make == ""
        assert data.vehicle_year == "2011"

    def test_outcomes(self):
        assert EstimateOutcome.success(2.5).is_success
        assert not EstimateOutcome.unavailable("disabled").is_success
        failed = EstimateOutcome.failed("timeout")
        assert failed.status == OutcomeStatus.FAILED
        assert failed.to_dict() == {"status": "failed", "hours": None, "reason": "timeout"}
