"""Pytest configuration and shared fixtures for the shop estimator tests."""

import os
import sys
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from typing import Dict, Any


# ============================================================================
# Ensure local imports work (config/, models/, services/, ...)
# ============================================================================
#
# The codebase uses absolute imports like `from models...` / `from services...`.
# This guarantees that `backend/` is importable as the top-level module root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


# ============================================================================
# Config Store Fixtures
# ============================================================================

@pytest.fixture
def override_path(tmp_path):
    """Path of a (not yet existing) runtime override file."""
    return tmp_path / "config" / "estimator.runtime.json"


@pytest.fixture
def override_store(override_path):
    """OverrideStore backed by a temp file."""
    from services.config_store import OverrideStore

    return OverrideStore(override_path)


@pytest.fixture
def config_provider(override_store):
    """EstimatorConfigProvider backed by a temp override file."""
    from services.config_store import EstimatorConfigProvider

    return EstimatorConfigProvider(override_store)


@pytest.fixture
def base_config():
    """Built-in estimator configuration."""
    from config.estimator_defaults import base_config as _base_config

    return _base_config()


# ============================================================================
# LLM Mocks
# ============================================================================

@pytest.fixture
def mock_chat_openai():
    """Mock ChatOpenAI client."""
    mock = AsyncMock()
    mock.ainvoke.return_value = MagicMock(
        content="2.5",
        response_metadata={"token_usage": {"total_tokens": 42}}
    )
    return mock


@pytest.fixture
def mock_llm_service(mock_chat_openai):
    """LLMService with a mocked ChatOpenAI client."""
    from services.llm_service import LLMService

    with patch('services.llm_service.ChatOpenAI', return_value=mock_chat_openai):
        yield LLMService(model="gpt-4o-mini", temperature=0.2, api_key="test-api-key", timeout_seconds=5)


@pytest.fixture
def llm_reply():
    """Factory for an LLMService stand-in returning fixed content."""
    def _make(content: str = "2.5"):
        llm = MagicMock()
        llm.generate_with_system_prompt = AsyncMock(
            return_value={"content": content, "tokens_used": 10}
        )
        return llm
    return _make


@pytest.fixture
def llm_factory(llm_reply):
    """Callable standing in for the LLMService constructor."""
    return MagicMock(return_value=llm_reply("2.5"))


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_request() -> Dict[str, Any]:
    """Sample estimate-duration request body."""
    return {
        "serviceType": "repair",
        "vehicleMake": "Yamaha",
        "vehicleModel": "Aerox",
        "vehicleYear": 2010,
        "description": "Engine stalls when warm and the brake lever feels soft"
    }


@pytest.fixture
def sample_input(sample_request):
    """Sample EstimationInput."""
    from models.estimation import EstimationInput

    return EstimationInput.model_validate(sample_request)


# ============================================================================
# Environment Setup
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests away from real credentials and the real override file."""
    from config.settings import settings
    from config.secrets import clear_secret_cache

    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    clear_secret_cache()
    monkeypatch.setattr(settings, "_openai_api_key", "")
    monkeypatch.setattr(settings, "llm_model", "gpt-4o-mini")
    monkeypatch.setattr(settings, "llm_temperature", 0.2)
    monkeypatch.setattr(settings, "llm_timeout_seconds", 15.0)
    monkeypatch.setattr(settings, "estimator_override_path", str(tmp_path / "default.runtime.json"))
    yield settings
    clear_secret_cache()
