"""Shop estimator configuration.

This package contains:
- settings: Environment variables and configuration
- secrets: Secret access (OpenAI key)
- errors: Custom exceptions and error codes
- estimator_defaults: Built-in estimation parameters
"""

from config.settings import settings
from config.errors import EstimatorError
from config.secrets import get_secret, get_openai_api_key

__all__ = [
    "settings",
    "EstimatorError",
    "get_secret",
    "get_openai_api_key",
]
