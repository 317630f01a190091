"""Secret access for the shop estimator backend.

Secrets come from the process environment (optionally populated from a
.env file by config.settings). A missing secret is not an error: callers
decide what to do without it. The external estimator, for example, simply
disables itself.

Usage:
    from config.secrets import get_openai_api_key, get_secret

    api_key = get_openai_api_key()
"""

import os
import logging
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)


def get_secret(secret_id: str) -> Optional[str]:
    """Get a secret from the environment.

    Args:
        secret_id: The name of the secret (e.g., 'OPENAI_API_KEY')

    Returns:
        The secret value, or None if not set or blank
    """
    value = os.environ.get(secret_id)
    if value and value.strip():
        logger.debug(f"Secret {secret_id} loaded from environment")
        return value.strip()
    logger.info(f"Secret {secret_id} not set")
    return None


# Cached secret accessors, read once at adapter construction time

@lru_cache(maxsize=1)
def get_openai_api_key() -> Optional[str]:
    """Get OpenAI API key from secrets."""
    return get_secret('OPENAI_API_KEY')


def clear_secret_cache() -> None:
    """Clear cached secrets. Useful for testing or when secrets are rotated."""
    get_openai_api_key.cache_clear()
