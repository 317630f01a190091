"""Shop estimator configuration settings.

Loads configuration from environment variables with sensible defaults.
Secrets (the OpenAI key) are loaded via the config.secrets module.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file for non-secret configuration (model name, ports, paths)
load_dotenv()

CONFIG_DIR = Path(__file__).resolve().parent

DEFAULT_OVERRIDE_PATH = CONFIG_DIR / "estimator.runtime.json"


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Note: Secrets (OPENAI_API_KEY) should be accessed via the config.secrets
    module. The openai_api_key property delegates to it.
    """

    # LLM Configuration (non-secrets)
    llm_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2")))
    llm_timeout_seconds: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT_SECONDS", "15")))

    # Runtime override document (written by the admin config page)
    estimator_override_path: str = field(
        default_factory=lambda: os.getenv("ESTIMATOR_OVERRIDE_PATH", str(DEFAULT_OVERRIDE_PATH))
    )

    # Server
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Internal: cached secret value (use openai_api_key property instead)
    _openai_api_key: Optional[str] = field(default=None, repr=False)

    @property
    def openai_api_key(self) -> Optional[str]:
        """Get the OpenAI API key from the environment (cached)."""
        if self._openai_api_key is None:
            from config.secrets import get_openai_api_key
            self._openai_api_key = get_openai_api_key()
        return self._openai_api_key

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"


# Singleton settings instance
settings = Settings()
