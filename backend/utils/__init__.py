"""Utility modules for the shop estimator backend."""

from utils.logging_setup import configure_logging
from utils.estimate_logger import log_estimate, log_config

__all__ = [
    "configure_logging",
    "log_estimate",
    "log_config",
]
