"""Utility modules"""

from .config_loader import load_config, get_section
from .errors import (
    DiscountEngineError,
    ConfigurationError,
    IngestionError,
    RuleEvaluationError,
    PersistError,
    DatabaseConnectionError
)

__all__ = [
    "load_config",
    "get_section",
    "DiscountEngineError",
    "ConfigurationError",
    "IngestionError",
    "RuleEvaluationError",
    "PersistError",
    "DatabaseConnectionError"
]
