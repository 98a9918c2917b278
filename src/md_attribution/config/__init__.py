"""Configuration management for the Markdown Attribution Alignment Engine."""

from .config_manager import ConfigurationManager
from .models import (
    AlignmentConfig,
    ConfigurationError,
    ValidationResult,
)

__all__ = [
    "ConfigurationManager",
    "AlignmentConfig",
    "ConfigurationError",
    "ValidationResult",
]
