"""Data models for configuration management."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import AttributionError

DEFAULT_MAX_SKIP_STEPS = 2000
DEFAULT_VERBATIM_TAGS = ("code", "pre")


@dataclass
class AlignmentConfig:
    """
    Tunables for one attribution pass.

    Attributes:
        max_skip_steps: Bound on formatting-noise skips while aligning a
            single visible character before giving up on the leaf.
        verbatim_tags: Element tags whose text is consumed without spans.
        span_tag: Tag used for annotated spans.
    """
    max_skip_steps: int = DEFAULT_MAX_SKIP_STEPS
    verbatim_tags: List[str] = field(default_factory=lambda: list(DEFAULT_VERBATIM_TAGS))
    span_tag: str = "span"
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_verbatim_tag(self, tag_name: Optional[str]) -> bool:
        """Check if a tag starts a verbatim region (case-insensitive)."""
        if not tag_name:
            return False
        return tag_name.lower() in {t.lower() for t in self.verbatim_tags}


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another validation result into this one."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings
        )


@dataclass
class ConfigurationError(AttributionError):
    """Exception raised for configuration errors."""
    validation_result: Optional[ValidationResult] = None
