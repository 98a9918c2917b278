"""Configuration Manager for the Markdown Attribution Alignment Engine.

Loads and validates AlignmentConfig from JSON files, dictionaries and
environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .models import AlignmentConfig, ConfigurationError, ValidationResult

logger = logging.getLogger(__name__)

ENV_MAX_SKIP_STEPS = "MD_ATTRIBUTION_MAX_SKIP_STEPS"
ENV_VERBATIM_TAGS = "MD_ATTRIBUTION_VERBATIM_TAGS"

_KNOWN_FIELDS = {"max_skip_steps", "verbatim_tags", "span_tag", "metadata"}


class ConfigurationManager:
    """
    Manager for alignment configuration.

    Handles loading, validation, and access to the AlignmentConfig used by
    the reconciler and tree aligner.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional JSON file loaded immediately.
        """
        self._config_path = Path(config_path) if config_path else None
        self._configuration = AlignmentConfig()
        self._is_loaded = False
        if self._config_path is not None:
            self.load(self._config_path)

    @property
    def configuration(self) -> AlignmentConfig:
        """Get the current alignment configuration."""
        return self._configuration

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._is_loaded

    def load(self, source: Union[str, Path, Dict[str, Any]]) -> ValidationResult:
        """
        Load and validate alignment configuration.

        Supports loading from:
        - JSON file path
        - Dictionary, optionally nested under an "alignment" key

        Args:
            source: File path or dictionary.

        Returns:
            ValidationResult with any warnings (unknown keys).

        Raises:
            ConfigurationError: If validation fails.
        """
        raw_data = self._parse_source(source)
        if isinstance(raw_data, dict) and isinstance(raw_data.get("alignment"), dict):
            raw_data = raw_data["alignment"]

        result, config = self._validate_alignment_config(raw_data)
        if not result.is_valid or config is None:
            raise ConfigurationError(
                "Alignment configuration validation failed",
                validation_result=result,
            )

        self._configuration = config
        self._is_loaded = True
        logger.info(
            f"Loaded alignment configuration (max_skip_steps={config.max_skip_steps}, "
            f"verbatim_tags={config.verbatim_tags})"
        )
        return result

    def load_from_env(self, environ: Optional[Mapping[str, str]] = None) -> ValidationResult:
        """
        Apply overrides from environment variables.

        ``MD_ATTRIBUTION_MAX_SKIP_STEPS`` sets the skip bound and
        ``MD_ATTRIBUTION_VERBATIM_TAGS`` a comma-separated tag list.

        Args:
            environ: Mapping to read instead of os.environ.

        Returns:
            ValidationResult for the overrides that were present.
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = self.to_dict()
        present = False

        steps = environ.get(ENV_MAX_SKIP_STEPS)
        if steps is not None and steps.strip():
            present = True
            try:
                overrides["max_skip_steps"] = int(steps.strip())
            except ValueError:
                result = ValidationResult(is_valid=False)
                result.add_error(f"{ENV_MAX_SKIP_STEPS} must be an integer, got {steps!r}")
                raise ConfigurationError(
                    "Alignment configuration validation failed",
                    validation_result=result,
                )

        tags = environ.get(ENV_VERBATIM_TAGS)
        if tags is not None and tags.strip():
            present = True
            overrides["verbatim_tags"] = [t.strip() for t in tags.split(",") if t.strip()]

        if not present:
            return ValidationResult(is_valid=True)
        return self.load(overrides)

    def _validate_alignment_config(
        self,
        data: Any,
    ) -> Tuple[ValidationResult, Optional[AlignmentConfig]]:
        """Validate a raw configuration dictionary."""
        result = ValidationResult(is_valid=True)
        prefix = "Alignment config"

        if not isinstance(data, dict):
            result.add_error(f"{prefix}: expected a JSON object")
            return result, None

        for key in data:
            if key not in _KNOWN_FIELDS:
                result.add_warning(f"{prefix}: unknown key '{key}' ignored")

        max_skip_steps = data.get("max_skip_steps", AlignmentConfig().max_skip_steps)
        if isinstance(max_skip_steps, bool) or not isinstance(max_skip_steps, int):
            result.add_error(f"{prefix}: 'max_skip_steps' must be an integer")
        elif max_skip_steps < 1:
            result.add_error(f"{prefix}: 'max_skip_steps' must be at least 1")

        verbatim_tags = data.get("verbatim_tags", AlignmentConfig().verbatim_tags)
        if not isinstance(verbatim_tags, list):
            result.add_error(f"{prefix}: 'verbatim_tags' must be a list")
        elif not all(isinstance(t, str) and t.strip() for t in verbatim_tags):
            result.add_error(f"{prefix}: all verbatim tags must be non-empty strings")

        span_tag = data.get("span_tag", AlignmentConfig().span_tag)
        if not isinstance(span_tag, str) or not span_tag.strip():
            result.add_error(f"{prefix}: 'span_tag' must be a non-empty string")

        metadata = data.get("metadata", {})
        if not isinstance(metadata, dict):
            result.add_error(f"{prefix}: 'metadata' must be an object")

        if not result.is_valid:
            return result, None

        config = AlignmentConfig(
            max_skip_steps=max_skip_steps,
            verbatim_tags=[t.strip().lower() for t in verbatim_tags],
            span_tag=span_tag.strip(),
            metadata=metadata,
        )
        return result, config

    def _parse_source(
        self,
        source: Union[str, Path, Dict[str, Any]]
    ) -> Any:
        """Parse configuration source to raw data."""
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise ConfigurationError(f"Configuration file not found: {path}")

            with open(path, "r", encoding="utf-8") as f:
                try:
                    return json.load(f)
                except json.JSONDecodeError as e:
                    raise ConfigurationError(f"Invalid JSON in {path}: {e}")

        return source

    def save(self, path: Optional[Union[str, Path]] = None) -> None:
        """
        Save current configuration as JSON.

        Args:
            path: File to write. Uses the loaded path if None.
        """
        path = Path(path) if path else self._config_path
        if not path:
            raise ConfigurationError("No configuration path specified")

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"alignment": self.to_dict()}, f, indent=2, ensure_ascii=False)

    def reset(self) -> None:
        """Reset configuration to defaults."""
        self._configuration = AlignmentConfig()
        self._is_loaded = False

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as a dictionary."""
        return {
            "max_skip_steps": self._configuration.max_skip_steps,
            "verbatim_tags": list(self._configuration.verbatim_tags),
            "span_tag": self._configuration.span_tag,
            "metadata": dict(self._configuration.metadata),
        }
