# anonymization/service/pipeline.py

"""Process-wide anonymization service and its public entry points."""

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence

from anonymization.service.config import settings
from anonymization.engine.anonymizer import AnonymizationPipeline
from anonymization.engine.registry import PatternRegistry
from anonymization.core.domain import (
    AnonymizationOptions,
    AnonymizationResult,
    DetectionReport,
)
from anonymization.core.loader import PatternLoader
from anonymization.core.exceptions import (
    AnonymizationError,
    ConfigurationError,
    InvalidPatternSyntax,
)

logger = logging.getLogger(__name__)


class AnonymizationService:
    """Singleton holder for the default registry and pipeline.

    The registry is shared process-wide; callers that need an isolated pattern
    set should build their own ``PatternRegistry`` and ``AnonymizationPipeline``.
    """

    _instance: Optional[AnonymizationPipeline] = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> AnonymizationPipeline:
        """Returns the singleton pipeline, creating it on first use.

        Raises:
            ConfigurationError: If the built-in catalogue cannot be loaded
        """
        if cls._instance is None:
            with cls._lock:
                # Double-checked locking pattern
                if cls._instance is None:
                    logger.info("Initializing anonymization pipeline")
                    registry = PatternRegistry.with_builtins()
                    cls._instance = AnonymizationPipeline.from_settings(registry, settings)
                    logger.info(
                        "Anonymization pipeline initialized",
                        extra={"pattern_count": len(registry)},
                    )

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drops the singleton so the next call rebuilds it from the catalogue."""
        with cls._lock:
            cls._instance = None


def _registry() -> PatternRegistry:
    return AnonymizationService.get_instance().registry


def anonymize(
    text: str, options: Optional[AnonymizationOptions] = None
) -> AnonymizationResult:
    """Anonymizes text with the process-wide pipeline.

    Raises:
        PipelineFailure: If the result cannot be assembled
    """
    return AnonymizationService.get_instance().anonymize(text, options)


def detect_sensitive_data(
    text: str, patterns: Optional[Sequence[str]] = None
) -> DetectionReport:
    """Reports sensitive data found in text without modifying it.

    Raises:
        PipelineFailure: If the report cannot be assembled
    """
    return AnonymizationService.get_instance().detect_sensitive_data(text, patterns)


def add_custom_pattern(
    name: str, pattern_source: str, description: str = ""
) -> Dict[str, Any]:
    """Registers a custom pattern.

    Returns:
        ``{"success": True, "name", "pattern_source", "description",
        "overwritten"}`` or ``{"success": False, "error"}``
    """
    try:
        pattern, overwritten = _registry().upsert(name, pattern_source, description)
    except InvalidPatternSyntax as e:
        logger.warning(
            "Rejected custom pattern with invalid syntax",
            extra={"pattern": name, "reason": e.reason},
        )
        return {"success": False, "error": str(e)}
    except AnonymizationError as e:
        logger.warning(
            "Rejected custom pattern",
            extra={"pattern": name, "error_type": type(e).__name__},
        )
        return {"success": False, "error": str(e)}

    return {
        "success": True,
        "name": pattern.name,
        "pattern_source": pattern.source,
        "description": pattern.description,
        "overwritten": overwritten,
    }


def remove_pattern(name: str) -> Dict[str, Any]:
    """Removes a pattern.

    Returns:
        ``{"success": True, "message"}`` or ``{"success": False, "error"}``
    """
    try:
        _registry().remove(name)
    except AnonymizationError as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "message": f'Pattern "{name}" removed'}


def list_patterns() -> List[Dict[str, Any]]:
    """Returns name, source, description and sensitivity of every pattern."""
    return _registry().list()


def get_pattern_description(name: str) -> str:
    """Returns a pattern's description, or "Custom pattern" if it has none."""
    return _registry().describe(name)


def options_from_preset(name: str) -> AnonymizationOptions:
    """Builds options from a named preset in the pattern catalogue.

    Raises:
        ConfigurationError: If no preset has that name
    """
    preset = PatternLoader.get_instance().get_preset(name)
    if preset is None:
        raise ConfigurationError(f"Unknown preset: {name}")
    return AnonymizationOptions.from_mapping(preset)
