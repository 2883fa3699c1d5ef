# anonymization/core/loader.py

"""Catalogue loader for built-in patterns and option presets."""

import threading
import yaml
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional, Union

from anonymization.core.definitions import SensitivityClass
from anonymization.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CATALOGUE = Path(__file__).parent / "patterns.yaml"


class PatternLoader:
    """Loader for the pattern catalogue and presets.

    Reads ``patterns.yaml`` once per instance. ``get_instance()`` returns a
    shared loader for the packaged catalogue; pass ``config_path`` to load an
    alternative file.
    """

    _instance: Optional["PatternLoader"] = None
    _lock = threading.Lock()

    def __init__(self, config_path: Optional[Union[str, Path]] = None) -> None:
        self.config_path = Path(config_path) if config_path else DEFAULT_CATALOGUE
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Loads and validates the catalogue file.

        Raises:
            ConfigurationError: If file is missing, invalid, or empty.
        """
        try:
            if not self.config_path.exists():
                error_msg = f"Configuration file not found: {self.config_path}"
                logger.error(error_msg)
                raise ConfigurationError(error_msg)

            with open(self.config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f)

            if not self._config or not isinstance(self._config, dict):
                raise ConfigurationError("Configuration file is empty or invalid")

            self._validate_config()

            logger.info(
                "Pattern catalogue loaded",
                extra={
                    "config_path": str(self.config_path),
                    "pattern_count": len(self._config.get("patterns", [])),
                    "preset_count": len(self._config.get("presets", {})),
                },
            )

        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}", exc_info=True)
            raise ConfigurationError(f"Failed to parse {self.config_path.name}: {e}") from e
        except Exception as e:
            if isinstance(e, ConfigurationError):
                raise
            logger.error(f"Configuration loading failed: {e}", exc_info=True)
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _validate_config(self) -> None:
        """Validates required sections and pattern entries.

        Raises:
            ConfigurationError: If a section or a pattern field is missing.
        """
        required_sections = ["patterns", "presets"]
        missing = [s for s in required_sections if s not in self._config]

        if missing:
            error_msg = f"Missing required configuration sections: {missing}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        for entry in self._config["patterns"]:
            if not isinstance(entry, dict) or not entry.get("name") or not entry.get("regex"):
                raise ConfigurationError(f"Pattern entry needs 'name' and 'regex': {entry!r}")
            sensitivity = entry.get("sensitivity", SensitivityClass.OTHER)
            if sensitivity not in SensitivityClass.ALL:
                raise ConfigurationError(
                    f"Unknown sensitivity '{sensitivity}' for pattern '{entry['name']}'"
                )

    @classmethod
    def get_instance(cls) -> "PatternLoader":
        """Returns the shared loader for the packaged catalogue."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def get_patterns(self) -> List[Dict[str, Any]]:
        """Returns pattern definitions in catalogue order.

        Returns:
            List of dictionaries with 'name', 'regex', 'description' and
            'sensitivity' keys
        """
        return [
            {
                "name": p["name"],
                "regex": p["regex"],
                "description": p.get("description", ""),
                "sensitivity": p.get("sensitivity", SensitivityClass.OTHER),
            }
            for p in self._config.get("patterns", [])
        ]

    def get_preset(self, name: str) -> Optional[Dict[str, Any]]:
        """Returns the options mapping of a preset, or None if unknown."""
        preset = self._config.get("presets", {}).get(name)
        if not preset:
            return None
        return dict(preset.get("options", {}))

    def list_presets(self) -> Dict[str, str]:
        """Returns preset names mapped to their descriptions."""
        return {
            name: preset.get("description", "")
            for name, preset in self._config.get("presets", {}).items()
        }
