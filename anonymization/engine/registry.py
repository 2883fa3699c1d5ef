# anonymization/engine/registry.py

"""Registry of named pattern matchers."""

import logging
import re
import threading
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from anonymization.core.definitions import DEFAULT_DESCRIPTION, SensitivityClass
from anonymization.core.domain import Pattern
from anonymization.core.exceptions import (
    InvalidPatternSyntax,
    PatternNotFound,
    ValidationError,
)
from anonymization.core.loader import PatternLoader

logger = logging.getLogger(__name__)


def compile_pattern(name: str, source: str, flags: int = 0) -> "re.Pattern[str]":
    """Compiles a pattern source.

    Raises:
        InvalidPatternSyntax: If the source is not a valid regular expression.
    """
    try:
        return re.compile(source, flags)
    except (re.error, OverflowError, RecursionError) as e:
        raise InvalidPatternSyntax(name, source, str(e)) from e


class PatternRegistry:
    """Copy-on-write store of patterns keyed by name.

    Writers build a new mapping and swap it in under a lock. Readers never
    lock: ``snapshot()`` hands out the current immutable mapping, which stays
    unchanged for the lifetime of a scan even if the registry is modified.
    """

    def __init__(self) -> None:
        self._patterns: Mapping[str, Pattern] = MappingProxyType({})
        self._write_lock = threading.Lock()

    @classmethod
    def with_builtins(cls, loader: Optional[PatternLoader] = None) -> "PatternRegistry":
        """Creates a registry populated from the pattern catalogue."""
        loader = loader or PatternLoader.get_instance()
        registry = cls()
        for definition in loader.get_patterns():
            registry.register(
                definition["name"],
                definition["regex"],
                definition["description"],
                sensitivity=definition["sensitivity"],
                builtin=True,
            )
        return registry

    def register(
        self,
        name: str,
        source: str,
        description: str = "",
        sensitivity: str = SensitivityClass.OTHER,
        builtin: bool = False,
    ) -> Pattern:
        """Compiles and stores a pattern, replacing any entry with the same name.

        See ``upsert`` for arguments and errors.
        """
        pattern, _ = self.upsert(name, source, description, sensitivity, builtin)
        return pattern

    def upsert(
        self,
        name: str,
        source: str,
        description: str = "",
        sensitivity: str = SensitivityClass.OTHER,
        builtin: bool = False,
    ) -> Tuple[Pattern, bool]:
        """Compiles and stores a pattern, reporting whether it replaced one.

        Args:
            name: Unique pattern name
            source: Regular expression source
            description: Human readable description
            sensitivity: Sensitivity class used for risk weighting
            builtin: True for entries loaded from the catalogue

        Returns:
            Tuple of (stored Pattern, True if an entry with that name existed)

        Raises:
            ValidationError: If name or source are not non-empty strings
            InvalidPatternSyntax: If source fails to compile
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Pattern name must be a non-empty string")
        if not isinstance(source, str) or not source:
            raise ValidationError(f'Pattern source for "{name}" must be a non-empty string')
        if sensitivity not in SensitivityClass.ALL:
            raise ValidationError(f"Unknown sensitivity class: {sensitivity}")

        pattern = Pattern(
            name=name,
            source=source,
            regex=compile_pattern(name, source),
            description=description or "",
            sensitivity=sensitivity,
            builtin=builtin,
        )

        with self._write_lock:
            overwritten = name in self._patterns
            if overwritten:
                logger.warning(
                    f'Pattern "{name}" already exists, overwriting',
                    extra={"pattern": name},
                )
            updated = dict(self._patterns)
            updated[name] = pattern
            self._patterns = MappingProxyType(updated)

        return pattern, overwritten

    def remove(self, name: str) -> None:
        """Deletes a pattern.

        Raises:
            PatternNotFound: If no pattern is registered under ``name``.
        """
        with self._write_lock:
            if name not in self._patterns:
                raise PatternNotFound(name)
            updated = dict(self._patterns)
            del updated[name]
            self._patterns = MappingProxyType(updated)

        logger.info("Pattern removed", extra={"pattern": name})

    def get(self, name: str) -> Optional[Pattern]:
        return self._patterns.get(name)

    def snapshot(self) -> Mapping[str, Pattern]:
        """Returns an immutable view of the current patterns."""
        return self._patterns

    def names(self) -> List[str]:
        return list(self._patterns)

    def list(self) -> List[Dict[str, Any]]:
        """Returns name, source, description and sensitivity for every pattern."""
        return [p.to_dict() for p in self._patterns.values()]

    def describe(self, name: str) -> str:
        pattern = self._patterns.get(name)
        if pattern is None or not pattern.description:
            return DEFAULT_DESCRIPTION
        return pattern.description

    def __contains__(self, name: object) -> bool:
        return name in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[str]:
        return iter(self._patterns)

    def __repr__(self) -> str:
        return f"<PatternRegistry patterns={len(self._patterns)}>"
