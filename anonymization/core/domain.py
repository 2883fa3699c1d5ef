# anonymization/core/domain.py

"""Domain models for detection and anonymization results."""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from anonymization.core.definitions import RiskLevel, SensitivityClass, StrategyName
from anonymization.core.exceptions import ValidationError

StrategySpec = Union[str, Callable[..., str], Any]


@dataclass(frozen=True)
class Pattern:
    """A named matching rule for one category of sensitive data.

    Attributes:
        name: Unique key within a registry
        source: Regular expression source text
        regex: Compiled matcher for ``source``
        description: Human readable description
        sensitivity: Sensitivity class used for risk weighting
        builtin: True for patterns loaded from the catalogue
    """

    name: str
    source: str
    regex: "re.Pattern[str]"
    description: str = ""
    sensitivity: str = SensitivityClass.OTHER
    builtin: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "pattern_source": self.source,
            "description": self.description,
            "sensitivity": self.sensitivity,
            "builtin": self.builtin,
        }


@dataclass(frozen=True)
class Match:
    """A single located occurrence of a pattern in the original input.

    Attributes:
        pattern_name: Name of the pattern that produced the match
        text: Matched substring, equal to ``input[start:end]``
        start: Starting character position in the original text
        end: Ending character position in the original text
    """

    pattern_name: str
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class ReplacementRecord:
    """One substitution applied to the output text."""

    pattern_name: str
    original: str
    replacement: str
    strategy: str
    position: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern_name,
            "original": self.original,
            "replacement": self.replacement,
            "strategy": self.strategy,
            "position": self.position,
        }


@dataclass
class PatternOverride:
    """Per-pattern replacement policy.

    Attributes:
        strategy: Strategy name, strategy instance, or a callable taking
            ``(original, pattern_name, options)`` and returning the replacement
        replacement: Literal replacement, used verbatim when set
    """

    strategy: Optional[StrategySpec] = None
    replacement: Optional[str] = None


@dataclass
class AnonymizationOptions:
    """Options for a single ``anonymize`` call.

    Attributes:
        selected_patterns: Ordered pattern names, ``None`` selects every pattern
        default_strategy: Strategy used when no override applies
        overrides: Mapping of pattern name to its override
        preserve_format: Keep punctuation and spacing when masking
        case_sensitive: Match patterns case-sensitively
        mask_char: Character used by the mask strategy
    """

    selected_patterns: Optional[Sequence[str]] = None
    default_strategy: StrategySpec = StrategyName.MASK
    overrides: Dict[str, PatternOverride] = field(default_factory=dict)
    preserve_format: bool = True
    case_sensitive: bool = False
    mask_char: str = "*"

    def __post_init__(self) -> None:
        if not isinstance(self.mask_char, str) or len(self.mask_char) != 1:
            raise ValidationError(
                f"mask_char must be a single character, got {self.mask_char!r}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AnonymizationOptions":
        """Builds options from a plain mapping (presets, CLI or JSON input).

        Accepts ``patterns``/``selected_patterns``, ``strategy``/``default_strategy``
        and ``overrides``/``custom_replacements`` keys.
        """
        patterns = data.get("selected_patterns", data.get("patterns"))
        strategy = data.get("default_strategy", data.get("strategy")) or StrategyName.MASK
        raw_overrides = data.get("overrides", data.get("custom_replacements")) or {}

        overrides: Dict[str, PatternOverride] = {}
        for name, value in raw_overrides.items():
            if isinstance(value, PatternOverride):
                overrides[name] = value
            elif isinstance(value, Mapping):
                overrides[name] = PatternOverride(
                    strategy=value.get("strategy"),
                    replacement=value.get("replacement"),
                )
            else:
                overrides[name] = PatternOverride(replacement=str(value))

        return cls(
            selected_patterns=list(patterns) if patterns is not None else None,
            default_strategy=strategy,
            overrides=overrides,
            preserve_format=bool(data.get("preserve_format", True)),
            case_sensitive=bool(data.get("case_sensitive", False)),
            mask_char=data.get("mask_char", "*"),
        )


@dataclass
class AnonymizationResult:
    """Result object returned by ``anonymize``.

    Attributes:
        anonymized_text: Text with every accepted match replaced
        original_length: Length of the input text
        anonymized_length: Length of the output text
        processing_time_ms: Wall-clock duration of the call
        replacements: Applied substitutions in pattern-major order
        patterns_used: Pattern names the call was asked to scan
        strategy: Name of the default strategy for the call
    """

    anonymized_text: str
    original_length: int
    anonymized_length: int
    processing_time_ms: float
    replacements: List[ReplacementRecord] = field(default_factory=list)
    patterns_used: List[str] = field(default_factory=list)
    strategy: str = StrategyName.MASK

    @property
    def replacements_count(self) -> int:
        return len(self.replacements)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "anonymized_text": self.anonymized_text,
            "metadata": {
                "original_length": self.original_length,
                "anonymized_length": self.anonymized_length,
                "processing_time_ms": self.processing_time_ms,
                "replacements_count": self.replacements_count,
                "patterns_used": list(self.patterns_used),
                "strategy": self.strategy,
                "replacements": [r.to_dict() for r in self.replacements],
            },
        }


@dataclass
class PatternDetection:
    """Per-pattern tally inside a detection report."""

    count: int
    examples: List[str]
    sensitivity: str
    pattern_source: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "examples": list(self.examples),
            "sensitivity": self.sensitivity,
            "pattern_source": self.pattern_source,
        }


@dataclass
class DetectionReport:
    """Result object returned by ``detect_sensitive_data``."""

    detected: Dict[str, PatternDetection] = field(default_factory=dict)
    total_count: int = 0
    risk_level: str = RiskLevel.NONE
    risk_score: int = 0

    @property
    def has_sensitive_data(self) -> bool:
        return self.total_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detected": {name: d.to_dict() for name, d in self.detected.items()},
            "total_count": self.total_count,
            "has_sensitive_data": self.has_sensitive_data,
            "risk_level": self.risk_level,
            "risk_score": self.risk_score,
        }
