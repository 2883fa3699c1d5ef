# anonymization/engine/anonymizer.py

"""Anonymization pipeline: detection, strategy resolution and span splicing."""

import logging
import random
import time
from bisect import bisect_right
from typing import Dict, List, Optional, Sequence, Tuple

from anonymization.core.definitions import MAX_EXAMPLES
from anonymization.core.domain import (
    AnonymizationOptions,
    AnonymizationResult,
    DetectionReport,
    Match,
    PatternDetection,
    ReplacementRecord,
)
from anonymization.core.exceptions import PipelineFailure, ValidationError
from anonymization.engine.detector import Detector
from anonymization.engine.registry import PatternRegistry
from anonymization.logic.risk import RiskPolicy, RiskScorer
from anonymization.logic.strategies import StrategyResolver

logger = logging.getLogger(__name__)


class SpanClaims:
    """Sorted, non-overlapping ``[start, end)`` spans already taken by a match."""

    def __init__(self) -> None:
        self._starts: List[int] = []
        self._ends: List[int] = []

    def try_claim(self, start: int, end: int) -> bool:
        """Claims the span unless it overlaps a claimed one."""
        idx = bisect_right(self._starts, start)
        if idx > 0 and self._ends[idx - 1] > start:
            return False
        if idx < len(self._starts) and self._starts[idx] < end:
            return False
        self._starts.insert(idx, start)
        self._ends.insert(idx, end)
        return True


def splice(text: str, records: Sequence[ReplacementRecord]) -> str:
    """Rebuilds ``text`` with each record's span replaced exactly once.

    Records must describe non-overlapping spans of ``text``; their order does
    not matter.
    """
    parts: List[str] = []
    cursor = 0
    for record in sorted(records, key=lambda r: r.position):
        parts.append(text[cursor : record.position])
        parts.append(record.replacement)
        cursor = record.position + len(record.original)
    parts.append(text[cursor:])
    return "".join(parts)


class AnonymizationPipeline:
    """Orchestrates Detector, StrategyResolver and RiskScorer.

    Each call snapshots the registry once and is otherwise stateless, so one
    pipeline can serve concurrent callers.
    """

    def __init__(
        self,
        registry: PatternRegistry,
        detector: Optional[Detector] = None,
        resolver: Optional[StrategyResolver] = None,
        scorer: Optional[RiskScorer] = None,
        defaults: Optional[AnonymizationOptions] = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            registry: Pattern registry to snapshot on every call
            detector: Detector bound to ``registry``; created if omitted
            resolver: Strategy resolver; unseeded if omitted
            scorer: Risk scorer; default policy if omitted
            defaults: Options used when a call passes none
        """
        self.registry = registry
        self.detector = detector or Detector(registry)
        self.resolver = resolver or StrategyResolver()
        self.scorer = scorer or RiskScorer()
        self.defaults = defaults or AnonymizationOptions()

    @classmethod
    def from_settings(cls, registry: PatternRegistry, settings) -> "AnonymizationPipeline":
        """Builds a pipeline configured from a ``Settings`` object."""
        rng = random.Random(settings.random_seed) if settings.random_seed is not None else None
        return cls(
            registry,
            detector=Detector(registry, scan_workers=settings.scan_workers),
            resolver=StrategyResolver(rng=rng, hash_key=settings.hash_key),
            scorer=RiskScorer(RiskPolicy.from_settings(settings)),
            defaults=AnonymizationOptions(
                default_strategy=settings.default_strategy,
                preserve_format=settings.preserve_format,
                case_sensitive=settings.case_sensitive,
                mask_char=settings.mask_char,
            ),
        )

    def anonymize(
        self, text: str, options: Optional[AnonymizationOptions] = None
    ) -> AnonymizationResult:
        """Replaces every accepted match with its resolved substitute.

        Matches are resolved in pattern-major order. A match overlapping a span
        already claimed by an earlier match is skipped.

        Args:
            text: Input text
            options: Per-call options; pipeline defaults if omitted

        Returns:
            AnonymizationResult with the output text and replacement records

        Raises:
            PipelineFailure: If the result cannot be assembled
        """
        started = time.perf_counter()
        options = options or self.defaults

        try:
            if not isinstance(text, str):
                raise ValidationError(f"Expected text, got {type(text).__name__}")

            snapshot = self.registry.snapshot()
            matches = self.detector.detect(
                text,
                options.selected_patterns,
                case_sensitive=options.case_sensitive,
                snapshot=snapshot,
            )

            records, skipped = self._resolve_matches(matches, options)
            anonymized = splice(text, records)

            patterns_used = (
                list(options.selected_patterns)
                if options.selected_patterns is not None
                else list(snapshot)
            )
            default_strategy = self.resolver.lookup(options.default_strategy)

            result = AnonymizationResult(
                anonymized_text=anonymized,
                original_length=len(text),
                anonymized_length=len(anonymized),
                processing_time_ms=(time.perf_counter() - started) * 1000.0,
                replacements=records,
                patterns_used=patterns_used,
                strategy=(
                    default_strategy.name
                    if default_strategy is not None
                    else str(options.default_strategy)
                ),
            )

        except Exception as e:
            logger.error(
                "Anonymization failed",
                exc_info=True,
                extra={"text_length": len(text) if isinstance(text, str) else None},
            )
            raise PipelineFailure(f"Data anonymization failed: {e}") from e

        logger.info(
            "Anonymization completed",
            extra={
                "text_length": result.original_length,
                "replacement_count": result.replacements_count,
                "skipped_overlaps": skipped,
                "processing_time_ms": round(result.processing_time_ms, 3),
            },
        )
        return result

    def _resolve_matches(
        self, matches: Sequence[Match], options: AnonymizationOptions
    ) -> Tuple[List[ReplacementRecord], int]:
        records: List[ReplacementRecord] = []
        claims = SpanClaims()
        skipped = 0

        for match in matches:
            if not claims.try_claim(match.start, match.end):
                skipped += 1
                logger.debug(
                    "Discarding match overlapping an earlier replacement",
                    extra={"pattern": match.pattern_name, "position": match.start},
                )
                continue

            replacement, strategy_name = self.resolver.resolve(match, options)
            records.append(
                ReplacementRecord(
                    pattern_name=match.pattern_name,
                    original=match.text,
                    replacement=replacement,
                    strategy=strategy_name,
                    position=match.start,
                )
            )

        return records, skipped

    def detect_sensitive_data(
        self,
        text: str,
        pattern_names: Optional[Sequence[str]] = None,
        case_sensitive: Optional[bool] = None,
    ) -> DetectionReport:
        """Tallies matches per pattern and classifies the overall risk.

        Read-only: the text is never modified and no replacements are made.

        Raises:
            PipelineFailure: If the report cannot be assembled
        """
        if case_sensitive is None:
            case_sensitive = self.defaults.case_sensitive

        try:
            if not isinstance(text, str):
                raise ValidationError(f"Expected text, got {type(text).__name__}")

            snapshot = self.registry.snapshot()
            matches = self.detector.detect(
                text, pattern_names, case_sensitive=case_sensitive, snapshot=snapshot
            )

            grouped: Dict[str, List[str]] = {}
            for match in matches:
                grouped.setdefault(match.pattern_name, []).append(match.text)

            detected = {
                name: PatternDetection(
                    count=len(found),
                    examples=found[:MAX_EXAMPLES],
                    sensitivity=snapshot[name].sensitivity,
                    pattern_source=snapshot[name].source,
                )
                for name, found in grouped.items()
            }

            points = self.scorer.points(detected)
            report = DetectionReport(
                detected=detected,
                total_count=len(matches),
                risk_level=self.scorer.classify(points),
                risk_score=points,
            )

        except Exception as e:
            logger.error("Sensitive data detection failed", exc_info=True)
            raise PipelineFailure(f"Sensitive data detection failed: {e}") from e

        logger.info(
            "Detection completed",
            extra={
                "text_length": len(text),
                "total_count": report.total_count,
                "risk_level": report.risk_level,
            },
        )
        return report
