# anonymization/engine/detector.py

"""Pattern scanning over the original, unmodified input text."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import List, Mapping, Optional, Sequence

from anonymization.core.domain import Match, Pattern
from anonymization.engine.registry import PatternRegistry

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _case_insensitive(source: str) -> "re.Pattern[str]":
    return re.compile(source, re.IGNORECASE)


def scan_pattern(text: str, pattern: Pattern, case_sensitive: bool = False) -> List[Match]:
    """Returns every non-empty match of one pattern, in ascending start order."""
    regex = pattern.regex
    if not case_sensitive and not regex.flags & re.IGNORECASE:
        regex = _case_insensitive(pattern.source)

    return [
        Match(pattern_name=pattern.name, text=m.group(), start=m.start(), end=m.end())
        for m in regex.finditer(text)
        if m.end() > m.start()
    ]


class Detector:
    """Scans text against an ordered selection of registry patterns.

    The output is pattern-major: all matches of the first selected pattern in
    position order, then all matches of the second, and so on. Unknown names
    are skipped.
    """

    def __init__(self, registry: PatternRegistry, scan_workers: int = 1) -> None:
        self.registry = registry
        self.scan_workers = max(1, scan_workers)

    def resolve(
        self,
        pattern_names: Optional[Sequence[str]],
        snapshot: Mapping[str, Pattern],
    ) -> List[Pattern]:
        """Maps names to patterns in caller order, dropping unknown names."""
        if pattern_names is None:
            return list(snapshot.values())

        resolved: List[Pattern] = []
        seen = set()
        for name in pattern_names:
            pattern = snapshot.get(name)
            if pattern is None:
                logger.debug("Skipping unknown pattern", extra={"pattern": name})
                continue
            if name in seen:
                continue
            seen.add(name)
            resolved.append(pattern)
        return resolved

    def detect(
        self,
        text: str,
        pattern_names: Optional[Sequence[str]] = None,
        case_sensitive: bool = False,
        snapshot: Optional[Mapping[str, Pattern]] = None,
    ) -> List[Match]:
        """Locates matches of the selected patterns.

        Args:
            text: Input text, never modified
            pattern_names: Ordered pattern names, None for every registered pattern
            case_sensitive: Match case-sensitively
            snapshot: Registry snapshot to scan with; taken now if omitted

        Returns:
            Matches in pattern-major order
        """
        if snapshot is None:
            snapshot = self.registry.snapshot()

        patterns = self.resolve(pattern_names, snapshot)
        if not patterns or not text:
            return []

        if self.scan_workers > 1 and len(patterns) > 1:
            with ThreadPoolExecutor(max_workers=self.scan_workers) as pool:
                per_pattern = list(
                    pool.map(lambda p: scan_pattern(text, p, case_sensitive), patterns)
                )
        else:
            per_pattern = [scan_pattern(text, p, case_sensitive) for p in patterns]

        matches = [m for group in per_pattern for m in group]
        logger.debug(
            "Detection pass finished",
            extra={
                "pattern_count": len(patterns),
                "match_count": len(matches),
                "text_length": len(text),
            },
        )
        return matches
