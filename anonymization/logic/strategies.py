# anonymization/logic/strategies.py

"""Replacement strategies and per-match strategy resolution."""

import hashlib
import hmac
import logging
import random
import re
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterator, Optional, Tuple, Union

from anonymization.core.definitions import PatternName, StrategyName
from anonymization.core.domain import AnonymizationOptions, Match, StrategySpec
from anonymization.core.exceptions import StrategyResolutionFailure
from anonymization.logic.synthetic import SyntheticGenerator

logger = logging.getLogger(__name__)


class MaskLogic:
    """Utility methods shared by the masking rules."""

    NON_DIGIT = re.compile(r"[^0-9]")
    ALPHANUM = re.compile(r"[A-Za-z0-9]")

    @staticmethod
    def digits(text: str) -> str:
        return MaskLogic.NON_DIGIT.sub("", text)

    @staticmethod
    def mask_all(text: str, mask_char: str) -> str:
        return mask_char * len(text)


class ReplacementStrategy(ABC):
    """Base class for replacement behaviours."""

    name: str = ""

    @abstractmethod
    def apply(self, original: str, pattern_name: str, options: AnonymizationOptions) -> str:
        """Computes the replacement for one matched value.

        Args:
            original: Matched text
            pattern_name: Name of the pattern that matched
            options: Options of the current call

        Returns:
            Replacement text
        """
        pass


class MaskStrategy(ReplacementStrategy):
    """Category-aware partial redaction."""

    name = StrategyName.MASK

    def apply(self, original: str, pattern_name: str, options: AnonymizationOptions) -> str:
        c = options.mask_char

        if pattern_name == PatternName.EMAIL and "@" in original:
            local, _, domain = original.partition("@")
            if len(local) > 1:
                local = local[0] + c * (len(local) - 2) + local[-1]
            return f"{local}@{domain}"

        if pattern_name == PatternName.PHONE:
            digits = MaskLogic.digits(original)
            if len(digits) < 4:
                return MaskLogic.mask_all(original, c)
            return f"{c * 3}-{c * 3}-{digits[-4:]}"

        if pattern_name == PatternName.SSN:
            digits = MaskLogic.digits(original)
            if len(digits) < 4:
                return MaskLogic.mask_all(original, c)
            return f"{c * 3}-{c * 2}-{digits[-4:]}"

        if pattern_name == PatternName.CREDIT_CARD:
            digits = MaskLogic.digits(original)
            if len(digits) != 16:
                return MaskLogic.mask_all(original, c)
            return "-".join([c * 4] * 3 + [digits[-4:]])

        if options.preserve_format:
            return MaskLogic.ALPHANUM.sub(c, original)
        return MaskLogic.mask_all(original, c)


def _utf16_units(text: str) -> Iterator[int]:
    for ch in text:
        cp = ord(ch)
        if cp > 0xFFFF:
            cp -= 0x10000
            yield 0xD800 + (cp >> 10)
            yield 0xDC00 + (cp & 0x3FF)
        else:
            yield cp


def rolling_hash(text: str) -> int:
    """32-bit signed rolling hash (``h * 31 + unit``) over UTF-16 code units."""
    h = 0
    for unit in _utf16_units(text):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


class HashStrategy(ReplacementStrategy):
    """Deterministic pseudonymous label such as ``E_1a2b3c4d``.

    The fingerprint is a 32-bit rolling hash. It is NOT unique and NOT secure:
    distinct inputs can collide and values are trivially brute-forced. Use
    ``KeyedHashStrategy`` where the label must not be reversible.
    """

    name = StrategyName.HASH

    def apply(self, original: str, pattern_name: str, options: AnonymizationOptions) -> str:
        prefix = pattern_name[:1].upper()
        return f"{prefix}_{format(abs(rolling_hash(original)), 'x')[:8]}"


class KeyedHashStrategy(ReplacementStrategy):
    """HMAC-SHA256 label with the same shape as ``HashStrategy``."""

    name = StrategyName.KEYED_HASH

    def __init__(self, key: Optional[Union[str, bytes]] = None) -> None:
        if isinstance(key, str):
            key = key.encode("utf-8")
        self._key = key

    def apply(self, original: str, pattern_name: str, options: AnonymizationOptions) -> str:
        if not self._key:
            raise ValueError("keyed_hash requires a hash key")
        digest = hmac.new(
            self._key, f"{pattern_name}:{original}".encode("utf-8"), hashlib.sha256
        ).hexdigest()
        return f"{pattern_name[:1].upper()}_{digest[:8]}"


class ReplaceStrategy(ReplacementStrategy):
    """Synthetic value of the same shape, or a bracketed placeholder."""

    name = StrategyName.REPLACE

    def __init__(self, generator: Optional[SyntheticGenerator] = None) -> None:
        self.generator = generator or SyntheticGenerator()

    def apply(self, original: str, pattern_name: str, options: AnonymizationOptions) -> str:
        value = self.generator.generate(pattern_name)
        if value is None:
            return f"[ANONYMIZED_{pattern_name.upper()}]"
        return value


class RemoveStrategy(ReplacementStrategy):
    name = StrategyName.REMOVE

    def apply(self, original: str, pattern_name: str, options: AnonymizationOptions) -> str:
        return ""


class CallableStrategy(ReplacementStrategy):
    """Adapts a plain function ``(original, pattern_name, options) -> str``."""

    def __init__(self, func: Callable[..., str], name: Optional[str] = None) -> None:
        self.func = func
        self.name = name or getattr(func, "__name__", "custom")

    def apply(self, original: str, pattern_name: str, options: AnonymizationOptions) -> str:
        return self.func(original, pattern_name, options)


class StrategyResolver:
    """Chooses and runs the strategy for each match.

    Precedence: literal override, per-pattern strategy override, default
    strategy, then mask. A strategy that raises or returns a non-string is
    replaced by mask for that match only.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        hash_key: Optional[Union[str, bytes]] = None,
    ) -> None:
        self.generator = SyntheticGenerator(rng)
        self._fallback = MaskStrategy()
        self._strategies: Dict[str, ReplacementStrategy] = {
            StrategyName.MASK: self._fallback,
            StrategyName.HASH: HashStrategy(),
            StrategyName.KEYED_HASH: KeyedHashStrategy(hash_key),
            StrategyName.REPLACE: ReplaceStrategy(self.generator),
            StrategyName.REMOVE: RemoveStrategy(),
        }

    def register(self, strategy: ReplacementStrategy) -> None:
        """Makes a custom strategy selectable by its name."""
        self._strategies[strategy.name] = strategy

    def lookup(self, spec: Optional[StrategySpec]) -> Optional[ReplacementStrategy]:
        """Returns the strategy for a name, instance or callable; None if unresolved."""
        if spec is None:
            return None
        if isinstance(spec, ReplacementStrategy):
            return spec
        if isinstance(spec, str):
            strategy = self._strategies.get(spec)
            if strategy is None:
                logger.debug("Unknown strategy requested", extra={"strategy": spec})
            return strategy
        if callable(spec):
            return CallableStrategy(spec)
        return None

    def resolve(self, match: Match, options: AnonymizationOptions) -> Tuple[str, str]:
        """Computes the replacement for a match.

        Returns:
            Tuple of (replacement text, name of the strategy that produced it)
        """
        override = options.overrides.get(match.pattern_name)
        if override is not None and override.replacement is not None:
            return str(override.replacement), StrategyName.LITERAL

        strategy = (
            (override is not None and self.lookup(override.strategy))
            or self.lookup(options.default_strategy)
            or self._fallback
        )

        try:
            replacement = strategy.apply(match.text, match.pattern_name, options)
            if not isinstance(replacement, str):
                raise TypeError(
                    f"expected str replacement, got {type(replacement).__name__}"
                )
            return replacement, strategy.name

        except Exception as e:
            failure = StrategyResolutionFailure(strategy.name, match.pattern_name, e)
            logger.warning(
                "Strategy failed, falling back to mask",
                extra={
                    "strategy": failure.strategy,
                    "pattern": failure.pattern_name,
                    "position": match.start,
                    "error_type": type(e).__name__,
                },
            )
            return (
                self._fallback.apply(match.text, match.pattern_name, options),
                self._fallback.name,
            )
