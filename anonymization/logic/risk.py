# anonymization/logic/risk.py

"""Weighted risk classification of detection results."""

from dataclasses import dataclass
from typing import Mapping, Union

from anonymization.core.definitions import RiskLevel, SensitivityClass
from anonymization.core.domain import DetectionReport, PatternDetection


@dataclass(frozen=True)
class RiskPolicy:
    """Points per occurrence by sensitivity class, and level thresholds."""

    high_weight: int = 3
    medium_weight: int = 2
    default_weight: int = 1
    high_threshold: int = 10
    medium_threshold: int = 5
    low_threshold: int = 1

    @classmethod
    def from_settings(cls, settings) -> "RiskPolicy":
        return cls(
            high_weight=settings.risk_high_weight,
            medium_weight=settings.risk_medium_weight,
            default_weight=settings.risk_default_weight,
            high_threshold=settings.risk_high_threshold,
            medium_threshold=settings.risk_medium_threshold,
            low_threshold=settings.risk_low_threshold,
        )

    def weight(self, sensitivity: str) -> int:
        if sensitivity == SensitivityClass.HIGH:
            return self.high_weight
        if sensitivity == SensitivityClass.MEDIUM:
            return self.medium_weight
        return self.default_weight


class RiskScorer:
    """Turns per-pattern counts into a coarse risk level."""

    def __init__(self, policy: RiskPolicy = RiskPolicy()) -> None:
        self.policy = policy

    def points(
        self, detected: Union[DetectionReport, Mapping[str, PatternDetection]]
    ) -> int:
        if isinstance(detected, DetectionReport):
            detected = detected.detected
        return sum(
            d.count * self.policy.weight(d.sensitivity) for d in detected.values()
        )

    def classify(self, points: int) -> str:
        if points >= self.policy.high_threshold:
            return RiskLevel.HIGH
        if points >= self.policy.medium_threshold:
            return RiskLevel.MEDIUM
        if points >= self.policy.low_threshold:
            return RiskLevel.LOW
        return RiskLevel.NONE

    def score(
        self, detected: Union[DetectionReport, Mapping[str, PatternDetection]]
    ) -> str:
        """Returns the risk level for a report or its ``detected`` mapping."""
        return self.classify(self.points(detected))
