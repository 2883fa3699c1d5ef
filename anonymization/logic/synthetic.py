# anonymization/logic/synthetic.py

"""Generators for structurally plausible synthetic values."""

import random
from typing import Callable, Dict, Optional

from anonymization.core.definitions import PatternName


class SyntheticGenerator:
    """Produces fake values shaped like the category they replace.

    All randomness comes from ``rng``; pass a seeded ``random.Random`` to get
    reproducible output.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self._generators: Dict[str, Callable[[], str]] = {
            PatternName.EMAIL: self.email,
            PatternName.PHONE: self.phone,
            PatternName.SSN: self.ssn,
            PatternName.CREDIT_CARD: self.credit_card,
            PatternName.IPV4: self.ipv4,
        }

    def number(self, digits: int) -> str:
        """Random number with exactly ``digits`` digits and no leading zero."""
        return str(self.rng.randint(10 ** (digits - 1), 10**digits - 1))

    def email(self) -> str:
        return f"user{self.rng.randint(0, 9999)}@example.com"

    def phone(self) -> str:
        return f"+1-{self.number(3)}-{self.number(3)}-{self.number(4)}"

    def ssn(self) -> str:
        return f"{self.number(3)}-{self.number(2)}-{self.number(4)}"

    def credit_card(self) -> str:
        return "-".join(self.number(4) for _ in range(4))

    def ipv4(self) -> str:
        return ".".join(str(self.rng.randint(1, 254)) for _ in range(4))

    def generate(self, pattern_name: str) -> Optional[str]:
        """Returns a synthetic value, or None when the category has no generator."""
        generator = self._generators.get(pattern_name)
        return generator() if generator else None
