# anonymization/core/definitions.py

"""Constants for pattern categories, sensitivity classes, strategies and risk levels."""


class PatternName:
    """Names of the built-in sensitive data patterns."""

    EMAIL = "email"
    PHONE = "phone"
    SSN = "ssn"
    CREDIT_CARD = "creditCard"
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    MAC_ADDRESS = "macAddress"
    BITCOIN = "bitcoin"
    ETHEREUM = "ethereum"
    URL = "url"
    USERNAME = "username"
    HASHTAG = "hashtag"


class SensitivityClass:
    """Sensitivity classes used for risk weighting."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    OTHER = "other"

    ALL = (HIGH, MEDIUM, LOW, OTHER)


class StrategyName:
    """Replacement strategy identifiers."""

    MASK = "mask"
    HASH = "hash"
    KEYED_HASH = "keyed_hash"
    REPLACE = "replace"
    REMOVE = "remove"
    LITERAL = "literal"


class RiskLevel:
    """Ordinal risk classifications, lowest first."""

    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    ORDER = (NONE, LOW, MEDIUM, HIGH)


DEFAULT_DESCRIPTION = "Custom pattern"
MAX_EXAMPLES = 3
