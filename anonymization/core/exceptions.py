# anonymization/core/exceptions.py

"""Custom exception hierarchy for the text anonymization engine.

Registry mutations report their expected failures as structured payloads at
the service boundary; only ``PipelineFailure`` is meant to reach callers of
the transformation operations.
"""


class AnonymizationError(Exception):
    """Base exception for all application-specific errors."""

    pass


class ConfigurationError(AnonymizationError):
    """Raised when configuration or the pattern catalogue cannot be loaded."""

    pass


class ValidationError(AnonymizationError):
    """Raised when input validation fails (e.g., an empty pattern name)."""

    pass


class InvalidPatternSyntax(AnonymizationError):
    """Raised when a pattern source fails to compile."""

    def __init__(self, name: str, source: str, reason: str) -> None:
        self.name = name
        self.source = source
        self.reason = reason
        super().__init__(f'Invalid pattern "{name}": {reason}')


class PatternNotFound(AnonymizationError):
    """Raised when removing a pattern that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Pattern "{name}" not found')


class UnknownPatternSelected(AnonymizationError):
    """A selected pattern name is not registered.

    Detection skips such names silently; the type exists so callers that want
    strict selection can raise it themselves.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Pattern "{name}" is not registered')


class StrategyResolutionFailure(AnonymizationError):
    """Raised when a strategy fails to produce a replacement for one match."""

    def __init__(self, strategy: str, pattern_name: str, cause: Exception) -> None:
        self.strategy = strategy
        self.pattern_name = pattern_name
        self.cause = cause
        super().__init__(
            f'Strategy "{strategy}" failed for pattern "{pattern_name}": {cause}'
        )


class PipelineFailure(AnonymizationError):
    """Raised when a pipeline call cannot assemble its result."""

    pass
