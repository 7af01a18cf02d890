"""Custom exceptions for flatten-bom."""


class FlattenBomError(Exception):
    """Base exception for all flatten-bom operations."""


class ConfigurationError(FlattenBomError):
    """Raised when configuration validation fails."""


class PatternSyntaxError(FlattenBomError, ValueError):
    """Raised when a coordinate pattern cannot be parsed."""


class UnresolvedVersionError(FlattenBomError):
    """Raised when an entry point dependency has no managed version."""


class DependencyResolutionError(FlattenBomError):
    """Raised when the artifact resolver fails to collect a dependency graph."""


class ConsistencyViolationError(FlattenBomError):
    """Raised when consistency checks fail under the FAIL policy.

    Attributes:
        findings: All findings collected during the run
    """

    def __init__(self, message: str, findings=None) -> None:
        super().__init__(message)
        self.findings = list(findings or [])


class FileProcessingError(FlattenBomError):
    """Raised when file operations fail."""


class ResolverError(FlattenBomError):
    """Raised by artifact resolvers when a dependency graph cannot be collected."""
