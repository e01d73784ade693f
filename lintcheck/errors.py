from __future__ import annotations


class LintcheckError(Exception):
    """Base class for failures reported through the host failure signal."""


class ConfigurationError(LintcheckError):
    """Raised when a required input or repository context value is missing."""


class FileAccessError(LintcheckError):
    """Raised when a discovered file cannot be read."""


class EngineError(LintcheckError):
    """Raised when the lint engine cannot lint a file."""


class ConfigLoadError(EngineError):
    """Raised when a rule configuration file is missing or malformed."""


class TransportError(LintcheckError):
    """Raised when a check-runs API call fails or returns a non-2xx status."""


class CheckRunStateError(LintcheckError):
    """Raised when the check-run lifecycle is driven out of order."""
