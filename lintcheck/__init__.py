"""Run a lint engine over source files and report findings as a GitHub check run."""

__version__ = "0.1.0"
