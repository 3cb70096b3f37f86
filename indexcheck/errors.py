"""Fatal error taxonomy.

Reconciliation mismatches are never raised; they are reported as data in a
ReconciliationResult. Only the errors below abort a verification run.
"""

from __future__ import annotations


class IndexCheckError(Exception):
    """Base class for fatal verification errors."""


class SpecParseError(IndexCheckError):
    """The index specification document is malformed."""

    def __init__(self, message: str, issues: list[str] | None = None):
        self.issues = list(issues or [])
        if self.issues:
            message = f"{message}: " + "; ".join(self.issues)
        super().__init__(message)


class ConfigurationError(IndexCheckError):
    """An environment could not be resolved to a project, or settings are invalid."""


class StateFetchError(IndexCheckError):
    """The observed index state could not be retrieved."""
