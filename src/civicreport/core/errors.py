"""
Error taxonomy.

Only malformed input is an error here. A missing user location is a normal state
and is reported through the `degraded` flag of a filter outcome instead.
"""

from __future__ import annotations


class CivicReportError(Exception):
    """Base class for all CivicReport errors."""


class ValidationError(CivicReportError, ValueError):
    """Malformed coordinate or radius input.

    `field` names the offending value (e.g. `origin.latitude`, `radius_km`) and
    `record_id` identifies the record when the bad value came from a candidate.
    """

    def __init__(self, message: str, *, field: str | None = None, record_id: str | None = None):
        super().__init__(message)
        self.field = field
        self.record_id = record_id


class IssueNotFound(CivicReportError, KeyError):
    """Raised by the issue store for unknown ids."""

    def __init__(self, issue_id: str):
        super().__init__(issue_id)
        self.issue_id = issue_id

    def __str__(self) -> str:
        return f"Issue '{self.issue_id}' not found"
