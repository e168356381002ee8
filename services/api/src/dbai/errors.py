"""Error taxonomy for the engagement engine.

Read paths catch these and degrade to defaults; write paths let them
reach the caller, where the global handlers map them to JSON responses.
"""

from __future__ import annotations


class EngagementError(Exception):
    """Base class for all engagement engine errors."""


class NotConfiguredError(EngagementError, RuntimeError):
    """The store is not initialised or unreachable."""


class NoCandidatesError(EngagementError):
    """The rotation pool has no enabled topics."""

    def __init__(self, message: str = "No topics available in the rotation pool") -> None:
        super().__init__(message)


class WriteConflictError(EngagementError):
    """A unique write was rejected and the winning row could not be re-read."""


class TopicValidationError(EngagementError, ValueError):
    """A topic write was rejected. Carries the offending field."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class CompletionValidationError(EngagementError, ValueError):
    """A debate completion carried an unknown outcome or an invalid score."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class TopicNotFoundError(EngagementError, LookupError):
    """No topic with the requested id."""


class TopicInUseError(EngagementError):
    """The topic is referenced by the rotation history and cannot be deleted."""
