"""Typed interfaces and error contracts for job invocation composition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

COMPOSER_STATE_INITIALIZING: Final[str] = "initializing"
COMPOSER_STATE_ASSEMBLED: Final[str] = "assembled"
COMPOSER_STATE_SAVED: Final[str] = "saved"
COMPOSER_STATE_REJECTED: Final[str] = "rejected"

TARGETING_CONFLICT_CODE: Final[str] = "TARGETING_CONFLICT"
INVOCATION_NOT_SAVED_CODE: Final[str] = "INVOCATION_NOT_SAVED"


@dataclass(frozen=True)
class InvocationIssue:
    """One structured validation failure found in an invocation graph.

    Attributes:
        scope: Qualifying scope such as `Template <name>`, or None for invocation-level issues.
        message: Specific failure message.
    """

    scope: str | None
    message: str

    def issue_render(self) -> str:
        """Render the issue as one display line.

        Returns:
            str: `<scope>: <message>` or the bare message when unscoped.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self.scope is None:
            return self.message
        return f"{self.scope}: {self.message}"

    def issue_to_payload(self) -> dict[str, str | None]:
        """Return a JSON-compatible representation of the issue."""

        return {"scope": self.scope, "message": self.message}


class TargetingConflictError(ValueError):
    """Raised at construction time when mutually exclusive targeting inputs are both supplied."""


class InvocationNotSavedError(RuntimeError):
    """Raised when invocation validation fails; nothing was persisted.

    Attributes:
        issues: Every validation issue found across the invocation graph.
    """

    def __init__(self, issues: list[InvocationIssue]):
        """Initialize the rejection with its aggregated issues.

        Args:
            issues: Non-empty ordered list of validation issues.

        Raises:
            ValueError: Raised when issues are empty.
        """

        if not issues:
            raise ValueError("issues must not be empty")
        self.issues = tuple(issues)
        super().__init__("\n".join(issue.issue_render() for issue in self.issues))
