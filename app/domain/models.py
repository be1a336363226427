"""Typed domain models shared across runtime layers.

This module provides read-only data contracts for collaborator records that the
invocation composer consumes but never creates or mutates.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class Principal:
    """Requesting user identity attached to invocation targeting.

    Attributes:
        login: Stable user login.
    """

    login: str


@dataclass(frozen=True)
class Bookmark:
    """Saved, named host search query.

    Attributes:
        bookmark_id: Bookmark identifier.
        name: Human-readable bookmark name.
        query: Saved host search query text.
        owner_login: Optional login of the user owning the bookmark.
    """

    bookmark_id: str
    name: str
    query: str
    owner_login: str | None = None


@dataclass(frozen=True)
class TemplateInput:
    """Named parameter declared by a job template.

    Attributes:
        template_input_id: Template input identifier.
        name: Declared input name as authored on the template.
        required: Whether a non-blank value must be supplied.
    """

    template_input_id: str
    name: str
    required: bool = False

    def template_input_normalized_name(self) -> str:
        """Return the case-insensitive lookup key for this input.

        Returns:
            str: Stripped, lower-cased input name.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return domain_normalize_input_name(self.name)


@dataclass(frozen=True)
class JobTemplate:
    """Job template definition with its declared inputs.

    Attributes:
        job_template_id: Job template identifier.
        name: Template display name used in error messages.
        job_name: Job name the template implements.
        template_inputs: Declared inputs in definition order.
    """

    job_template_id: str
    name: str
    job_name: str
    template_inputs: tuple[TemplateInput, ...] = ()

    def job_template_find_input(self, name: str) -> TemplateInput | None:
        """Find a declared input by case-insensitive name.

        Args:
            name: Supplied input name.

        Returns:
            TemplateInput | None: Matching declared input or None when undeclared.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        lookup_key = domain_normalize_input_name(name)
        for template_input in self.template_inputs:
            if template_input.template_input_normalized_name() == lookup_key:
                return template_input
        return None

    def job_template_required_inputs(self) -> tuple[TemplateInput, ...]:
        """Return required inputs in definition order."""

        return tuple(template_input for template_input in self.template_inputs if template_input.required)


def domain_normalize_input_name(name: str) -> str:
    """Normalize an input name for matching and error messages.

    Args:
        name: Raw input name.

    Returns:
        str: Stripped, lower-cased name.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return str(name).strip().lower()
