"""Mutable job invocation graph populated by the invocation composer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .models import Bookmark, JobTemplate, Principal, TemplateInput

STATIC_QUERY_TARGETING_TYPE: Final[str] = "static_query"


@dataclass
class Targeting:
    """Host selection rule for one job invocation.

    Exactly one of `bookmark` and `search_query` is set on a valid targeting.

    Attributes:
        targeting_type: Targeting mode literal.
        user: Requesting principal owning the targeting.
        bookmark: Saved query used for bookmark targeting.
        search_query: Verbatim ad-hoc host search query.
        targeting_id: Identifier assigned after successful persistence.
    """

    targeting_type: str
    user: Principal
    bookmark: Bookmark | None = None
    search_query: str | None = None
    targeting_id: str | None = None

    def targeting_resolved_search_query(self) -> str | None:
        """Return the effective host search query.

        Returns:
            str | None: Bookmark query for bookmark targeting, otherwise the ad-hoc query.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self.bookmark is not None:
            return self.bookmark.query
        return self.search_query


@dataclass
class InputValue:
    """Value supplied for one template input.

    Attributes:
        template_input: Declared input the value belongs to.
        value: Supplied value, or None when the pair carried no value.
        input_value_id: Identifier assigned after successful persistence.
    """

    template_input: TemplateInput
    value: str | None
    input_value_id: str | None = None

    def input_value_is_blank(self) -> bool:
        """Return whether the value counts as blank for its input.

        A missing value is always blank. An empty or whitespace-only string is
        blank only when the input is required.

        Returns:
            bool: True when the value fails presence validation.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self.value is None:
            return True
        return self.template_input.required and not self.value.strip()


@dataclass
class TemplateInvocation:
    """Binding of one job template to an invocation.

    Attributes:
        job_template: Bound job template.
        input_values: One value per declared input that received a value.
        template_invocation_id: Identifier assigned after successful persistence.
    """

    job_template: JobTemplate
    input_values: list[InputValue] = field(default_factory=list)
    template_invocation_id: str | None = None

    def template_invocation_missing_required_inputs(self) -> tuple[TemplateInput, ...]:
        """Return required inputs that have no value entry at all."""

        bound_input_ids = {input_value.template_input.template_input_id for input_value in self.input_values}
        return tuple(
            template_input
            for template_input in self.job_template.job_template_required_inputs()
            if template_input.template_input_id not in bound_input_ids
        )


@dataclass
class JobInvocation:
    """Root record describing one job invocation request.

    Attributes:
        job_name: Job name selected by the request.
        job_template: Primary job template reference.
        targeting: Host selection rule, None until composed.
        template_invocations: Template bindings owned by the invocation.
        job_invocation_id: Identifier assigned after successful persistence.
    """

    job_name: str | None = None
    job_template: JobTemplate | None = None
    targeting: Targeting | None = None
    template_invocations: list[TemplateInvocation] = field(default_factory=list)
    job_invocation_id: str | None = None

    @property
    def is_persisted(self) -> bool:
        """Return whether the invocation graph was durably saved."""

        return self.job_invocation_id is not None
