"""Validation pass over a composed job invocation graph.

Every check runs to completion and contributes structured issues; nothing here
raises on invalid data, so a single save reports the complete problem list.
"""

from __future__ import annotations

from app.domain import JobInvocation, Targeting, TemplateInvocation

from .interfaces import InvocationIssue


def job_invocation_collect_issues(invocation: JobInvocation) -> list[InvocationIssue]:
    """Collect every validation issue across the invocation graph.

    Args:
        invocation: Composed, unsaved invocation.

    Returns:
        list[InvocationIssue]: Ordered issues; empty when the graph may be persisted.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    issues = job_invocation_collect_targeting_issues(invocation.targeting)

    job_name = (invocation.job_name or "").strip()
    if not job_name:
        issues.append(InvocationIssue(scope=None, message="Job name can't be blank"))

    if not invocation.template_invocations:
        issues.append(InvocationIssue(scope=None, message="At least one job template must be bound"))
    elif job_name and all(
        template_invocation.job_template.job_name != job_name for template_invocation in invocation.template_invocations
    ):
        issues.append(InvocationIssue(scope=None, message=f"Job name {job_name} does not match any bound template"))

    for template_invocation in invocation.template_invocations:
        issues.extend(job_template_invocation_collect_issues(template_invocation))
    return issues


def job_invocation_collect_targeting_issues(targeting: Targeting | None) -> list[InvocationIssue]:
    """Collect targeting presence and mode issues.

    Args:
        targeting: Composed targeting, or None when none was built.

    Returns:
        list[InvocationIssue]: Targeting issues.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    if targeting is None:
        return [InvocationIssue(scope=None, message="Targeting can't be blank")]
    if targeting.bookmark is None and targeting.search_query is None:
        return [InvocationIssue(scope="Targeting", message="Bookmark or search query must be present")]
    return []


def job_template_invocation_collect_issues(template_invocation: TemplateInvocation) -> list[InvocationIssue]:
    """Collect blank and missing required input issues for one template binding.

    Args:
        template_invocation: Template binding with its input values.

    Returns:
        list[InvocationIssue]: Issues scoped to `Template <name>`.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    scope = f"Template {template_invocation.job_template.name}"
    issues = [
        InvocationIssue(
            scope=scope,
            message=f"Input {input_value.template_input.template_input_normalized_name()}: Value can't be blank",
        )
        for input_value in template_invocation.input_values
        if input_value.input_value_is_blank()
    ]

    missing_inputs = template_invocation.template_invocation_missing_required_inputs()
    if missing_inputs:
        missing_names = ", ".join(template_input.name for template_input in missing_inputs)
        issues.append(
            InvocationIssue(
                scope=scope,
                message=f"Not all required inputs have values. Missing inputs: {missing_names}",
            )
        )
    return issues
