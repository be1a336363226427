"""Normalization of untyped invocation parameter bags into typed requests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class InvocationInputBinding:
    """One supplied `{name, value}` input pair.

    Attributes:
        name: Supplied input name, matched case-insensitively.
        value: Supplied value, or None when the pair carried no value.
    """

    name: str
    value: str | None


@dataclass(frozen=True)
class JobInvocationRequest:
    """Typed view of an invocation parameter bag.

    Blank strings are normalized to None for selector fields, except
    `search_query` which keeps its verbatim text when present.

    Attributes:
        job_name: Requested job name.
        template_ids: Template identifiers in binding order, without duplicates.
        targeting_type: Requested targeting mode literal.
        bookmark_id: Bookmark identifier for saved-query targeting.
        search_query: Verbatim ad-hoc host search query.
        inputs: Input bindings in supplied order.
    """

    job_name: str | None
    template_ids: tuple[str, ...]
    targeting_type: str | None
    bookmark_id: str | None
    search_query: str | None
    inputs: tuple[InvocationInputBinding, ...]

    def request_has_targeting_conflict(self) -> bool:
        """Return whether a targeting type was given with both targeting modes.

        Returns:
            bool: True when bookmark and search query are both present alongside a targeting type.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return self.targeting_type is not None and self.bookmark_id is not None and self.search_query is not None


def job_invocation_request_from_params(params: Mapping[str, Any] | None) -> JobInvocationRequest:
    """Build a typed request from a raw parameter bag.

    Args:
        params: Raw request parameters.

    Returns:
        JobInvocationRequest: Normalized request.

    Raises:
        ValueError: Raised when params or the inputs collection are malformed.
    """

    if params is None:
        params = {}
    if not isinstance(params, Mapping):
        raise ValueError("params must be a mapping")

    template_ids: list[str] = []
    for raw_template_id in [params.get("template_id"), *_job_request_sequence(params.get("template_ids"), "template_ids")]:
        template_id = _job_request_optional_text(raw_template_id)
        if template_id is not None and template_id not in template_ids:
            template_ids.append(template_id)

    search_query = params.get("search_query")
    if search_query is not None and not str(search_query).strip():
        search_query = None

    return JobInvocationRequest(
        job_name=_job_request_optional_text(params.get("job_name")),
        template_ids=tuple(template_ids),
        targeting_type=_job_request_optional_text(params.get("targeting_type")),
        bookmark_id=_job_request_optional_text(params.get("bookmark_id")),
        search_query=str(search_query) if search_query is not None else None,
        inputs=job_invocation_request_parse_inputs(params.get("inputs")),
    )


def job_invocation_request_parse_inputs(raw_inputs: Any) -> tuple[InvocationInputBinding, ...]:
    """Parse supplied inputs into ordered bindings.

    Accepts a sequence of `{name, value}` mappings or a plain `{name: value}`
    mapping. Entries without a name are skipped since they cannot match any
    declared input.

    Args:
        raw_inputs: Raw `inputs` parameter value.

    Returns:
        tuple[InvocationInputBinding, ...]: Bindings in supplied order.

    Raises:
        ValueError: Raised when inputs or one entry has an unsupported shape.
    """

    if raw_inputs is None:
        return ()

    if isinstance(raw_inputs, Mapping):
        return tuple(
            InvocationInputBinding(name=str(name), value=_job_request_input_value(value))
            for name, value in raw_inputs.items()
            if str(name).strip()
        )

    bindings: list[InvocationInputBinding] = []
    for entry in _job_request_sequence(raw_inputs, "inputs"):
        if not isinstance(entry, Mapping):
            raise ValueError("inputs entries must be mappings with name and value keys")
        name = _job_request_optional_text(entry.get("name"))
        if name is None:
            continue
        bindings.append(InvocationInputBinding(name=name, value=_job_request_input_value(entry.get("value"))))
    return tuple(bindings)


def _job_request_sequence(raw_value: Any, field_name: str) -> Sequence[Any]:
    if raw_value is None:
        return ()
    if isinstance(raw_value, (str, bytes)) or not isinstance(raw_value, Sequence):
        raise ValueError(f"{field_name} must be a sequence")
    return raw_value


def _job_request_optional_text(raw_value: Any) -> str | None:
    if raw_value is None:
        return None
    text_value = str(raw_value).strip()
    return text_value or None


def _job_request_input_value(raw_value: Any) -> str | None:
    if raw_value is None:
        return None
    return str(raw_value)
