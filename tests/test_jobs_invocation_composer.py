"""Regression tests for job invocation composition, validation and save behavior."""

from __future__ import annotations

import pytest

from app.domain import Bookmark, JobInvocation, JobTemplate, Principal, TemplateInput
from app.jobs import (
    COMPOSER_STATE_ASSEMBLED,
    COMPOSER_STATE_REJECTED,
    COMPOSER_STATE_SAVED,
    InvocationNotSavedError,
    JobInvocationComposer,
    TargetingConflictError,
)

_COMMAND_INPUT = TemplateInput(template_input_id="in-1", name="Command", required=True)
_TIMEOUT_INPUT = TemplateInput(template_input_id="in-2", name="Timeout_Seconds", required=False)
_PACKAGE_INPUT = TemplateInput(template_input_id="in-3", name="Package", required=True)

_TEMPLATE_1 = JobTemplate(
    job_template_id="tpl-1",
    name="testing1",
    job_name="testing_job_template_1",
    template_inputs=(_COMMAND_INPUT, _TIMEOUT_INPUT),
)
_TEMPLATE_2 = JobTemplate(
    job_template_id="tpl-2",
    name="testing2",
    job_name="testing_job_template_2",
    template_inputs=(_PACKAGE_INPUT,),
)
_BOOKMARK = Bookmark(bookmark_id="bm-1", name="web servers", query="name ~ web*", owner_login="admin")
_PRINCIPAL = Principal(login="operator")


class _JobTemplateRepositoryStub:
    """In-memory job template lookup stub."""

    def __init__(self, templates: tuple[JobTemplate, ...] = (_TEMPLATE_1, _TEMPLATE_2)):
        """Initialize stub with known templates.

        Args:
            templates: Templates available for lookup.
        """

        self._templates = templates
        self.lookup_calls: list[str] = []

    def db_job_template_get_by_id(self, job_template_id: str) -> JobTemplate:
        """Return the template with the identifier.

        Raises:
            LookupError: Raised when the template is unknown.
        """

        self.lookup_calls.append(job_template_id)
        for job_template in self._templates:
            if job_template.job_template_id == job_template_id:
                return job_template
        raise LookupError(f"job template not found: job_template_id={job_template_id}")

    def db_job_template_get_by_job_name(self, job_name: str) -> JobTemplate:
        """Return the template implementing the job name.

        Raises:
            LookupError: Raised when the job name is unknown.
        """

        self.lookup_calls.append(job_name)
        for job_template in self._templates:
            if job_template.job_name == job_name:
                return job_template
        raise LookupError(f"job template not found: job_name={job_name}")


class _BookmarkRepositoryStub:
    """In-memory bookmark lookup stub."""

    def __init__(self):
        """Initialize stub call tracking."""

        self.lookup_calls: list[str] = []

    def db_bookmark_get_by_id(self, bookmark_id: str) -> Bookmark:
        """Return the known bookmark.

        Raises:
            LookupError: Raised when the bookmark is unknown.
        """

        self.lookup_calls.append(bookmark_id)
        if bookmark_id == _BOOKMARK.bookmark_id:
            return _BOOKMARK
        raise LookupError(f"bookmark not found: bookmark_id={bookmark_id}")


class _JobInvocationRepositoryStub:
    """Persistence stub that records created invocations."""

    def __init__(self, fail: bool = False):
        """Initialize persistence stub.

        Args:
            fail: Whether create calls simulate a rolled-back transaction.
        """

        self._fail = fail
        self.created: list[JobInvocation] = []

    def db_job_invocation_create(self, invocation: JobInvocation) -> JobInvocation:
        """Record the invocation and assign an identifier.

        Raises:
            RuntimeError: Raised when configured to fail.
        """

        if self._fail:
            raise RuntimeError("failed to persist job invocation")
        invocation.job_invocation_id = f"ji-{len(self.created) + 1}"
        self.created.append(invocation)
        return invocation

    def db_job_invocation_get_by_id(self, job_invocation_id: str) -> JobInvocation | None:
        """Return a recorded invocation by identifier."""

        for invocation in self.created:
            if invocation.job_invocation_id == job_invocation_id:
                return invocation
        return None

    def db_job_invocation_list(self, limit: int, offset: int) -> list[JobInvocation]:
        """Return recorded invocations."""

        return self.created[offset : offset + limit]


def _build_params(**overrides) -> dict[str, object]:
    """Build baseline search-query params for the first template.

    Args:
        overrides: Param values replacing or extending the baseline.

    Returns:
        dict[str, object]: Params bag.
    """

    params: dict[str, object] = {
        "job_name": _TEMPLATE_1.job_name,
        "template_id": _TEMPLATE_1.job_template_id,
        "targeting_type": "static_query",
        "search_query": "some hosts",
    }
    params.update(overrides)
    return params


def _build_composer(
    params: dict[str, object],
    invocation: JobInvocation | None = None,
    bookmark_repository: _BookmarkRepositoryStub | None = None,
    job_invocation_repository: _JobInvocationRepositoryStub | None = None,
) -> JobInvocationComposer:
    """Build composer wired to in-memory stubs.

    Returns:
        JobInvocationComposer: Assembled composer.

    Raises:
        TargetingConflictError: Raised when params conflict.
    """

    return JobInvocationComposer(
        invocation=invocation if invocation is not None else JobInvocation(),
        principal=_PRINCIPAL,
        params=params,
        job_template_repository=_JobTemplateRepositoryStub(),
        bookmark_repository=bookmark_repository or _BookmarkRepositoryStub(),
        job_invocation_repository=job_invocation_repository or _JobInvocationRepositoryStub(),
    )


def test_jobs_composer_creates_invocation_with_bookmark() -> None:
    """Persist bookmark targeting owned by the requesting principal.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when targeting is not composed from the bookmark.
    """

    invocation = JobInvocation()
    params = _build_params(bookmark_id="bm-1", inputs=[{"name": "Command", "value": "uptime"}])
    del params["search_query"]
    composer = _build_composer(params, invocation=invocation)

    assert composer.job_invocation_save()
    assert invocation.targeting.bookmark == _BOOKMARK
    assert invocation.targeting.user == _PRINCIPAL
    assert invocation.targeting.search_query is None
    assert invocation.targeting.targeting_resolved_search_query() == "name ~ web*"
    assert invocation.template_invocations
    assert invocation.is_persisted


def test_jobs_composer_creates_invocation_with_search_query() -> None:
    """Persist ad-hoc search query verbatim.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the query is altered.
    """

    invocation = JobInvocation()
    composer = _build_composer(
        _build_params(search_query="  some hosts  ", inputs=[{"name": "Command", "value": "uptime"}]),
        invocation=invocation,
    )

    assert composer.job_invocation_save()
    assert invocation.targeting.search_query == "  some hosts  "
    assert invocation.targeting.user == _PRINCIPAL
    assert invocation.job_name == "testing_job_template_1"
    assert invocation.job_template == _TEMPLATE_1
    assert composer.composer_state == COMPOSER_STATE_SAVED


def test_jobs_composer_binds_only_matching_inputs_case_insensitively() -> None:
    """Bind declared inputs by normalized name and ignore undeclared names.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when binding count or values are unexpected.
    """

    invocation = JobInvocation()
    composer = _build_composer(
        _build_params(
            inputs=[
                {"name": "COMMAND", "value": "uptime"},
                {"name": "not_declared", "value": "ignored"},
            ]
        ),
        invocation=invocation,
    )

    assert composer.job_invocation_save()
    input_values = invocation.template_invocations[0].input_values
    assert len(input_values) == 1
    assert input_values[0].template_input == _COMMAND_INPUT
    assert input_values[0].value == "uptime"


def test_jobs_composer_keeps_last_value_for_repeated_input() -> None:
    """Collapse repeated pairs for one input into a single value.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when duplicate values are bound.
    """

    invocation = JobInvocation()
    _build_composer(
        _build_params(inputs=[{"name": "Command", "value": "first"}, {"name": "command", "value": "second"}]),
        invocation=invocation,
    )

    input_values = invocation.template_invocations[0].input_values
    assert [input_value.value for input_value in input_values] == ["second"]


def test_jobs_composer_accepts_mapping_inputs() -> None:
    """Accept inputs given as a plain name-to-value mapping.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when mapping inputs are not bound.
    """

    invocation = JobInvocation()
    composer = _build_composer(
        _build_params(inputs={"command": "uptime", "timeout_seconds": "30"}),
        invocation=invocation,
    )

    assert composer.job_invocation_save()
    assert len(invocation.template_invocations[0].input_values) == 2


def test_jobs_composer_rejects_missing_targeting_type() -> None:
    """Defer absent targeting type to a save-time rejection.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when save does not fail.
    """

    params = _build_params(inputs=[{"name": "Command", "value": "uptime"}])
    del params["targeting_type"]
    job_invocation_repository = _JobInvocationRepositoryStub()
    invocation = JobInvocation()
    composer = _build_composer(params, invocation=invocation, job_invocation_repository=job_invocation_repository)

    assert composer.composer_state == COMPOSER_STATE_ASSEMBLED
    with pytest.raises(InvocationNotSavedError) as error_info:
        composer.job_invocation_save()

    assert "Targeting can't be blank" in str(error_info.value)
    assert job_invocation_repository.created == []
    assert not invocation.is_persisted
    assert composer.composer_state == COMPOSER_STATE_REJECTED


def test_jobs_composer_rejects_unrecognized_targeting_type() -> None:
    """Treat unrecognized targeting types as missing targeting.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when save does not fail.
    """

    composer = _build_composer(
        _build_params(targeting_type="dynamic_query", inputs=[{"name": "Command", "value": "uptime"}])
    )

    with pytest.raises(InvocationNotSavedError) as error_info:
        composer.job_invocation_save()

    assert str(error_info.value) == "Targeting can't be blank"


def test_jobs_composer_rejects_static_query_without_bookmark_or_query() -> None:
    """Reject static query targeting that selects no hosts.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when empty targeting is accepted.
    """

    params = _build_params(search_query="   ", inputs=[{"name": "Command", "value": "uptime"}])
    composer = _build_composer(params)

    with pytest.raises(InvocationNotSavedError) as error_info:
        composer.job_invocation_save()

    assert "Targeting: Bookmark or search query must be present" in str(error_info.value)


def test_jobs_composer_aborts_with_both_bookmark_and_search_query() -> None:
    """Abort construction before any lookup when both targeting modes are given.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when construction does not abort.
    """

    bookmark_repository = _BookmarkRepositoryStub()
    invocation = JobInvocation()

    with pytest.raises(TargetingConflictError):
        _build_composer(
            _build_params(bookmark_id="bm-1", inputs=[{"name": "Command", "value": "uptime"}]),
            invocation=invocation,
            bookmark_repository=bookmark_repository,
        )

    assert bookmark_repository.lookup_calls == []
    assert invocation.targeting is None
    assert invocation.template_invocations == []


def test_jobs_composer_reports_blank_value_with_lowercased_input_name() -> None:
    """Report inputs supplied without a value under their lower-cased name.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the message shape is unexpected.
    """

    composer = _build_composer(
        _build_params(inputs=[{"name": "Command", "value": "uptime"}, {"name": "Timeout_Seconds"}])
    )

    with pytest.raises(InvocationNotSavedError) as error_info:
        composer.job_invocation_save()

    assert "Template testing1: Input timeout_seconds: Value can't be blank" in str(error_info.value)


def test_jobs_composer_rejects_empty_value_for_required_input() -> None:
    """Report empty required values as blank, not as missing.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the message shape is unexpected.
    """

    composer = _build_composer(_build_params(inputs=[{"name": "Command", "value": ""}]))

    with pytest.raises(InvocationNotSavedError) as error_info:
        composer.job_invocation_save()

    assert str(error_info.value) == "Template testing1: Input command: Value can't be blank"


def test_jobs_composer_accepts_empty_value_for_optional_input() -> None:
    """Accept empty strings for non-required inputs.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the optional empty value is rejected.
    """

    invocation = JobInvocation()
    composer = _build_composer(
        _build_params(inputs=[{"name": "Command", "value": "uptime"}, {"name": "Timeout_Seconds", "value": ""}]),
        invocation=invocation,
    )

    composer.job_invocation_save()

    assert invocation.is_persisted
    assert len(invocation.template_invocations[0].input_values) == 2


def test_jobs_composer_reports_missing_required_inputs() -> None:
    """Report required inputs that received no value entry at all.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the missing-inputs message is absent.
    """

    composer = _build_composer(_build_params(inputs=[{"name": "Timeout_Seconds", "value": "30"}]))

    with pytest.raises(InvocationNotSavedError) as error_info:
        composer.job_invocation_save()

    assert (
        "Template testing1: Not all required inputs have values. Missing inputs: Command"
        in str(error_info.value)
    )


def test_jobs_composer_keeps_template_invocation_without_inputs() -> None:
    """Create the template binding even when no inputs are supplied.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the template binding is dropped.
    """

    invocation = JobInvocation()
    _build_composer(_build_params(), invocation=invocation)

    assert len(invocation.template_invocations) == 1
    assert invocation.template_invocations[0].input_values == []


def test_jobs_composer_aggregates_issues_across_templates() -> None:
    """Report blank and missing inputs from different templates in one rejection.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when issues are not aggregated.
    """

    params = _build_params(
        template_ids=["tpl-2"],
        inputs=[{"name": "Command", "value": ""}],
    )
    del params["search_query"]
    composer = _build_composer(params)

    with pytest.raises(InvocationNotSavedError) as error_info:
        composer.job_invocation_save()

    assert [issue.issue_render() for issue in error_info.value.issues] == [
        "Targeting: Bookmark or search query must be present",
        "Template testing1: Input command: Value can't be blank",
        "Template testing2: Not all required inputs have values. Missing inputs: Package",
    ]
    assert str(error_info.value).splitlines()[1] == "Template testing1: Input command: Value can't be blank"


def test_jobs_composer_binds_shared_inputs_to_each_template() -> None:
    """Bind one supplied pair to every template declaring the input.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when multi-template binding is unexpected.
    """

    invocation = JobInvocation()
    composer = _build_composer(
        _build_params(
            template_ids=["tpl-2", "tpl-1"],
            inputs=[{"name": "command", "value": "uptime"}, {"name": "package", "value": "vim"}],
        ),
        invocation=invocation,
    )

    assert composer.job_invocation_save()
    assert [ti.job_template.name for ti in invocation.template_invocations] == ["testing1", "testing2"]
    assert [len(ti.input_values) for ti in invocation.template_invocations] == [1, 1]


def test_jobs_composer_rejects_job_name_not_matching_templates() -> None:
    """Reject job names that no bound template implements.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the mismatch is accepted.
    """

    composer = _build_composer(
        _build_params(job_name="other_job", inputs=[{"name": "Command", "value": "uptime"}])
    )

    issues = composer.job_invocation_collect_issues()

    assert [issue.message for issue in issues] == ["Job name other_job does not match any bound template"]


def test_jobs_composer_resolves_template_by_job_name() -> None:
    """Resolve the template from the job name when no identifier is given.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the template is not resolved.
    """

    params = _build_params(inputs=[{"name": "Package", "value": "vim"}], job_name="testing_job_template_2")
    del params["template_id"]
    invocation = JobInvocation()
    composer = _build_composer(params, invocation=invocation)

    assert composer.job_invocation_save()
    assert invocation.job_template == _TEMPLATE_2


def test_jobs_composer_propagates_unknown_bookmark() -> None:
    """Propagate collaborator not-found errors unchanged.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the lookup error is masked.
    """

    params = _build_params(bookmark_id="missing")
    del params["search_query"]

    with pytest.raises(LookupError, match="bookmark not found"):
        _build_composer(params)


def test_jobs_composer_propagates_unknown_template() -> None:
    """Propagate unknown template identifiers unchanged.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the lookup error is masked.
    """

    with pytest.raises(LookupError, match="job template not found"):
        _build_composer(_build_params(template_id="missing"))


def test_jobs_composer_refuses_second_save() -> None:
    """Refuse re-running save on a used composer.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when a second save is allowed.
    """

    composer = _build_composer(_build_params(inputs=[{"name": "Command", "value": "uptime"}]))
    composer.job_invocation_save()

    with pytest.raises(RuntimeError, match="state=saved"):
        composer.job_invocation_save()


def test_jobs_composer_marks_rejected_when_persistence_fails() -> None:
    """Leave the invocation unsaved when the transaction fails.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when failure state is unexpected.
    """

    invocation = JobInvocation()
    composer = _build_composer(
        _build_params(inputs=[{"name": "Command", "value": "uptime"}]),
        invocation=invocation,
        job_invocation_repository=_JobInvocationRepositoryStub(fail=True),
    )

    with pytest.raises(RuntimeError, match="failed to persist job invocation"):
        composer.job_invocation_save()

    assert not invocation.is_persisted
    assert composer.composer_state == COMPOSER_STATE_REJECTED


def test_jobs_composer_scenario_required_and_optional_inputs() -> None:
    """Accept a required value alone and reject an optional value alone.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the scenario outcome differs.
    """

    template = JobTemplate(
        job_template_id="tpl-t",
        name="T",
        job_name="job_t",
        template_inputs=(
            TemplateInput(template_input_id="in-a", name="A", required=True),
            TemplateInput(template_input_id="in-b", name="B", required=False),
        ),
    )
    base_params = {"template_id": "tpl-t", "targeting_type": "static_query", "search_query": "all"}

    accepted_invocation = JobInvocation()
    accepted = JobInvocationComposer(
        invocation=accepted_invocation,
        principal=_PRINCIPAL,
        params={**base_params, "inputs": [{"name": "A", "value": "x"}]},
        job_template_repository=_JobTemplateRepositoryStub(templates=(template,)),
        bookmark_repository=_BookmarkRepositoryStub(),
        job_invocation_repository=_JobInvocationRepositoryStub(),
    )
    assert accepted.job_invocation_save()
    assert len(accepted_invocation.template_invocations[0].input_values) == 1
    assert accepted_invocation.job_name == "job_t"

    rejected = JobInvocationComposer(
        invocation=JobInvocation(),
        principal=_PRINCIPAL,
        params={**base_params, "inputs": [{"name": "B", "value": "x"}]},
        job_template_repository=_JobTemplateRepositoryStub(templates=(template,)),
        bookmark_repository=_BookmarkRepositoryStub(),
        job_invocation_repository=_JobInvocationRepositoryStub(),
    )
    with pytest.raises(InvocationNotSavedError) as error_info:
        rejected.job_invocation_save()
    assert "Not all required inputs have values. Missing inputs: A" in str(error_info.value)


def test_jobs_composer_requires_dependencies() -> None:
    """Reject missing principal before composing.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when a missing dependency is accepted.
    """

    with pytest.raises(ValueError, match="principal must not be None"):
        JobInvocationComposer(
            invocation=JobInvocation(),
            principal=None,
            params=_build_params(),
            job_template_repository=_JobTemplateRepositoryStub(),
            bookmark_repository=_BookmarkRepositoryStub(),
            job_invocation_repository=_JobInvocationRepositoryStub(),
        )
