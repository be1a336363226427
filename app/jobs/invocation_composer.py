"""Job-layer composer that builds, validates and persists job invocations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.db import BookmarkRepositoryPort, JobInvocationRepositoryPort, JobTemplateRepositoryPort
from app.domain import (
    STATIC_QUERY_TARGETING_TYPE,
    InputValue,
    JobInvocation,
    JobTemplate,
    Principal,
    Targeting,
    TemplateInvocation,
)

from .interfaces import (
    COMPOSER_STATE_ASSEMBLED,
    COMPOSER_STATE_INITIALIZING,
    COMPOSER_STATE_REJECTED,
    COMPOSER_STATE_SAVED,
    InvocationIssue,
    InvocationNotSavedError,
    TargetingConflictError,
)
from .invocation_request import JobInvocationRequest, job_invocation_request_from_params
from .invocation_validation import job_invocation_collect_issues

logger = logging.getLogger(__name__)


class JobInvocationComposer:
    """Compose one job invocation graph from a raw parameter bag.

    Construction resolves targeting, job templates and input values and
    attaches them to the supplied invocation. `job_invocation_save` validates
    the full graph and persists it atomically. A composer is single-use: after
    a save attempt finishes, retry with a fresh composer.
    """

    def __init__(
        self,
        invocation: JobInvocation,
        principal: Principal,
        params: Mapping[str, Any] | None,
        job_template_repository: JobTemplateRepositoryPort,
        bookmark_repository: BookmarkRepositoryPort,
        job_invocation_repository: JobInvocationRepositoryPort,
    ):
        """Compose the invocation graph from request parameters.

        Args:
            invocation: Unsaved invocation record populated in place.
            principal: Requesting user attached as targeting owner.
            params: Raw request parameters.
            job_template_repository: Job template lookup service.
            bookmark_repository: Bookmark lookup service.
            job_invocation_repository: Invocation graph persistence service.

        Returns:
            None: Initializer does not return a value.

        Raises:
            TargetingConflictError: Raised when a targeting type is given with both bookmark and search query.
            LookupError: Raised when a referenced template or bookmark does not exist.
            ValueError: Raised when dependencies or parameters are invalid.
        """

        if invocation is None:
            raise ValueError("invocation must not be None")
        if invocation.is_persisted:
            raise ValueError("invocation is already persisted")
        if principal is None:
            raise ValueError("principal must not be None")
        if job_template_repository is None:
            raise ValueError("job_template_repository must not be None")
        if bookmark_repository is None:
            raise ValueError("bookmark_repository must not be None")
        if job_invocation_repository is None:
            raise ValueError("job_invocation_repository must not be None")

        self.composer_state = COMPOSER_STATE_INITIALIZING
        self._invocation = invocation
        self._principal = principal
        self._job_template_repository = job_template_repository
        self._bookmark_repository = bookmark_repository
        self._job_invocation_repository = job_invocation_repository

        request = job_invocation_request_from_params(params)
        if request.request_has_targeting_conflict():
            logger.warning(
                "job invocation composition aborted: bookmark_id and search_query both supplied, job_name=%s",
                request.job_name,
            )
            raise TargetingConflictError("Cannot specify both bookmark_id and search_query")

        targeting = self._job_compose_targeting(request)
        job_templates = self._job_resolve_templates(request)
        template_invocations = [
            self._job_compose_template_invocation(job_template=job_template, request=request)
            for job_template in job_templates
        ]

        invocation.targeting = targeting
        invocation.template_invocations = template_invocations
        invocation.job_template = job_templates[0] if job_templates else None
        invocation.job_name = request.job_name or (job_templates[0].job_name if job_templates else None)
        self.composer_state = COMPOSER_STATE_ASSEMBLED

    @property
    def invocation(self) -> JobInvocation:
        """Return the invocation populated by this composer."""

        return self._invocation

    def job_invocation_collect_issues(self) -> list[InvocationIssue]:
        """Return every validation issue of the composed graph without persisting.

        Returns:
            list[InvocationIssue]: Ordered issues; empty when the graph is valid.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return job_invocation_collect_issues(self._invocation)

    def job_invocation_save(self) -> bool:
        """Validate the whole graph and persist it in one transaction.

        Returns:
            bool: True when the invocation graph was persisted.

        Raises:
            InvocationNotSavedError: Raised with all aggregated issues when validation fails.
            RuntimeError: Raised when persistence fails or the composer was already used.
        """

        if self.composer_state != COMPOSER_STATE_ASSEMBLED:
            raise RuntimeError(f"composer cannot save from state={self.composer_state}")

        issues = self.job_invocation_collect_issues()
        if issues:
            self.composer_state = COMPOSER_STATE_REJECTED
            logger.info(
                "job invocation rejected: job_name=%s issue_count=%d",
                self._invocation.job_name,
                len(issues),
            )
            raise InvocationNotSavedError(issues)

        try:
            self._job_invocation_repository.db_job_invocation_create(self._invocation)
        except RuntimeError:
            self.composer_state = COMPOSER_STATE_REJECTED
            raise

        self.composer_state = COMPOSER_STATE_SAVED
        logger.info(
            "job invocation saved: job_invocation_id=%s job_name=%s template_count=%d",
            self._invocation.job_invocation_id,
            self._invocation.job_name,
            len(self._invocation.template_invocations),
        )
        return True

    def _job_compose_targeting(self, request: JobInvocationRequest) -> Targeting | None:
        """Build targeting for the static query mode.

        Args:
            request: Normalized request.

        Returns:
            Targeting | None: Targeting, or None when the mode is absent or unrecognized.

        Raises:
            LookupError: Raised when the bookmark does not exist.
        """

        if request.targeting_type != STATIC_QUERY_TARGETING_TYPE:
            return None

        if request.bookmark_id is not None:
            return Targeting(
                targeting_type=STATIC_QUERY_TARGETING_TYPE,
                user=self._principal,
                bookmark=self._bookmark_repository.db_bookmark_get_by_id(request.bookmark_id),
            )
        return Targeting(
            targeting_type=STATIC_QUERY_TARGETING_TYPE,
            user=self._principal,
            search_query=request.search_query,
        )

    def _job_resolve_templates(self, request: JobInvocationRequest) -> list[JobTemplate]:
        """Resolve templates by identifier, falling back to the job name.

        Args:
            request: Normalized request.

        Returns:
            list[JobTemplate]: Distinct templates in binding order; empty when nothing selects one.

        Raises:
            LookupError: Raised when a referenced template does not exist.
        """

        if request.template_ids:
            job_templates: list[JobTemplate] = []
            for template_id in request.template_ids:
                job_template = self._job_template_repository.db_job_template_get_by_id(template_id)
                if all(known.job_template_id != job_template.job_template_id for known in job_templates):
                    job_templates.append(job_template)
            return job_templates

        if request.job_name is not None:
            return [self._job_template_repository.db_job_template_get_by_job_name(request.job_name)]
        return []

    def _job_compose_template_invocation(
        self,
        job_template: JobTemplate,
        request: JobInvocationRequest,
    ) -> TemplateInvocation:
        """Bind supplied inputs that match inputs declared on the template.

        Args:
            job_template: Template being bound.
            request: Normalized request.

        Returns:
            TemplateInvocation: Binding with one value per matched declared input.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        values_by_input_id: dict[str, InputValue] = {}
        for binding in request.inputs:
            template_input = job_template.job_template_find_input(binding.name)
            if template_input is None:
                continue
            # Later pairs for the same input replace earlier ones but keep the first position.
            existing_value = values_by_input_id.get(template_input.template_input_id)
            if existing_value is not None:
                existing_value.value = binding.value
            else:
                values_by_input_id[template_input.template_input_id] = InputValue(
                    template_input=template_input,
                    value=binding.value,
                )

        return TemplateInvocation(job_template=job_template, input_values=list(values_by_input_id.values()))
