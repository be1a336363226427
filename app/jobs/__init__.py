"""Job layer package for invocation composition boundaries."""

from .interfaces import (
	COMPOSER_STATE_ASSEMBLED,
	COMPOSER_STATE_INITIALIZING,
	COMPOSER_STATE_REJECTED,
	COMPOSER_STATE_SAVED,
	INVOCATION_NOT_SAVED_CODE,
	TARGETING_CONFLICT_CODE,
	InvocationIssue,
	InvocationNotSavedError,
	TargetingConflictError,
)
from .invocation_composer import JobInvocationComposer
from .invocation_request import (
	InvocationInputBinding,
	JobInvocationRequest,
	job_invocation_request_from_params,
	job_invocation_request_parse_inputs,
)
from .invocation_validation import (
	job_invocation_collect_issues,
	job_invocation_collect_targeting_issues,
	job_template_invocation_collect_issues,
)

__all__ = [
	"COMPOSER_STATE_ASSEMBLED",
	"COMPOSER_STATE_INITIALIZING",
	"COMPOSER_STATE_REJECTED",
	"COMPOSER_STATE_SAVED",
	"INVOCATION_NOT_SAVED_CODE",
	"TARGETING_CONFLICT_CODE",
	"InvocationInputBinding",
	"InvocationIssue",
	"InvocationNotSavedError",
	"JobInvocationComposer",
	"JobInvocationRequest",
	"TargetingConflictError",
	"job_invocation_collect_issues",
	"job_invocation_collect_targeting_issues",
	"job_invocation_request_from_params",
	"job_invocation_request_parse_inputs",
	"job_template_invocation_collect_issues",
]
