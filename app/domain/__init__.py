"""Domain models used across application layer boundaries."""

from .invocation import (
	STATIC_QUERY_TARGETING_TYPE,
	InputValue,
	JobInvocation,
	Targeting,
	TemplateInvocation,
)
from .models import (
	Bookmark,
	HealthStatus,
	JobTemplate,
	Principal,
	TemplateInput,
	domain_normalize_input_name,
)

__all__ = [
	"STATIC_QUERY_TARGETING_TYPE",
	"Bookmark",
	"HealthStatus",
	"InputValue",
	"JobInvocation",
	"JobTemplate",
	"Principal",
	"Targeting",
	"TemplateInput",
	"TemplateInvocation",
	"domain_normalize_input_name",
]
