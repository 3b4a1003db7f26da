"""Use cases: form and submission lifecycles."""

from formdesk.application.use_cases.forms import FormService
from formdesk.application.use_cases.submissions import SubmissionService

__all__ = ["FormService", "SubmissionService"]
