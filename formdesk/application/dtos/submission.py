"""DTOs for submissions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from formdesk.domain.enums import SubmissionStatus


@dataclass(frozen=True)
class SubmissionResult:
    """Submission read-model. form_title is attached for tenant-owner listings."""

    id: str
    form_id: str
    submitted_by: str
    tenant_id: str
    answers: dict[str, Any] = field(default_factory=dict)
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    form_title: str | None = None
