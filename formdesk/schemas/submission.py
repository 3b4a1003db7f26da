"""Submission API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr

from formdesk.domain.enums import SubmissionStatus


class SubmitRequest(BaseModel):
    """Answers keyed by field id (scalar or list values)."""

    answers: dict[str, Any]


class PublicSubmitRequest(BaseModel):
    answers: dict[str, Any]
    email: EmailStr | None = None


class AmendSubmissionRequest(BaseModel):
    answers: dict[str, Any]


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    form_id: str
    submitted_by: str
    tenant_id: str
    answers: dict[str, Any]
    status: SubmissionStatus
    form_title: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AdminSubmissionResponse(SubmissionResponse):
    """Tenant-owner view; includes request metadata captured on the public path."""

    ip_address: str | None = None
    user_agent: str | None = None
