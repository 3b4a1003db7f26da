"""Tenant owner API: all submissions across the tenant's forms."""

from fastapi import APIRouter

from formdesk.api.v1.dependencies import SubmissionServiceDep, TenantOwner
from formdesk.schemas.common import ApiResponse, ok
from formdesk.schemas.submission import AdminSubmissionResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[list[AdminSubmissionResponse]])
async def list_submissions(owner: TenantOwner, submissions: SubmissionServiceDep):
    """Every submission to the owner's forms, newest first, with form titles."""
    result = await submissions.list_for_tenant(owner.id)
    return ok([AdminSubmissionResponse.model_validate(s) for s in result])
