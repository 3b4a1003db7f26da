"""Tenant owner API: managed users and their submissions."""

from fastapi import APIRouter, Request

from formdesk.api.v1.dependencies import (
    SubmissionServiceDep,
    TenantOwner,
    UserServiceDep,
)
from formdesk.core.limiter import limit_writes
from formdesk.schemas.common import ApiResponse, ok
from formdesk.schemas.submission import AdminSubmissionResponse
from formdesk.schemas.user import ManagedUserCreateRequest, ManagedUserResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[list[ManagedUserResponse]])
async def list_users(owner: TenantOwner, users: UserServiceDep):
    """List the tenant's managed users, newest first."""
    result = await users.list_users(owner.id)
    return ok([ManagedUserResponse.model_validate(u) for u in result])


@router.post("", response_model=ApiResponse[ManagedUserResponse], status_code=201)
@limit_writes
async def create_user(
    request: Request,
    body: ManagedUserCreateRequest,
    owner: TenantOwner,
    users: UserServiceDep,
):
    user = await users.create_user(
        owner.id, body.username, body.email, body.password, body.password_confirm
    )
    return ok(ManagedUserResponse.model_validate(user), "User created successfully.")


@router.delete("/{user_id}", response_model=ApiResponse[None])
@limit_writes
async def delete_user(
    request: Request, user_id: str, owner: TenantOwner, users: UserServiceDep
):
    """Delete a managed user and drop it from every form's assignments."""
    await users.delete_user(owner.id, user_id)
    return ok(message="User deleted successfully.")


@router.get(
    "/{user_id}/submissions",
    response_model=ApiResponse[list[AdminSubmissionResponse]],
)
async def list_user_submissions(
    user_id: str, owner: TenantOwner, submissions: SubmissionServiceDep
):
    result = await submissions.list_for_user(owner.id, user_id)
    return ok([AdminSubmissionResponse.model_validate(s) for s in result])
