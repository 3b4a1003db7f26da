"""Tenant owner API: form lifecycle, publishing, assignment and per-form submissions."""

from fastapi import APIRouter, Request

from formdesk.api.v1.dependencies import (
    FormServiceDep,
    SubmissionServiceDep,
    TenantOwner,
)
from formdesk.application.dtos.form import FormPatch, PublicFormSettings
from formdesk.core.limiter import limit_writes
from formdesk.domain.enums import PrincipalRole
from formdesk.schemas.common import ApiResponse, ok
from formdesk.schemas.form import (
    AssignUsersRequest,
    FormCreateRequest,
    FormResponse,
    FormUpdateRequest,
    PublishResponse,
)
from formdesk.schemas.submission import AdminSubmissionResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[list[FormResponse]])
async def list_forms(owner: TenantOwner, forms: FormServiceDep):
    """List the tenant's forms, newest first."""
    result = await forms.list_for_tenant(owner.id)
    return ok([FormResponse.model_validate(f) for f in result])


@router.post("", response_model=ApiResponse[FormResponse], status_code=201)
@limit_writes
async def create_form(
    request: Request, body: FormCreateRequest, owner: TenantOwner, forms: FormServiceDep
):
    form = await forms.create(
        owner.id,
        PrincipalRole.TENANT_OWNER,
        title=body.title,
        description=body.description,
        fields=body.fields,
    )
    return ok(FormResponse.model_validate(form), "Form created successfully.")


@router.get("/{form_id}", response_model=ApiResponse[FormResponse])
async def get_form(form_id: str, owner: TenantOwner, forms: FormServiceDep):
    form = await forms.get_for_owner(owner.id, form_id)
    return ok(FormResponse.model_validate(form))


@router.put("/{form_id}", response_model=ApiResponse[FormResponse])
@limit_writes
async def update_form(
    request: Request,
    form_id: str,
    body: FormUpdateRequest,
    owner: TenantOwner,
    forms: FormServiceDep,
):
    """Apply only the attributes present in the body."""
    settings = None
    if body.public_settings is not None:
        settings = PublicFormSettings(
            submission_limit=body.public_settings.submission_limit,
            allow_multiple_submissions=body.public_settings.allow_multiple_submissions,
        )
    patch = FormPatch(
        title=body.title,
        description=body.description,
        fields=body.fields,
        public_settings=settings,
    )
    form = await forms.update(owner.id, form_id, patch)
    return ok(FormResponse.model_validate(form), "Form updated successfully.")


@router.delete("/{form_id}", response_model=ApiResponse[dict])
@limit_writes
async def delete_form(
    request: Request, form_id: str, owner: TenantOwner, forms: FormServiceDep
):
    """Delete the form and every submission to it."""
    deleted = await forms.delete(owner.id, form_id)
    return ok({"deleted_submissions": deleted}, "Form deleted successfully.")


@router.post("/{form_id}/publish", response_model=ApiResponse[PublishResponse])
@limit_writes
async def publish_form(
    request: Request, form_id: str, owner: TenantOwner, forms: FormServiceDep
):
    """Publish; repeated calls return the same token and link."""
    result = await forms.publish(owner.id, form_id)
    return ok(
        PublishResponse(
            form=FormResponse.model_validate(result.form),
            public_url=result.public_url,
        ),
        "Form published successfully.",
    )


@router.post("/{form_id}/unpublish", response_model=ApiResponse[FormResponse])
@limit_writes
async def unpublish_form(
    request: Request, form_id: str, owner: TenantOwner, forms: FormServiceDep
):
    form = await forms.unpublish(owner.id, form_id)
    return ok(FormResponse.model_validate(form), "Form unpublished successfully.")


@router.post("/{form_id}/assign-users", response_model=ApiResponse[FormResponse])
@limit_writes
async def assign_users(
    request: Request,
    form_id: str,
    body: AssignUsersRequest,
    owner: TenantOwner,
    forms: FormServiceDep,
):
    """Replace the form's assigned users with exactly user_ids."""
    form = await forms.assign_users(owner.id, form_id, body.user_ids)
    return ok(FormResponse.model_validate(form), "Users assigned successfully.")


@router.get(
    "/{form_id}/submissions",
    response_model=ApiResponse[list[AdminSubmissionResponse]],
)
async def list_form_submissions(
    form_id: str, owner: TenantOwner, submissions: SubmissionServiceDep
):
    result = await submissions.list_for_form(owner.id, form_id)
    return ok([AdminSubmissionResponse.model_validate(s) for s in result])
