"""Standalone user API: own forms, share-by-id access and own submissions.

Static paths (/submissions) are declared before /{form_id} so they are not
captured by it.
"""

from fastapi import APIRouter, Request, Response

from formdesk.api.v1.dependencies import (
    FormServiceDep,
    StandaloneUser,
    SubmissionServiceDep,
)
from formdesk.core.limiter import limit_writes
from formdesk.schemas.common import ApiResponse, ok
from formdesk.schemas.form import FormResponse, StandaloneFormSaveRequest
from formdesk.schemas.submission import (
    AdminSubmissionResponse,
    AmendSubmissionRequest,
    SubmissionResponse,
    SubmitRequest,
)

router = APIRouter()


@router.post("", response_model=ApiResponse[FormResponse])
@limit_writes
async def save_form(
    request: Request,
    response: Response,
    body: StandaloneFormSaveRequest,
    user: StandaloneUser,
    forms: FormServiceDep,
):
    """Create a form, or update the caller's form when form_id is given (201 vs 200)."""
    form, created = await forms.save_standalone(
        user.id, body.form_id, body.title, body.description, body.fields
    )
    if created:
        response.status_code = 201
        return ok(FormResponse.model_validate(form), "Form created successfully.")
    return ok(FormResponse.model_validate(form), "Form updated successfully.")


@router.get("", response_model=ApiResponse[list[FormResponse]])
async def list_my_forms(user: StandaloneUser, forms: FormServiceDep):
    result = await forms.list_mine(user.id)
    return ok([FormResponse.model_validate(f) for f in result])


@router.get("/submissions", response_model=ApiResponse[list[SubmissionResponse]])
async def list_my_submissions(user: StandaloneUser, submissions: SubmissionServiceDep):
    result = await submissions.list_mine(user)
    return ok([SubmissionResponse.model_validate(s) for s in result])


@router.patch(
    "/submissions/{submission_id}",
    response_model=ApiResponse[SubmissionResponse],
)
@limit_writes
async def amend_submission(
    request: Request,
    submission_id: str,
    body: AmendSubmissionRequest,
    user: StandaloneUser,
    submissions: SubmissionServiceDep,
):
    """Replace the answers of one of the caller's submissions."""
    submission = await submissions.amend(user, submission_id, body.answers)
    return ok(SubmissionResponse.model_validate(submission), "Submission updated successfully.")


@router.get("/{form_id}", response_model=ApiResponse[FormResponse])
async def get_form(form_id: str, user: StandaloneUser, forms: FormServiceDep):
    """Any standalone-owned form is readable by id."""
    form = await forms.get_shared(user.id, form_id)
    return ok(FormResponse.model_validate(form))


@router.delete("/{form_id}", response_model=ApiResponse[dict])
@limit_writes
async def delete_form(
    request: Request, form_id: str, user: StandaloneUser, forms: FormServiceDep
):
    deleted = await forms.delete_standalone(user.id, form_id)
    return ok({"deleted_submissions": deleted}, "Form deleted successfully.")


@router.post(
    "/{form_id}/submit",
    response_model=ApiResponse[SubmissionResponse],
    status_code=201,
)
@limit_writes
async def submit_form(
    request: Request,
    form_id: str,
    body: SubmitRequest,
    user: StandaloneUser,
    submissions: SubmissionServiceDep,
):
    submission = await submissions.submit(user, form_id, body.answers)
    return ok(SubmissionResponse.model_validate(submission), "Form submitted successfully.")


@router.get(
    "/{form_id}/submissions",
    response_model=ApiResponse[list[AdminSubmissionResponse]],
)
async def list_form_submissions(
    form_id: str, user: StandaloneUser, submissions: SubmissionServiceDep
):
    """Submissions to one of the caller's own forms."""
    result = await submissions.list_for_form(user.id, form_id)
    return ok([AdminSubmissionResponse.model_validate(s) for s in result])
