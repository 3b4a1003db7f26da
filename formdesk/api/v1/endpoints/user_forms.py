"""Managed user API: assigned forms and own submissions."""

from fastapi import APIRouter, Request

from formdesk.api.v1.dependencies import (
    FormServiceDep,
    ManagedUser,
    SubmissionServiceDep,
)
from formdesk.core.limiter import limit_writes
from formdesk.schemas.common import ApiResponse, ok
from formdesk.schemas.form import FormResponse
from formdesk.schemas.submission import SubmissionResponse, SubmitRequest

router = APIRouter()


@router.get("/forms", response_model=ApiResponse[list[FormResponse]])
async def list_assigned_forms(user: ManagedUser, forms: FormServiceDep):
    """Forms in the caller's live assignment set."""
    result = await forms.list_assigned(user.id)
    return ok([FormResponse.model_validate(f) for f in result])


@router.get("/forms/{form_id}", response_model=ApiResponse[FormResponse])
async def get_assigned_form(form_id: str, user: ManagedUser, forms: FormServiceDep):
    form = await forms.get_assigned(user.id, form_id)
    return ok(FormResponse.model_validate(form))


@router.post(
    "/forms/{form_id}/submit",
    response_model=ApiResponse[SubmissionResponse],
    status_code=201,
)
@limit_writes
async def submit_form(
    request: Request,
    form_id: str,
    body: SubmitRequest,
    user: ManagedUser,
    submissions: SubmissionServiceDep,
):
    submission = await submissions.submit(user, form_id, body.answers)
    return ok(SubmissionResponse.model_validate(submission), "Form submitted successfully.")


@router.get("/submissions", response_model=ApiResponse[list[SubmissionResponse]])
async def list_my_submissions(user: ManagedUser, submissions: SubmissionServiceDep):
    result = await submissions.list_mine(user)
    return ok([SubmissionResponse.model_validate(s) for s in result])


@router.get(
    "/submissions/{submission_id}",
    response_model=ApiResponse[SubmissionResponse],
)
async def get_my_submission(
    submission_id: str, user: ManagedUser, submissions: SubmissionServiceDep
):
    submission = await submissions.get_mine(user, submission_id)
    return ok(SubmissionResponse.model_validate(submission))
