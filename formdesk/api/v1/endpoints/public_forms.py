"""Public API (no token): published forms by token and anonymous submission."""

from fastapi import APIRouter, Request

from formdesk.api.v1.dependencies import FormServiceDep, SubmissionServiceDep
from formdesk.core.limiter import limit_writes
from formdesk.schemas.common import ApiResponse, ok
from formdesk.schemas.form import PublicFormResponse
from formdesk.schemas.submission import PublicSubmitRequest, SubmissionResponse

router = APIRouter()


@router.get("/forms", response_model=ApiResponse[list[PublicFormResponse]])
async def list_published_forms(forms: FormServiceDep):
    result = await forms.list_published()
    return ok([PublicFormResponse.model_validate(f) for f in result])


@router.get("/forms/{token}", response_model=ApiResponse[PublicFormResponse])
async def get_public_form(token: str, forms: FormServiceDep):
    """Unpublished and unknown tokens are both 404."""
    view = await forms.get_public(token)
    return ok(PublicFormResponse.model_validate(view))


@router.post(
    "/forms/{token}/submit",
    response_model=ApiResponse[SubmissionResponse],
    status_code=201,
)
@limit_writes
async def submit_public_form(
    request: Request,
    token: str,
    body: PublicSubmitRequest,
    submissions: SubmissionServiceDep,
):
    """Anonymous submission; with an email the submitter is enrolled in the form's tenant."""
    submission = await submissions.submit_public(
        token,
        body.answers,
        email=body.email,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return ok(SubmissionResponse.model_validate(submission), "Form submitted successfully.")
