"""Auth API: signup and login for every principal kind, Google sign-in,
password reset and the current principal.
"""

from fastapi import APIRouter, Request

from formdesk.api.v1.dependencies import AuthServiceDep, CurrentClaims
from formdesk.core.limiter import limit_auth
from formdesk.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    PrincipalResponse,
    PublicFormLoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TenantSignupRequest,
    auth_response,
)
from formdesk.schemas.common import ApiResponse, ok

router = APIRouter()


@router.post("/tenant/signup", response_model=ApiResponse[AuthResponse], status_code=201)
@limit_auth
async def tenant_signup(request: Request, body: TenantSignupRequest, auth: AuthServiceDep):
    """Register a tenant owner (public endpoint) and return a session token."""
    result = await auth.register_tenant_owner(
        body.username, body.email, body.password, body.password_confirm
    )
    return ok(auth_response(result), "Admin registered successfully.")


@router.post("/tenant/login", response_model=ApiResponse[AuthResponse])
@limit_auth
async def tenant_login(request: Request, body: LoginRequest, auth: AuthServiceDep):
    result = await auth.login_tenant_owner(body.email, body.password)
    return ok(auth_response(result), "Login successful.")


@router.post("/user/login", response_model=ApiResponse[AuthResponse])
@limit_auth
async def managed_user_login(request: Request, body: LoginRequest, auth: AuthServiceDep):
    """Managed user login; the email may exist in several tenants."""
    result = await auth.login_managed_user(body.email, body.password)
    return ok(auth_response(result), "Login successful.")


@router.post("/public-form/login", response_model=ApiResponse[AuthResponse])
@limit_auth
async def public_form_login(
    request: Request, body: PublicFormLoginRequest, auth: AuthServiceDep
):
    """Sign in through a form link, enrolling the email in the form's tenant if new."""
    result = await auth.login_via_public_form_link(
        body.public_form_token, body.email, body.password
    )
    return ok(auth_response(result), "Login successful.")


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=201)
@limit_auth
async def register(request: Request, body: RegisterRequest, auth: AuthServiceDep):
    """Register a standalone user."""
    result = await auth.register_user(
        body.name, body.email, body.password, body.password_confirm
    )
    return ok(auth_response(result), "User registered successfully.")


@router.post("/login", response_model=ApiResponse[AuthResponse])
@limit_auth
async def login(request: Request, body: LoginRequest, auth: AuthServiceDep):
    result = await auth.login_user(body.email, body.password)
    return ok(auth_response(result), "Login successful.")


@router.post("/google-login", response_model=ApiResponse[AuthResponse])
@limit_auth
async def google_login(request: Request, body: GoogleLoginRequest, auth: AuthServiceDep):
    """Exchange a Google ID token for a session token (standalone users)."""
    result = await auth.login_with_external_identity(body.id_token)
    return ok(auth_response(result), "Login successful.")


@router.get("/me", response_model=ApiResponse[PrincipalResponse])
async def get_me(claims: CurrentClaims, auth: AuthServiceDep):
    """Return the live principal behind the bearer token."""
    principal = await auth.get_current_principal(claims)
    return ok(PrincipalResponse.from_result(principal))


@router.post("/forgot-password", response_model=ApiResponse[None])
@limit_auth
async def forgot_password(
    request: Request, body: ForgotPasswordRequest, auth: AuthServiceDep
):
    """Email a reset link; the reply is identical whether or not the email is registered."""
    message = await auth.request_password_reset(body.email)
    return ok(message=message)


@router.post("/reset-password", response_model=ApiResponse[None])
@limit_auth
async def reset_password(request: Request, body: ResetPasswordRequest, auth: AuthServiceDep):
    await auth.confirm_password_reset(body.token, body.password)
    return ok(message="Password has been reset successfully.")
