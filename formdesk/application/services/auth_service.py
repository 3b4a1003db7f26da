"""Authentication: registration, logins and password reset for every principal kind.

Session tokens carry sub, role, tenant_id (managed users) and an
assigned_forms snapshot (managed users). The snapshot is advisory; the
authorization guard always works from live records.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from formdesk.application.dtos.principal import (
    AuthResult,
    ManagedUserResult,
    PrincipalClaims,
    PrincipalResult,
    StandaloneUserResult,
)
from formdesk.application.interfaces.repositories import (
    IFormRepository,
    IManagedUserRepository,
    IStandaloneUserRepository,
    ITenantOwnerRepository,
)
from formdesk.application.interfaces.services import (
    IIdentityVerifier,
    IMailer,
    ITokenIssuer,
)
from formdesk.application.services.credential_rules import (
    validate_new_identity,
    validate_password,
)
from formdesk.application.services.user_service import UserService
from formdesk.core.constants import (
    PASSWORD_RESET_REQUESTED_MESSAGE,
    RESET_PASSWORD_PATH,
)
from formdesk.domain.enums import PrincipalRole
from formdesk.domain.exceptions import (
    AuthenticationException,
    PrincipalAlreadyExistsException,
    ResourceNotFoundException,
    ValidationException,
)
from formdesk.shared.utils.datetime import utc_now
from formdesk.shared.utils.generators import generate_reset_token, hash_token

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid email or password."


class AuthService:
    """Issue session tokens for tenant owners, managed users and standalone users."""

    def __init__(
        self,
        tenant_owners: ITenantOwnerRepository,
        managed_users: IManagedUserRepository,
        standalone_users: IStandaloneUserRepository,
        forms: IFormRepository,
        user_service: UserService,
        token_issuer: ITokenIssuer,
        mailer: IMailer,
        identity_verifier: IIdentityVerifier,
        frontend_url: str,
        password_reset_expire_minutes: int = 30,
    ) -> None:
        self._owners = tenant_owners
        self._managed = managed_users
        self._standalone = standalone_users
        self._forms = forms
        self._user_service = user_service
        self._tokens = token_issuer
        self._mailer = mailer
        self._identity = identity_verifier
        self._frontend_url = frontend_url.rstrip("/")
        self._reset_ttl = timedelta(minutes=password_reset_expire_minutes)

    def _issue(self, principal: PrincipalResult) -> AuthResult:
        claims: dict[str, Any] = {"sub": principal.id, "role": principal.role.value}
        if isinstance(principal, ManagedUserResult):
            claims["tenant_id"] = principal.tenant_id
            claims["assigned_forms"] = list(principal.assigned_forms)
        return AuthResult(
            access_token=self._tokens.create_access_token(claims),
            principal=principal,
        )

    # Tenant owners

    async def register_tenant_owner(
        self,
        username: str,
        email: str,
        password: str,
        password_confirm: str | None = None,
    ) -> AuthResult:
        """Create a tenant owner and sign it in.

        Raises:
            ValidationException: Bad input.
            PrincipalAlreadyExistsException: Email or username already registered.
        """
        email = validate_new_identity(username, email, password, password_confirm)
        if await self._owners.exists(email, username):
            raise PrincipalAlreadyExistsException(
                "Email or username already registered as admin."
            )
        owner = await self._owners.create(username, email, password)
        logger.info("Tenant owner %s registered", owner.id)
        return self._issue(owner)

    async def login_tenant_owner(self, email: str, password: str) -> AuthResult:
        owner = await self._owners.authenticate(email, password)
        if owner is None:
            logger.warning("Tenant owner login rejected")
            raise AuthenticationException(_INVALID_CREDENTIALS)
        return self._issue(owner)

    # Managed users

    async def login_managed_user(self, email: str, password: str) -> AuthResult:
        """Accept the first managed user (any tenant) whose password verifies."""
        user = await self._managed.authenticate_any_tenant(email, password)
        if user is None:
            logger.warning("Managed user login rejected")
            raise AuthenticationException(_INVALID_CREDENTIALS)
        return self._issue(user)

    async def login_via_public_form_link(
        self, public_token: str, email: str, password: str
    ) -> AuthResult:
        """Sign in (enrolling if needed) a managed user of the form's tenant.

        Raises:
            ResourceNotFoundException: No form with this token.
            AuthenticationException: Password does not match the existing account.
            ValidationException: New account (or first password) too short.
        """
        form = await self._forms.get_by_public_token(public_token)
        if form is None or form.owner_role != PrincipalRole.TENANT_OWNER:
            raise ResourceNotFoundException("form", public_token)
        user = await self._user_service.enroll_for_form(form, email, password)
        return self._issue(user)

    # Standalone users

    async def register_user(
        self,
        name: str,
        email: str,
        password: str,
        password_confirm: str | None = None,
    ) -> AuthResult:
        email = validate_new_identity(name, email, password, password_confirm, name_field="name")
        if await self._standalone.get_by_email(email) is not None:
            raise PrincipalAlreadyExistsException("Email already registered.")
        user = await self._standalone.create(name, email, password)
        logger.info("Standalone user %s registered", user.id)
        return self._issue(user)

    async def login_user(self, email: str, password: str) -> AuthResult:
        user = await self._standalone.authenticate(email, password)
        if user is None:
            logger.warning("Standalone user login rejected")
            raise AuthenticationException(_INVALID_CREDENTIALS)
        return self._issue(user)

    async def login_with_external_identity(self, id_token: str) -> AuthResult:
        """Sign in with a Google ID token: match by google_id, then email (linking), else create.

        Raises:
            AuthenticationException: Token rejected by the verifier.
        """
        identity = await self._identity.verify(id_token)
        user: StandaloneUserResult | None = await self._standalone.get_by_google_id(
            identity.subject
        )
        if user is None:
            existing = await self._standalone.get_by_email(identity.email)
            if existing is not None:
                user = await self._standalone.link_google(
                    existing.id, identity.subject, identity.picture
                )
                logger.info("Linked Google identity to standalone user %s", existing.id)
            else:
                user = await self._standalone.create(
                    identity.name,
                    identity.email,
                    None,
                    google_id=identity.subject,
                    picture=identity.picture,
                )
                logger.info("Standalone user %s created from Google sign-in", user.id)
        if user is None or not user.is_active:
            raise AuthenticationException("Account is not available.")
        return self._issue(user)

    async def request_password_reset(self, email: str) -> str:
        """Email a single-use reset link if the account exists; the reply never says which."""
        user = await self._standalone.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return PASSWORD_RESET_REQUESTED_MESSAGE
        token = generate_reset_token()
        await self._standalone.set_reset_token(
            user.id, hash_token(token), utc_now() + self._reset_ttl
        )
        link = f"{self._frontend_url}{RESET_PASSWORD_PATH}?token={token}"
        minutes = int(self._reset_ttl.total_seconds() // 60)
        body = (
            f"Hello {user.name},\n\n"
            f"Use the link below to reset your password. It expires in {minutes} minutes.\n\n"
            f"{link}\n\n"
            "If you did not request a password reset, you can ignore this email.\n"
        )
        if not await self._mailer.send(user.email, "Reset your password", body):
            logger.warning("Password reset email for user %s was not delivered", user.id)
        return PASSWORD_RESET_REQUESTED_MESSAGE

    async def confirm_password_reset(self, token: str, password: str) -> None:
        """Set a new password from a valid, unexpired reset token (single use).

        Raises:
            ValidationException: Short password, or invalid/expired token.
        """
        validate_password(password)
        if not token or not await self._standalone.consume_reset_token(
            hash_token(token), password, utc_now()
        ):
            raise ValidationException("Invalid or expired reset token.", field="token")
        logger.info("Password reset completed")

    async def get_current_principal(self, claims: PrincipalClaims) -> PrincipalResult:
        """Return the live record behind the token.

        Raises:
            AuthenticationException: Principal no longer exists or is inactive.
        """
        principal: PrincipalResult | None
        if claims.role == PrincipalRole.TENANT_OWNER:
            principal = await self._owners.get_by_id(claims.id)
        elif claims.role == PrincipalRole.MANAGED_USER:
            principal = await self._managed.get_by_id(claims.id)
        else:
            principal = await self._standalone.get_by_id(claims.id)
        if principal is None or not principal.is_active:
            raise AuthenticationException("User not found or inactive")
        return principal
