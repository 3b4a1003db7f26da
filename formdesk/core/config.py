"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. SECRET_KEY) are validated at
load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (secret_key, and Firebase credentials when the
    Firestore backend is selected).
    """

    # App
    app_name: str = "formdesk"
    app_version: str = "1.0.0"
    debug: bool = False

    # Document store: "firestore" (Firestore REST) or "memory" (in-process, dev/tests)
    database_backend: str = "firestore"

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60  # 7 days
    password_reset_expire_minutes: int = 30
    bcrypt_rounds: int = 12

    # Links handed to clients (public form URL, password reset URL)
    frontend_url: str = "http://localhost:5173"

    # CORS
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"

    # Outbound email. When smtp_host is empty, emails are logged instead of sent.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: SecretStr | None = None
    smtp_start_tls: bool = True
    email_from: str = "no-reply@example.com"

    # Google sign-in (standalone variant). Empty disables /auth/google-login.
    google_client_id: str = ""

    # Request / middleware
    rate_limit_enabled: bool = True
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env and document store backend.

        - Firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required.
        - Memory: nothing required (data lives for the process lifetime).
        """
        if self.database_backend == "firestore":
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "When database_backend is 'firestore', set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'firestore' or 'memory', got: {self.database_backend!r}"
            )
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
