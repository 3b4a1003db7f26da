"""Core constants shared by schemas, services and repositories."""

# Credentials
MIN_PASSWORD_LENGTH = 6

# Forms
DEFAULT_FORM_TITLE = "Untitled Form"
PUBLIC_FORM_PATH = "/form"
RESET_PASSWORD_PATH = "/reset-password"

# Prefix for submitter ids of anonymous public submissions (no principal record).
ANONYMOUS_SUBMITTER_PREFIX = "anon_"

# Firestore commit accepts at most 500 writes per request.
MAX_BATCH_WRITES = 500

# Generic message for forgot-password so responses never reveal registration.
PASSWORD_RESET_REQUESTED_MESSAGE = (
    "If an account exists for that email, a reset link has been sent."
)
