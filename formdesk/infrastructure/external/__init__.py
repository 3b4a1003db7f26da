"""External integrations: outbound email and third-party identity verification."""
