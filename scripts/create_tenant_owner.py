"""Create a tenant owner account (Firestore).

Usage:
    python -m scripts.create_tenant_owner <username> <email> [password]
If password is omitted, a random one is printed.
All imports use formdesk.*.
"""

import asyncio
import secrets
import sys

from formdesk.application.services.credential_rules import validate_new_identity
from formdesk.core.config import get_settings
from formdesk.domain.exceptions import ValidationException
from formdesk.infrastructure.firebase import create_document_client
from formdesk.infrastructure.firebase.repositories import FirestoreTenantOwnerRepository


async def main() -> None:
    """Create the owner unless the email or username is taken."""
    if len(sys.argv) < 3:
        print(
            "Usage: python -m scripts.create_tenant_owner <username> <email> [password]",
            file=sys.stderr,
        )
        sys.exit(1)
    username = sys.argv[1]
    password = sys.argv[3] if len(sys.argv) > 3 else secrets.token_urlsafe(12)

    settings = get_settings()
    if settings.database_backend != "firestore":
        print("This script requires DATABASE_BACKEND=firestore", file=sys.stderr)
        sys.exit(1)
    try:
        email = validate_new_identity(username, sys.argv[2], password)
    except ValidationException as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)

    client = create_document_client(settings)
    try:
        repo = FirestoreTenantOwnerRepository(client, settings.bcrypt_rounds)
        if await repo.exists(email, username):
            print(f"Email or username already registered: {email} / {username}", file=sys.stderr)
            sys.exit(1)
        owner = await repo.create(username, email, password)
    finally:
        await client.aclose()
    print(f"Created tenant owner: {owner.id} ({owner.username}, {owner.email})")
    if len(sys.argv) <= 3:
        print(f"Password: {password}")


if __name__ == "__main__":
    asyncio.run(main())
