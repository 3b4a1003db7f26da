"""Delete submissions whose form no longer exists.

Finishes form deletes that were interrupted between batches. Safe to run
repeatedly (e.g. from cron).

Usage:
    python -m scripts.purge_orphaned_submissions
All imports use formdesk.*.
"""

import asyncio
import sys

from formdesk.core.config import get_settings
from formdesk.infrastructure.firebase import create_document_client
from formdesk.infrastructure.firebase.repositories import FirestoreSubmissionRepository
from formdesk.shared.logging import setup_logging


async def main() -> None:
    """Run one reconciliation sweep and print the number of deleted submissions."""
    settings = get_settings()
    if settings.database_backend != "firestore":
        print("This script requires DATABASE_BACKEND=firestore", file=sys.stderr)
        sys.exit(1)
    setup_logging()
    client = create_document_client(settings)
    try:
        deleted = await FirestoreSubmissionRepository(client).delete_orphans()
    finally:
        await client.aclose()
    print(f"Deleted {deleted} orphaned submission(s)")


if __name__ == "__main__":
    asyncio.run(main())
