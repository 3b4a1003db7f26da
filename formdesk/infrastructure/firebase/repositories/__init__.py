"""Firestore-backed repository implementations (REST or in-memory client)."""

from formdesk.infrastructure.firebase.repositories.form_repo_firestore import (
    FirestoreFormRepository,
)
from formdesk.infrastructure.firebase.repositories.managed_user_repo_firestore import (
    FirestoreManagedUserRepository,
)
from formdesk.infrastructure.firebase.repositories.standalone_user_repo_firestore import (
    FirestoreStandaloneUserRepository,
)
from formdesk.infrastructure.firebase.repositories.submission_repo_firestore import (
    FirestoreSubmissionRepository,
)
from formdesk.infrastructure.firebase.repositories.tenant_owner_repo_firestore import (
    FirestoreTenantOwnerRepository,
)

__all__ = [
    "FirestoreFormRepository",
    "FirestoreManagedUserRepository",
    "FirestoreStandaloneUserRepository",
    "FirestoreSubmissionRepository",
    "FirestoreTenantOwnerRepository",
]
