"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from formdesk.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from formdesk.api.v1.endpoints import (
    admin_forms,
    admin_submissions,
    admin_users,
    auth,
    health,
    public_forms,
    standalone_forms,
    user_forms,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(admin_users.router, prefix="/admin/users", tags=["admin"])
api_router.include_router(admin_forms.router, prefix="/admin/forms", tags=["admin"])
api_router.include_router(
    admin_submissions.router, prefix="/admin/submissions", tags=["admin"]
)
api_router.include_router(user_forms.router, prefix="/user", tags=["managed-user"])
api_router.include_router(public_forms.router, prefix="/public", tags=["public"])
api_router.include_router(standalone_forms.router, prefix="/forms", tags=["standalone"])
