"""Domain enumerations for formdesk.

Enums represent fixed sets of domain values (principal roles, submission
status, access-denial reasons).
"""

from enum import Enum


class PrincipalRole(str, Enum):
    """Role tag carried by every principal and its session token.

    TENANT_OWNER administers a tenant; MANAGED_USER belongs to exactly one
    tenant owner; STANDALONE_USER self-registers in the single-user variant.
    """

    TENANT_OWNER = "tenant_owner"
    MANAGED_USER = "managed_user"
    STANDALONE_USER = "standalone_user"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid role values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [role.value for role in cls]


class SubmissionStatus(str, Enum):
    """Lifecycle status of a submission."""

    DRAFT = "draft"
    SUBMITTED = "submitted"


class DenyReason(str, Enum):
    """Why the authorization guard refused an operation."""

    WRONG_ROLE = "wrong_role"
    FOREIGN_TENANT = "foreign_tenant"
    NOT_ASSIGNED = "not_assigned"
    NOT_SELF = "not_self"
    NOT_PUBLISHED = "not_published"
