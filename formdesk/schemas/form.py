"""Form API schemas.

fields on requests is deliberately untyped: clients send lists, JSON strings
or lists of JSON strings, and the field normaliser decides what is usable.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from formdesk.domain.enums import PrincipalRole


class FieldSchema(BaseModel):
    """One form field as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    label: str = ""
    placeholder: str = ""
    required: bool = False
    default_value: Any = None
    options: list[str] = Field(default_factory=list)
    min: float | None = None
    max: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_date: str | None = None
    max_date: str | None = None
    pattern: str | None = None


class PublicSettingsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    submission_limit: int | None = Field(default=None, ge=0)
    allow_multiple_submissions: bool = False


class FormCreateRequest(BaseModel):
    """Request body for POST /admin/forms."""

    title: str | None = None
    description: str | None = None
    fields: Any = None


class FormUpdateRequest(BaseModel):
    """Request body for PUT /admin/forms/{form_id}; omitted attributes are unchanged."""

    title: str | None = None
    description: str | None = None
    fields: Any = None
    public_settings: PublicSettingsSchema | None = None


class StandaloneFormSaveRequest(BaseModel):
    """Request body for POST /forms: create, or update when form_id is given."""

    model_config = ConfigDict(populate_by_name=True)

    form_id: str | None = Field(default=None, alias="formId")
    title: str | None = None
    description: str | None = None
    fields: Any = None


class AssignUsersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: list[str] = Field(..., alias="userIds")


class FormResponse(BaseModel):
    """Full form as seen by its owner or an authorized user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    owner_role: PrincipalRole
    title: str
    description: str = ""
    fields: list[FieldSchema] = Field(default_factory=list)
    is_published: bool = False
    public_token: str | None = None
    public_settings: PublicSettingsSchema = Field(default_factory=PublicSettingsSchema)
    assigned_users: list[str] = Field(default_factory=list)
    submission_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PublishResponse(BaseModel):
    form: FormResponse
    public_url: str


class PublicFormResponse(BaseModel):
    """Anonymous view of a published form: no owner, assignments or counters."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str = ""
    public_token: str
    fields: list[FieldSchema] = Field(default_factory=list)
