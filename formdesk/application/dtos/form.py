"""DTOs for forms and their field schema."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from formdesk.domain.enums import PrincipalRole

# Optional constraint attributes; stored only when set.
_CONSTRAINT_KEYS = (
    "min",
    "max",
    "min_length",
    "max_length",
    "min_date",
    "max_date",
    "pattern",
)


@dataclass(frozen=True)
class FieldDefinition:
    """One input control of a form. Constraints are descriptive metadata for clients."""

    id: str
    type: str
    label: str = ""
    placeholder: str = ""
    required: bool = False
    default_value: Any = None
    options: tuple[str, ...] = ()
    min: float | None = None
    max: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_date: str | None = None
    max_date: str | None = None
    pattern: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "placeholder": self.placeholder,
            "required": self.required,
            "default_value": self.default_value,
            "options": list(self.options),
        }
        for key in _CONSTRAINT_KEYS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldDefinition:
        """Rebuild from a stored (already normalised) field mapping."""
        return cls(
            id=str(data.get("id", "")),
            type=str(data.get("type", "")),
            label=data.get("label") or "",
            placeholder=data.get("placeholder") or "",
            required=bool(data.get("required", False)),
            default_value=data.get("default_value"),
            options=tuple(data.get("options") or ()),
            **{key: data.get(key) for key in _CONSTRAINT_KEYS},
        )


@dataclass(frozen=True)
class PublicFormSettings:
    """Anonymous-access settings. submission_limit None means unlimited."""

    submission_limit: int | None = None
    allow_multiple_submissions: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "submission_limit": self.submission_limit,
            "allow_multiple_submissions": self.allow_multiple_submissions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PublicFormSettings:
        data = data or {}
        limit = data.get("submission_limit")
        return cls(
            submission_limit=int(limit) if limit is not None else None,
            allow_multiple_submissions=bool(data.get("allow_multiple_submissions", False)),
        )


@dataclass(frozen=True)
class FormResult:
    """Form read-model."""

    id: str
    owner_id: str
    owner_role: PrincipalRole
    title: str
    description: str = ""
    fields: tuple[FieldDefinition, ...] = ()
    is_published: bool = False
    public_token: str | None = None
    public_settings: PublicFormSettings = PublicFormSettings()
    assigned_users: tuple[str, ...] = ()
    submission_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class FormPatch:
    """Partial form update; None means "leave unchanged".

    fields holds the raw client payload and is normalised by the service.
    """

    title: str | None = None
    description: str | None = None
    fields: Any = None
    public_settings: PublicFormSettings | None = None


@dataclass(frozen=True)
class PublishResult:
    """Published form plus the shareable public link."""

    form: FormResult
    public_url: str


@dataclass(frozen=True)
class PublicFormView:
    """What anonymous callers may see of a published form."""

    id: str
    title: str
    description: str
    public_token: str
    fields: tuple[FieldDefinition, ...]

    @classmethod
    def from_form(cls, form: FormResult) -> PublicFormView:
        return cls(
            id=form.id,
            title=form.title,
            description=form.description,
            public_token=form.public_token or "",
            fields=form.fields,
        )
