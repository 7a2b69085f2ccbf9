"""Pydantic models for the ``jobs`` table and job intake payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError
from app.core.urls import is_valid_url


class JobInput(BaseModel):
    """Validated job form fields.

    Build it with :meth:`parse`; any failure is re-raised as the app's
    ``ValidationError`` listing every offending field at once.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: str = Field(min_length=1)
    url: str = Field(min_length=1)

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        if value and not is_valid_url(value):
            raise ValueError("Please enter a valid URL")
        return value

    @classmethod
    def parse(cls, data: Any) -> JobInput:
        """A body that is not a JSON object counts as an empty form."""
        try:
            return cls.model_validate(dict(data) if isinstance(data, Mapping) else {})
        except PydanticValidationError as exc:
            raise ValidationError(_error_fields(exc)) from exc


class JobUpdateInput(JobInput):
    """Edit form: the four job fields plus the active flag."""
    is_active: bool


def _error_fields(exc: PydanticValidationError) -> list[str]:
    fields: list[str] = []
    for error in exc.errors():
        loc = error.get("loc") or ("unknown",)
        name = str(loc[0])
        if name not in fields:
            fields.append(name)
    return fields


class JobRecord(BaseModel):
    """Row written to ``jobs`` on creation."""
    title: str
    company: str
    location: str
    url: str
    is_active: bool = True
    submitted_on: datetime
    created_by: str | None = None


class JobChanges(BaseModel):
    """Columns written to ``jobs`` on update."""
    title: str
    company: str
    location: str
    url: str
    is_active: bool
    updated_at: datetime
    updated_by: str | None = None


class Job(BaseModel):
    """Full job record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    company: str
    location: str
    url: str
    submitted_on: datetime
    is_active: bool = True
    short_code: str | None = None
    created_by: str | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None


class PublicJob(Job):
    """Job as served to the public listing, with its reader-facing link."""
    link: str


class JobCreated(BaseModel):
    """Minimal projection returned after a successful mutation."""
    id: int
    title: str


class JobMutationResponse(BaseModel):
    success: bool = True
    job: JobCreated


class LocationCount(BaseModel):
    name: str
    count: int


# ---------------------------------------------------------------------------
# Database webhook payload
# ---------------------------------------------------------------------------

class JobSnapshot(BaseModel):
    """The ``record`` of a row-inserted event, as sent by the database."""
    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    company: str
    location: str
    url: str
    short_code: str | None = None
    submitted_on: datetime
    is_active: bool = True


class WebhookPayload(BaseModel):
    """Envelope of a database webhook delivery."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    table: str | None = None
    db_schema: str | None = Field(default=None, alias="schema")
    record: JobSnapshot | None = None
    old_record: dict[str, Any] | None = None
