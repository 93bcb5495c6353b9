from __future__ import annotations
from datetime import datetime
from typing import Any, Literal
from uuid import UUID
from pydantic import Field
from contestjudge.schemas.base import ApiModel
from contestjudge.schemas.metadata import SubmissionMetadata

SubmissionStatusName = Literal["DRAFT", "SUBMITTED", "UNDER_REVIEW", "JUDGED", "DISQUALIFIED"]

class SubmissionCreate(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    category_id: UUID
    livestock_id: UUID | None = None
    metadata: dict[str, Any] | None = None

class SubmissionUpdate(ApiModel):
    # Only the fields present in the request are applied
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category_id: UUID | None = None
    livestock_id: UUID | None = None
    metadata: dict[str, Any] | None = None
    status: SubmissionStatusName | None = None

class SubmissionPublic(ApiModel):
    id: UUID
    contest_id: UUID
    participation_id: UUID
    category_id: UUID
    livestock_id: UUID | None = None
    title: str
    description: str | None = None
    status: SubmissionStatusName
    metadata: SubmissionMetadata | None = None
    submitted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

class SubmissionPage(ApiModel):
    submissions: list[SubmissionPublic]
    total: int
    page: int
    page_size: int

class MediaCreate(ApiModel):
    url: str = Field(min_length=1)
    mime_type: str | None = None
    caption: str | None = Field(default=None, max_length=255)
    is_primary: bool = False

class MediaPublic(MediaCreate):
    id: UUID
    submission_id: UUID

class LivestockCreate(ApiModel):
    name: str = Field(min_length=1, max_length=120)
    breed: str | None = None
    sex: str | None = None
    registration_number: str | None = None
    born_on: datetime | None = None

class LivestockPublic(LivestockCreate):
    id: UUID
    owner_id: UUID
