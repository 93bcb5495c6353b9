from __future__ import annotations
from datetime import datetime
from typing import Literal
from uuid import UUID
from contestjudge.schemas.base import ApiModel

ParticipationStatusName = Literal["PENDING", "APPROVED", "REJECTED", "WITHDRAWN"]

class ParticipationCreate(ApiModel):
    notes: str | None = None

class ParticipationReview(ApiModel):
    status: ParticipationStatusName
    notes: str | None = None

class ParticipationPublic(ApiModel):
    id: UUID
    contest_id: UUID
    user_id: UUID
    status: ParticipationStatusName
    registered_at: datetime | None = None
    approved_at: datetime | None = None
    notes: str | None = None
