from __future__ import annotations
from datetime import datetime
from uuid import UUID
from pydantic import Field
from contestjudge.schemas.base import ApiModel
from contestjudge.schemas.criteria import CriteriaPublic

class ScoreCreate(ApiModel):
    criteria_id: UUID
    # Range is checked against the criterion's maxScore by the scoring service
    score: float = Field(allow_inf_nan=False)
    comments: str | None = None

class ScorePublic(ApiModel):
    id: UUID
    judge_id: UUID
    submission_id: UUID
    criteria_id: UUID
    score: float
    comments: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    criteria: CriteriaPublic

class ScoreRecorded(ScorePublic):
    submission_status: str
