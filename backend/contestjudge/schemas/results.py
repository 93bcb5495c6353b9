from __future__ import annotations
from datetime import datetime
from uuid import UUID
from pydantic import Field
from contestjudge.schemas.base import ApiModel

class CriteriaScore(ApiModel):
    criteria_id: UUID
    criteria_name: str
    weight: float
    average: float
    scores: list[float]

class LivestockSummary(ApiModel):
    id: UUID
    name: str
    breed: str | None = None
    sex: str | None = None

class SubmissionResult(ApiModel):
    submission_id: UUID
    title: str
    participant_id: UUID
    participant_name: str
    criteria_scores: list[CriteriaScore]
    total_score: float
    media: str | None = None
    livestock: LivestockSummary | None = Field(default=None, alias="ganado")

class CategoryResults(ApiModel):
    category_id: UUID
    category_name: str
    submissions: list[SubmissionResult]

class ContestResults(ApiModel):
    contest_id: UUID
    categories: list[CategoryResults]

class PublishResponse(ApiModel):
    success: bool
    results_published: datetime
