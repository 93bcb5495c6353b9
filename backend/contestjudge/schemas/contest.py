from __future__ import annotations
from datetime import datetime
from typing import Literal
from uuid import UUID
from pydantic import Field, model_validator
from contestjudge.schemas.base import ApiModel

ContestTypeName = Literal["LIVESTOCK", "COFFEE_PRODUCTS", "GENERAL_PRODUCTS"]
ContestStatusName = Literal["DRAFT", "REGISTRATION_OPEN", "REGISTRATION_CLOSED", "JUDGING", "COMPLETED", "CANCELLED"]
RoleName = Literal["CONTEST_ADMINISTRATOR", "JUDGE", "PARTICIPANT", "PUBLIC_VIEWER"]

class ContestCreate(ApiModel):
    name: str = Field(min_length=3, max_length=160)
    description: str | None = None
    type: ContestTypeName
    registration_start: datetime
    registration_end: datetime
    contest_start: datetime
    contest_end: datetime
    max_participants: int | None = Field(default=None, ge=1)
    is_public: bool = True

class ContestPublic(ApiModel):
    id: UUID
    name: str
    description: str | None
    type: ContestTypeName
    status: ContestStatusName
    registration_start: datetime
    registration_end: datetime
    contest_start: datetime
    contest_end: datetime
    results_published: datetime | None = None
    max_participants: int | None = None
    is_public: bool
    created_by: UUID
    created_at: datetime | None = None

class StatusChange(ApiModel):
    status: ContestStatusName

class CategoryBase(ApiModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    order: int = 0
    age_min: int | None = Field(default=None, ge=0)
    age_max: int | None = Field(default=None, ge=0)
    sex: str | None = Field(default=None, max_length=16)
    product_type: str | None = Field(default=None, max_length=80)
    weight_min: float | None = Field(default=None, ge=0)
    weight_max: float | None = Field(default=None, ge=0)
    max_entries: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def ranges_ordered(self):
        if self.age_min is not None and self.age_max is not None and self.age_min > self.age_max:
            raise ValueError("ageMin must not exceed ageMax")
        if self.weight_min is not None and self.weight_max is not None and self.weight_min > self.weight_max:
            raise ValueError("weightMin must not exceed weightMax")
        return self

class CategoryCreate(CategoryBase):
    pass

class CategoryPublic(CategoryBase):
    id: UUID
    contest_id: UUID

class JudgeAssign(ApiModel):
    user_id: UUID

class RolePublic(ApiModel):
    user_id: UUID
    contest_id: UUID
    role: RoleName
    name: str | None = None
    email: str | None = None

class ContestStats(ApiModel):
    total_participants: int
    total_submissions: int
    total_categories: int
    total_judges: int
    submissions_by_category: dict[str, int]
    participations_by_status: dict[str, int]
    submissions_by_status: dict[str, int]
