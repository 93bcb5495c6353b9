from __future__ import annotations
from typing import Annotated, Literal, Union
from uuid import UUID
from pydantic import Field
from contestjudge.schemas.base import ApiModel


class ContestWide(ApiModel):
    kind: Literal["contest"] = "contest"
    contest_id: UUID


class CategoryScoped(ApiModel):
    kind: Literal["category"] = "category"
    category_id: UUID


CriteriaScope = Annotated[Union[ContestWide, CategoryScoped], Field(discriminator="kind")]


class ScopeIn(ApiModel):
    # contest_id comes from the route; only category scope carries an id
    kind: Literal["contest", "category"] = "contest"
    category_id: UUID | None = None


class CriteriaCreate(ApiModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    weight: float | None = None
    max_score: int | None = None
    order: int = 0
    scope: ScopeIn = Field(default_factory=ScopeIn)


class CriteriaUpdate(CriteriaCreate):
    pass


class CriteriaPublic(ApiModel):
    id: UUID
    name: str
    description: str | None = None
    weight: float
    max_score: int
    order: int
    scope: CriteriaScope
