from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, Float, ForeignKey, Integer, String, Text,
    UniqueConstraint, Uuid, func,
)
from contestjudge.db import Base
from contestjudge.enums import ContestStatus
from contestjudge.schemas.criteria import CategoryScoped, ContestWide, CriteriaScope

class Contest(Base):
    __tablename__ = "contests"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    type: Mapped[str] = mapped_column(String(24), nullable=False)  # LIVESTOCK|COFFEE_PRODUCTS|GENERAL_PRODUCTS
    status: Mapped[str] = mapped_column(String(24), nullable=False, default=ContestStatus.DRAFT.value)
    registration_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    registration_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    contest_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    contest_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Non-null only once the contest is COMPLETED
    results_published: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "results_published IS NULL OR status = 'COMPLETED'",
            name="ck_contest_results_only_when_completed",
        ),
    )

class ContestUserRole(Base):
    __tablename__ = "contest_user_roles"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contest_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("contests.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    role: Mapped[str] = mapped_column(String(24), nullable=False)  # CONTEST_ADMINISTRATOR|JUDGE|PARTICIPANT|PUBLIC_VIEWER
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "contest_id", name="uq_contest_role_one_per_user"),
    )

class Category(Base):
    __tablename__ = "categories"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contest_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("contests.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Livestock filters
    age_min: Mapped[int | None] = mapped_column(Integer, nullable=True)  # months
    age_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sex: Mapped[str | None] = mapped_column(String(16), nullable=True)
    # Product filters
    product_type: Mapped[str | None] = mapped_column(String(80), nullable=True)
    weight_min: Mapped[float | None] = mapped_column(Float, nullable=True)
    weight_max: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_entries: Mapped[int | None] = mapped_column(Integer, nullable=True)  # per participant
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

class Criteria(Base):
    """
    A weighted judging dimension. Exactly one of contest_id / category_id is
    set; callers work with the tagged `scope` instead of the raw columns.
    """
    __tablename__ = "criteria"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contest_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("contests.id", ondelete="CASCADE"), index=True, nullable=True)
    category_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("categories.id", ondelete="CASCADE"), index=True, nullable=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    weight: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    max_score: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(contest_id IS NOT NULL AND category_id IS NULL) OR (contest_id IS NULL AND category_id IS NOT NULL)",
            name="ck_criteria_single_scope",
        ),
        CheckConstraint("weight > 0", name="ck_criteria_weight_positive"),
        CheckConstraint("max_score > 0", name="ck_criteria_max_score_positive"),
    )

    @property
    def scope(self) -> CriteriaScope:
        if self.category_id is not None:
            return CategoryScoped(category_id=self.category_id)
        return ContestWide(contest_id=self.contest_id)

    @scope.setter
    def scope(self, value: CriteriaScope) -> None:
        if isinstance(value, CategoryScoped):
            self.contest_id, self.category_id = None, value.category_id
        else:
            self.contest_id, self.category_id = value.contest_id, None
