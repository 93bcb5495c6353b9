from __future__ import annotations
import uuid
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import CheckConstraint, Float, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from contestjudge.db import Base

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class JudgingScore(Base):
    """
    One judge's rating of one submission against one criterion.
    The (judge, submission, criteria) key is unique: a second rating from the
    same judge replaces the first in place.
    """
    __tablename__ = "judging_scores"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    judge_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    submission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("submissions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    criteria_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("criteria.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    score: Mapped[float] = mapped_column(Float, nullable=False)
    comments: Mapped[str | None] = mapped_column(Text(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("judge_id", "submission_id", "criteria_id", name="uq_score_once_per_judge_criteria"),
        CheckConstraint("score >= 0", name="ck_score_non_negative"),
    )
