from __future__ import annotations
import uuid
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import JSON, Boolean, String, Text, DateTime, ForeignKey, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from contestjudge.db import Base
from contestjudge.enums import SubmissionStatus

JSONType = JSON().with_variant(JSONB(), "postgresql")

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Livestock(Base):
    __tablename__ = "livestock"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    breed: Mapped[str | None] = mapped_column(String(80), nullable=True)
    sex: Mapped[str | None] = mapped_column(String(16), nullable=True)
    registration_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    born_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    participation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("participations.id", ondelete="CASCADE"), index=True, nullable=False
    )
    # Denormalized from the participation so contest-wide queries need no join
    contest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("contests.id", ondelete="CASCADE"), index=True, nullable=False
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    livestock_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("livestock.id", ondelete="SET NULL"), index=True, nullable=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=SubmissionStatus.DRAFT.value)  # DRAFT|SUBMITTED|UNDER_REVIEW|JUDGED|DISQUALIFIED
    metadata_json: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    # Stamped once, on the first move into SUBMITTED
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class SubmissionMedia(Base):
    __tablename__ = "submission_media"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    submission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("submissions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    url: Mapped[str] = mapped_column(Text(), nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    caption: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
