from __future__ import annotations
from typing import Any
from uuid import UUID
import structlog
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.enums import ParticipationStatus
from contestjudge.errors import Forbidden, InvalidStateTransition, NotFound, ValidationError
from contestjudge.models.contest import Category, Contest
from contestjudge.models.participation import Participation
from contestjudge.models.scoring import JudgingScore
from contestjudge.models.submission import Livestock, Submission, SubmissionMedia
from contestjudge.schemas.metadata import LivestockMetadata, SubmissionMetadata, load_metadata, parse_metadata
from contestjudge.schemas.submission import SubmissionCreate, SubmissionPublic, SubmissionUpdate
from contestjudge.services import contest_status, submission_state

log = structlog.get_logger()


def to_public(s: Submission) -> SubmissionPublic:
    return SubmissionPublic(
        id=s.id,
        contest_id=s.contest_id,
        participation_id=s.participation_id,
        category_id=s.category_id,
        livestock_id=s.livestock_id,
        title=s.title,
        description=s.description,
        status=s.status,
        metadata=load_metadata(s.metadata_json),
        submitted_at=s.submitted_at,
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


async def get_in_contest(session: AsyncSession, contest_id: UUID, submission_id: UUID,
                         for_update: bool = False) -> Submission:
    q = select(Submission).where(Submission.id == submission_id)
    if for_update:
        q = q.with_for_update()
    sub = await session.scalar(q)
    if not sub:
        raise NotFound("Submission not found")
    if sub.contest_id != contest_id:
        raise NotFound("Submission not found in this contest")
    return sub


async def owner_id(session: AsyncSession, submission: Submission) -> UUID:
    return await session.scalar(select(Participation.user_id).where(Participation.id == submission.participation_id))


def check_category_filters(category: Category, meta: SubmissionMetadata) -> None:
    """Reject livestock entries whose age, sex or weight fall outside the category's filters."""
    if not isinstance(meta, LivestockMetadata):
        return
    if meta.age is not None:
        if category.age_min is not None and meta.age < category.age_min:
            raise ValidationError(f"Age {meta.age} is below the category minimum of {category.age_min}")
        if category.age_max is not None and meta.age > category.age_max:
            raise ValidationError(f"Age {meta.age} is above the category maximum of {category.age_max}")
    if meta.sex and category.sex and meta.sex.lower() != category.sex.lower():
        raise ValidationError(f"Category only admits sex {category.sex}")
    if meta.weight is not None:
        if category.weight_min is not None and meta.weight < category.weight_min:
            raise ValidationError(f"Weight {meta.weight} is below the category minimum of {category.weight_min}")
        if category.weight_max is not None and meta.weight > category.weight_max:
            raise ValidationError(f"Weight {meta.weight} is above the category maximum of {category.weight_max}")


async def _category_in_contest(session: AsyncSession, contest_id: UUID, category_id: UUID) -> Category:
    cat = await session.get(Category, category_id)
    if not cat or cat.contest_id != contest_id:
        raise ValidationError("Invalid category")
    return cat


async def _check_livestock(session: AsyncSession, livestock_id: UUID | None) -> None:
    if livestock_id is not None and not await session.get(Livestock, livestock_id):
        raise ValidationError("Invalid livestock record")


async def _check_entry_cap(session: AsyncSession, category: Category, participation_id: UUID,
                           exclude: UUID | None = None) -> None:
    if not category.max_entries:
        return
    q = select(func.count()).select_from(Submission).where(
        Submission.category_id == category.id,
        Submission.participation_id == participation_id,
    )
    if exclude is not None:
        q = q.where(Submission.id != exclude)
    used = await session.scalar(q) or 0
    if used >= category.max_entries:
        raise ValidationError(f"Category allows at most {category.max_entries} entries per participant")


async def create(session: AsyncSession, contest: Contest, user_id: UUID, payload: SubmissionCreate) -> Submission:
    participation = await session.scalar(
        select(Participation).where(Participation.contest_id == contest.id, Participation.user_id == user_id)
    )
    if not participation:
        raise Forbidden("You are not registered for this contest")
    if participation.status != ParticipationStatus.APPROVED:
        raise InvalidStateTransition("Your participation has not been approved yet")
    if not contest_status.can_accept_submissions(contest):
        raise InvalidStateTransition("Contest is not accepting submissions at this time")

    category = await _category_in_contest(session, contest.id, payload.category_id)
    await _check_livestock(session, payload.livestock_id)
    meta = parse_metadata(contest.type, payload.metadata)
    check_category_filters(category, meta)
    await _check_entry_cap(session, category, participation.id)

    sub = Submission(
        participation_id=participation.id,
        contest_id=contest.id,
        category_id=category.id,
        livestock_id=payload.livestock_id,
        title=payload.title,
        description=payload.description,
        metadata_json=meta.model_dump(mode="json"),
    )
    session.add(sub)
    await session.flush()
    log.info("submission_created", submission_id=str(sub.id), contest_id=str(contest.id), category_id=str(category.id))
    return sub


async def update(session: AsyncSession, contest: Contest, sub: Submission, payload: SubmissionUpdate,
                 *, is_owner: bool, is_admin: bool) -> Submission:
    """
    Field edits are open to the owner only while the entry is a draft;
    administrators may edit at any time. A status in the payload goes
    through the submission state machine after the field edits are checked.
    """
    fields = payload.model_dump(exclude_unset=True, exclude={"status"})
    if fields:
        if not is_admin and not (is_owner and submission_state.can_owner_edit(sub)):
            if is_owner:
                raise InvalidStateTransition("Submitted entries can no longer be edited")
            raise Forbidden("Forbidden")
        await _apply_fields(session, contest, sub, fields)
    if payload.status is not None:
        submission_state.transition(sub, payload.status, is_owner=is_owner, is_admin=is_admin)
    await session.flush()
    return sub


async def _apply_fields(session: AsyncSession, contest: Contest, sub: Submission, fields: dict[str, Any]) -> None:
    if "title" in fields:
        if not fields["title"]:
            raise ValidationError("Title is required")
        sub.title = fields["title"]
    if "description" in fields:
        sub.description = fields["description"]
    category = None
    if fields.get("category_id") and fields["category_id"] != sub.category_id:
        # Recorded scores belong to the criteria of the current category
        scored = await session.scalar(
            select(func.count()).select_from(JudgingScore).where(JudgingScore.submission_id == sub.id)
        )
        if not submission_state.can_owner_edit(sub) or scored:
            raise InvalidStateTransition("Category can only be changed while the submission is an unscored draft")
        category = await _category_in_contest(session, contest.id, fields["category_id"])
        await _check_entry_cap(session, category, sub.participation_id, exclude=sub.id)
        sub.category_id = category.id
    if "livestock_id" in fields:
        await _check_livestock(session, fields["livestock_id"])
        sub.livestock_id = fields["livestock_id"]
    if "metadata" in fields or category is not None:
        raw = fields["metadata"] if "metadata" in fields else sub.metadata_json
        meta = parse_metadata(contest.type, raw)
        check_category_filters(category or await session.get(Category, sub.category_id), meta)
        sub.metadata_json = meta.model_dump(mode="json")


async def remove(session: AsyncSession, sub: Submission, *, is_owner: bool, is_admin: bool) -> None:
    """
    Owners may delete drafts; administrators may delete in any status.
    Scores go first, then media, then the submission itself; the caller's
    transaction makes the three deletes all-or-nothing.
    """
    if not (is_owner or is_admin):
        raise Forbidden("Forbidden")
    if not is_admin and not submission_state.can_owner_edit(sub):
        raise InvalidStateTransition("Only draft submissions can be deleted")
    scores = await session.execute(delete(JudgingScore).where(JudgingScore.submission_id == sub.id))
    media = await session.execute(delete(SubmissionMedia).where(SubmissionMedia.submission_id == sub.id))
    await session.delete(sub)
    await session.flush()
    log.info("submission_deleted", submission_id=str(sub.id), scores=scores.rowcount, media=media.rowcount)


async def add_media(session: AsyncSession, sub: Submission, *, url: str, mime_type: str | None,
                    caption: str | None, is_primary: bool) -> SubmissionMedia:
    if is_primary:
        # One primary image per submission
        current = (await session.execute(
            select(SubmissionMedia).where(SubmissionMedia.submission_id == sub.id, SubmissionMedia.is_primary.is_(True))
        )).scalars().all()
        for m in current:
            m.is_primary = False
    m = SubmissionMedia(submission_id=sub.id, url=url, mime_type=mime_type, caption=caption, is_primary=is_primary)
    session.add(m)
    await session.flush()
    return m
