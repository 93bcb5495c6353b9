from __future__ import annotations
import math
import uuid
from datetime import datetime, timezone
from typing import Iterable
from uuid import UUID
import structlog
from sqlalchemy import select, or_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.config import CompletionQuorum, settings
from contestjudge.enums import ContestRole
from contestjudge.errors import (
    CriteriaNotInContest, InvalidScore, InvalidStateTransition, NotFound, ValidationError,
)
from contestjudge.models.contest import Category, Contest, ContestUserRole, Criteria
from contestjudge.models.scoring import JudgingScore
from contestjudge.models.submission import Submission
from contestjudge.schemas.criteria import CategoryScoped
from contestjudge.services import contest_status, submission_state

log = structlog.get_logger()

_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


async def applicable_criteria(session: AsyncSession, submission: Submission) -> list[Criteria]:
    """Contest-wide criteria plus the criteria of the submission's own category."""
    rows = await session.execute(
        select(Criteria)
        .where(or_(Criteria.contest_id == submission.contest_id, Criteria.category_id == submission.category_id))
        .order_by(Criteria.order.asc(), Criteria.name.asc())
    )
    return list(rows.scalars().all())


async def criteria_contest_id(session: AsyncSession, criteria: Criteria) -> UUID | None:
    scope = criteria.scope
    if isinstance(scope, CategoryScoped):
        return await session.scalar(select(Category.contest_id).where(Category.id == scope.category_id))
    return scope.contest_id


def validate_score(score: float, criteria: Criteria) -> None:
    if score is None or not math.isfinite(score):
        raise InvalidScore("Score must be a number")
    if score < 0:
        raise InvalidScore("Score must not be negative")
    if score > criteria.max_score:
        raise InvalidScore(f"Score cannot exceed maximum score of {criteria.max_score}")


async def _upsert(session: AsyncSession, *, judge_id: UUID, submission_id: UUID, criteria_id: UUID,
                  score: float, comments: str | None) -> JudgingScore:
    dialect = session.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Score upsert not supported on dialect {dialect!r}")
    now = datetime.now(timezone.utc)
    stmt = insert(JudgingScore).values(
        id=uuid.uuid4(),
        judge_id=judge_id,
        submission_id=submission_id,
        criteria_id=criteria_id,
        score=float(score),
        comments=comments,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["judge_id", "submission_id", "criteria_id"],
        set_={
            "score": stmt.excluded.score,
            "comments": stmt.excluded.comments,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    await session.execute(stmt)
    return (await session.execute(
        select(JudgingScore)
        .where(
            JudgingScore.judge_id == judge_id,
            JudgingScore.submission_id == submission_id,
            JudgingScore.criteria_id == criteria_id,
        )
        .execution_options(populate_existing=True)
    )).scalar_one()


def is_complete(criteria_ids: Iterable[UUID], scored: set[tuple[UUID, UUID]], judge_ids: Iterable[UUID]) -> bool:
    """True when every judge in judge_ids has a score for every criterion."""
    crit = set(criteria_ids)
    judges = set(judge_ids)
    if not crit or not judges:
        return False
    return all((j, c) in scored for j in judges for c in crit)


async def _judges_for_quorum(session: AsyncSession, contest_id: UUID, scoring_judge: UUID,
                             quorum: CompletionQuorum) -> set[UUID]:
    if quorum == "any_judge":
        return {scoring_judge}
    assigned = (await session.execute(
        select(ContestUserRole.user_id).where(
            ContestUserRole.contest_id == contest_id,
            ContestUserRole.role == ContestRole.JUDGE.value,
        )
    )).scalars().all()
    return set(assigned) | {scoring_judge}


async def record_score(
    session: AsyncSession,
    *,
    judge_id: UUID,
    contest: Contest,
    submission: Submission,
    criteria_id: UUID,
    score: float,
    comments: str | None = None,
    quorum: CompletionQuorum | None = None,
) -> tuple[JudgingScore, Criteria]:
    """
    Validate and upsert one judge's score, then advance the submission to
    JUDGED when the completion quorum is met. Every check runs before the
    first write; the caller owns the transaction.
    """
    criteria = await session.get(Criteria, criteria_id)
    if criteria is None:
        raise NotFound("Criteria not found")
    if await criteria_contest_id(session, criteria) != submission.contest_id:
        raise CriteriaNotInContest("Criteria not found in this contest")
    scope = criteria.scope
    if isinstance(scope, CategoryScoped) and scope.category_id != submission.category_id:
        raise ValidationError("Criteria does not apply to this submission's category")
    validate_score(score, criteria)
    if not contest_status.can_score(contest):
        raise InvalidStateTransition(f"Scoring is closed for this contest (status={contest.status})")
    if not submission_state.is_judgeable(submission):
        raise InvalidStateTransition(f"Submission cannot be scored in status {submission.status}")

    row = await _upsert(
        session,
        judge_id=judge_id,
        submission_id=submission.id,
        criteria_id=criteria.id,
        score=score,
        comments=comments,
    )
    log.info("score_recorded", submission_id=str(submission.id), criteria_id=str(criteria.id),
             judge_id=str(judge_id), score=row.score)

    # Re-read after the upsert so the decision sees this transaction's writes
    applicable = await applicable_criteria(session, submission)
    scored = {tuple(r) for r in (await session.execute(
        select(JudgingScore.judge_id, JudgingScore.criteria_id)
        .where(JudgingScore.submission_id == submission.id)
    )).all()}
    judges = await _judges_for_quorum(session, submission.contest_id, judge_id, quorum or settings.completion_quorum)
    if is_complete((c.id for c in applicable), scored, judges):
        if submission_state.mark_judged(submission):
            log.info("submission_judged", submission_id=str(submission.id), judges=len(judges))
    return row, criteria


async def list_scores(session: AsyncSession, submission_id: UUID) -> list[tuple[JudgingScore, Criteria]]:
    rows = await session.execute(
        select(JudgingScore, Criteria)
        .join(Criteria, Criteria.id == JudgingScore.criteria_id)
        .where(JudgingScore.submission_id == submission_id)
        .order_by(Criteria.order.asc(), JudgingScore.updated_at.desc())
    )
    return [(s, c) for (s, c) in rows.all()]
