from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.config import settings
from contestjudge.enums import ContestRole
from contestjudge.errors import InvalidStateTransition, NotFound, ValidationError
from contestjudge.models.contest import Category, Contest, ContestUserRole, Criteria
from contestjudge.models.participation import Participation
from contestjudge.models.scoring import JudgingScore
from contestjudge.models.submission import Submission
from contestjudge.schemas.contest import ContestStats
from contestjudge.schemas.criteria import CategoryScoped, ContestWide, CriteriaCreate, CriteriaScope


async def get_contest(session: AsyncSession, contest_id: UUID, for_update: bool = False) -> Contest:
    q = select(Contest).where(Contest.id == contest_id)
    if for_update:
        q = q.with_for_update()
    ch = await session.scalar(q)
    if not ch:
        raise NotFound("Contest not found")
    return ch


async def get_category(session: AsyncSession, contest_id: UUID, category_id: UUID) -> Category:
    cat = await session.get(Category, category_id)
    if not cat or cat.contest_id != contest_id:
        raise NotFound("Category not found")
    return cat

# ---------- criteria ----------

async def resolve_scope(session: AsyncSession, contest_id: UUID, payload: CriteriaCreate) -> CriteriaScope:
    if payload.scope.kind == "category":
        if payload.scope.category_id is None:
            raise ValidationError("categoryId is required for category-scoped criteria")
        cat = await session.get(Category, payload.scope.category_id)
        if not cat or cat.contest_id != contest_id:
            raise ValidationError("Invalid category")
        return CategoryScoped(category_id=cat.id)
    return ContestWide(contest_id=contest_id)


def resolve_weight(weight: float | None) -> float:
    w = 1.0 if weight is None else float(weight)
    if not (settings.criteria_weight_min <= w <= settings.criteria_weight_max):
        raise ValidationError(
            f"Weight must be between {settings.criteria_weight_min} and {settings.criteria_weight_max}"
        )
    return w


def resolve_max_score(max_score: int | None) -> int:
    m = settings.criteria_default_max_score if max_score is None else int(max_score)
    if m < 1:
        raise ValidationError("maxScore must be a positive integer")
    return m


async def criteria_in_contest(session: AsyncSession, contest_id: UUID, criteria_id: UUID) -> Criteria:
    crit = await session.get(Criteria, criteria_id)
    if not crit:
        raise NotFound("Criteria not found")
    scope = crit.scope
    if isinstance(scope, CategoryScoped):
        owner = await session.scalar(select(Category.contest_id).where(Category.id == scope.category_id))
    else:
        owner = scope.contest_id
    if owner != contest_id:
        raise NotFound("Criteria not found in this contest")
    return crit


async def score_stats(session: AsyncSession, criteria_id: UUID) -> tuple[int, float | None]:
    count, top = (await session.execute(
        select(func.count(JudgingScore.id), func.max(JudgingScore.score)).where(JudgingScore.criteria_id == criteria_id)
    )).one()
    return int(count or 0), top


async def apply_criteria(session: AsyncSession, contest_id: UUID, crit: Criteria, payload: CriteriaCreate) -> Criteria:
    """Validate and copy a create/update payload onto a criteria row."""
    scope = await resolve_scope(session, contest_id, payload)
    weight = resolve_weight(payload.weight)
    max_score = resolve_max_score(payload.max_score)
    if crit.id is not None:
        count, top = await score_stats(session, crit.id)
        if count and scope != crit.scope:
            raise InvalidStateTransition("Cannot change the scope of criteria that already has scores")
        if top is not None and top > max_score:
            raise InvalidStateTransition(f"Existing scores exceed the new maximum of {max_score}")
    crit.name = payload.name
    crit.description = payload.description
    crit.weight = weight
    crit.max_score = max_score
    crit.order = payload.order
    crit.scope = scope
    return crit

# ---------- stats ----------

async def stats(session: AsyncSession, contest_id: UUID) -> ContestStats:
    total_participants = await session.scalar(
        select(func.count()).select_from(Participation).where(Participation.contest_id == contest_id)
    ) or 0
    total_categories = await session.scalar(
        select(func.count()).select_from(Category).where(Category.contest_id == contest_id)
    ) or 0
    total_judges = await session.scalar(
        select(func.count()).select_from(ContestUserRole)
        .where(ContestUserRole.contest_id == contest_id, ContestUserRole.role == ContestRole.JUDGE.value)
    ) or 0
    by_category = (await session.execute(
        select(Submission.category_id, func.count()).where(Submission.contest_id == contest_id)
        .group_by(Submission.category_id)
    )).all()
    by_sub_status = (await session.execute(
        select(Submission.status, func.count()).where(Submission.contest_id == contest_id)
        .group_by(Submission.status)
    )).all()
    by_part_status = (await session.execute(
        select(Participation.status, func.count()).where(Participation.contest_id == contest_id)
        .group_by(Participation.status)
    )).all()
    return ContestStats(
        total_participants=int(total_participants),
        total_submissions=sum(int(n) for _, n in by_category),
        total_categories=int(total_categories),
        total_judges=int(total_judges),
        submissions_by_category={str(cid): int(n) for cid, n in by_category},
        participations_by_status={s: int(n) for s, n in by_part_status},
        submissions_by_status={s: int(n) for s, n in by_sub_status},
    )
