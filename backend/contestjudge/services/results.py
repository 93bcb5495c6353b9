from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable, Sequence
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.enums import SubmissionStatus
from contestjudge.models.contest import Category, Criteria
from contestjudge.models.participation import Participation
from contestjudge.models.scoring import JudgingScore
from contestjudge.models.submission import Livestock, Submission, SubmissionMedia
from contestjudge.models.user import User
from contestjudge.schemas.results import (
    CategoryResults, ContestResults, CriteriaScore, LivestockSummary, SubmissionResult,
)

# ---------- pure math ----------

def criteria_breakdown(scored: Iterable[tuple[Criteria, float]]) -> list[CriteriaScore]:
    """
    Group raw (criteria, score) pairs by criterion and average each group
    across judges. Criteria without scores never appear here.
    """
    groups: dict[UUID, tuple[Criteria, list[float]]] = {}
    for crit, value in scored:
        groups.setdefault(crit.id, (crit, []))[1].append(float(value))
    ordered = sorted(groups.values(), key=lambda g: (g[0].order, g[0].name, str(g[0].id)))
    return [
        CriteriaScore(
            criteria_id=crit.id,
            criteria_name=crit.name,
            weight=float(crit.weight),
            average=sum(values) / len(values),
            scores=values,
        )
        for crit, values in ordered
    ]


def weighted_total(breakdown: Sequence[CriteriaScore]) -> float:
    """Σ(average·weight) / Σweight over scored criteria; 0.0 when nothing is scored."""
    total_weight = sum(c.weight for c in breakdown)
    if total_weight == 0:
        return 0.0
    return sum(c.average * c.weight for c in breakdown) / total_weight


def _instant(dt: datetime | None) -> float:
    if dt is None:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def rank(entries: Iterable[tuple[SubmissionResult, datetime | None]]) -> list[SubmissionResult]:
    """Highest total first; ties go to the earlier-created submission, then id."""
    ordered = sorted(entries, key=lambda e: (-e[0].total_score, _instant(e[1]), str(e[0].submission_id)))
    return [r for r, _ in ordered]

# ---------- loading ----------

async def compute_results(session: AsyncSession, contest_id: UUID) -> ContestResults:
    """
    Ranked results per category for the contest's JUDGED submissions.

    Read-only: safe to call at any time, and two calls over unchanged data
    return identical output. Submissions, participants and scores come from
    one statement so a ranking never mixes old and new scores.
    """
    rows = (await session.execute(
        select(Submission, Category, User, JudgingScore, Criteria)
        .join(Category, Category.id == Submission.category_id)
        .join(Participation, Participation.id == Submission.participation_id)
        .join(User, User.id == Participation.user_id)
        .outerjoin(JudgingScore, JudgingScore.submission_id == Submission.id)
        .outerjoin(Criteria, Criteria.id == JudgingScore.criteria_id)
        .where(Submission.contest_id == contest_id)
        .where(Submission.status == SubmissionStatus.JUDGED.value)
        .order_by(Submission.created_at.asc(), Submission.id.asc(), JudgingScore.created_at.asc())
    )).all()

    subs: dict[UUID, tuple[Submission, Category, User]] = {}
    scored: dict[UUID, list[tuple[Criteria, float]]] = {}
    for sub, cat, user, score, crit in rows:
        subs.setdefault(sub.id, (sub, cat, user))
        bucket = scored.setdefault(sub.id, [])
        if score is not None and crit is not None:
            bucket.append((crit, score.score))

    media = await _primary_media(session, list(subs))
    livestock = await _livestock(session, [s.livestock_id for s, _, _ in subs.values() if s.livestock_id])

    by_category: dict[UUID, tuple[Category, list[tuple[SubmissionResult, datetime | None]]]] = {}
    for sub_id, (sub, cat, user) in subs.items():
        breakdown = criteria_breakdown(scored[sub_id])
        result = SubmissionResult(
            submission_id=sub.id,
            title=sub.title,
            participant_id=user.id,
            participant_name=user.display_name,
            criteria_scores=breakdown,
            total_score=weighted_total(breakdown),
            media=media.get(sub.id),
            livestock=livestock.get(sub.livestock_id) if sub.livestock_id else None,
        )
        by_category.setdefault(cat.id, (cat, []))[1].append((result, sub.created_at))

    categories = sorted(by_category.values(), key=lambda g: (g[0].order, g[0].name, str(g[0].id)))
    return ContestResults(
        contest_id=contest_id,
        categories=[
            CategoryResults(category_id=cat.id, category_name=cat.name, submissions=rank(entries))
            for cat, entries in categories
        ],
    )


async def _primary_media(session: AsyncSession, submission_ids: list[UUID]) -> dict[UUID, str]:
    if not submission_ids:
        return {}
    rows = (await session.execute(
        select(SubmissionMedia)
        .where(SubmissionMedia.submission_id.in_(submission_ids), SubmissionMedia.is_primary.is_(True))
        .order_by(SubmissionMedia.created_at.asc(), SubmissionMedia.id.asc())
    )).scalars().all()
    out: dict[UUID, str] = {}
    for m in rows:
        out.setdefault(m.submission_id, m.url)
    return out


async def _livestock(session: AsyncSession, ids: list[UUID]) -> dict[UUID, LivestockSummary]:
    if not ids:
        return {}
    rows = (await session.execute(select(Livestock).where(Livestock.id.in_(ids)))).scalars().all()
    return {l.id: LivestockSummary(id=l.id, name=l.name, breed=l.breed, sex=l.sex) for l in rows}
