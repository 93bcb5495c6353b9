from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.auth_deps import get_current_user
from contestjudge.db import get_session, unit_of_work
from contestjudge.enums import Capability
from contestjudge.errors import Forbidden
from contestjudge.models.contest import Criteria
from contestjudge.models.scoring import JudgingScore
from contestjudge.models.user import User
from contestjudge.schemas.criteria import CriteriaPublic
from contestjudge.schemas.scoring import ScoreCreate, ScorePublic, ScoreRecorded
from contestjudge.services import contests, scoring, submissions
from contestjudge.services.authz import Authorizer, get_authorizer

router = APIRouter(prefix="/contests/{contest_id}/submissions/{submission_id}/scores", tags=["scores"])


def _public(score: JudgingScore, criteria: Criteria) -> dict:
    return dict(
        id=score.id,
        judge_id=score.judge_id,
        submission_id=score.submission_id,
        criteria_id=score.criteria_id,
        score=score.score,
        comments=score.comments,
        created_at=score.created_at,
        updated_at=score.updated_at,
        criteria=CriteriaPublic.model_validate(criteria),
    )


@router.post("", response_model=ScoreRecorded)
async def record_score(
    contest_id: UUID,
    submission_id: UUID,
    payload: ScoreCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.JUDGE)
    async with unit_of_work(session):
        ch = await contests.get_contest(session, contest_id, for_update=True)
        sub = await submissions.get_in_contest(session, contest_id, submission_id, for_update=True)
        row, criteria = await scoring.record_score(
            session,
            judge_id=user.id,
            contest=ch,
            submission=sub,
            criteria_id=payload.criteria_id,
            score=payload.score,
            comments=payload.comments,
        )
    return ScoreRecorded(**_public(row, criteria), submission_status=sub.status)


@router.get("", response_model=list[ScorePublic])
async def list_scores(
    contest_id: UUID,
    submission_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    sub = await submissions.get_in_contest(session, contest_id, submission_id)
    allowed = (
        await submissions.owner_id(session, sub) == user.id
        or await authz.can(user.id, contest_id, Capability.JUDGE)
        or await authz.can(user.id, contest_id, Capability.MANAGE_CONTEST)
    )
    if not allowed:
        raise Forbidden("Forbidden")
    return [ScorePublic(**_public(s, c)) for s, c in await scoring.list_scores(session, sub.id)]
