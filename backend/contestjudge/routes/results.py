from __future__ import annotations
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.auth_deps import get_current_user, get_optional_user
from contestjudge.db import get_session, unit_of_work
from contestjudge.enums import Capability
from contestjudge.errors import Forbidden, Unauthorized
from contestjudge.models.user import User
from contestjudge.schemas.results import ContestResults, PublishResponse
from contestjudge.services import contest_status, contests, results
from contestjudge.services.authz import Authorizer, get_authorizer

router = APIRouter(prefix="/contests/{contest_id}/results", tags=["results"])
log = structlog.get_logger()


@router.get("", response_model=ContestResults, response_model_by_alias=True)
async def get_results(
    contest_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User | None = Depends(get_optional_user),
    authz: Authorizer = Depends(get_authorizer),
):
    ch = await contests.get_contest(session, contest_id)
    if not contest_status.results_are_public(ch):
        # Before publication only the contest's staff may preview rankings
        if user is None:
            raise Unauthorized("Results have not been published")
        staff = (
            await authz.can(user.id, contest_id, Capability.MANAGE_CONTEST)
            or await authz.can(user.id, contest_id, Capability.JUDGE)
        )
        if not staff:
            raise Forbidden("Results have not been published")
    return await results.compute_results(session, contest_id)


@router.post("/publish", response_model=PublishResponse)
async def publish(
    contest_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    async with unit_of_work(session):
        ch = await contests.get_contest(session, contest_id, for_update=True)
        contest_status.publish_results(ch)
    return PublishResponse(success=True, results_published=ch.results_published)
