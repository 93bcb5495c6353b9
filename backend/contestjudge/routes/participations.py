from __future__ import annotations
from datetime import datetime, timezone
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.auth_deps import get_current_user
from contestjudge.db import get_session, unit_of_work
from contestjudge.enums import Capability, ParticipationStatus as P
from contestjudge.errors import Forbidden, InvalidStateTransition, NotFound
from contestjudge.models.participation import Participation
from contestjudge.models.user import User
from contestjudge.schemas.participation import ParticipationCreate, ParticipationPublic, ParticipationReview
from contestjudge.services import contest_status, contests
from contestjudge.services.authz import Authorizer, get_authorizer

router = APIRouter(prefix="/contests/{contest_id}/participations", tags=["participations"])
log = structlog.get_logger()

# Administrator review moves; owners may only withdraw
_REVIEW_MOVES = {
    (P.PENDING, P.APPROVED), (P.PENDING, P.REJECTED),
    (P.APPROVED, P.REJECTED), (P.REJECTED, P.APPROVED),
    (P.APPROVED, P.PENDING), (P.REJECTED, P.PENDING),
}


@router.post("", response_model=ParticipationPublic, status_code=201)
async def register(
    contest_id: UUID,
    payload: ParticipationCreate | None = None,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    async with unit_of_work(session):
        ch = await contests.get_contest(session, contest_id, for_update=True)
        if not contest_status.can_register(ch):
            raise InvalidStateTransition("Registration is not open for this contest")
        existing = await session.scalar(
            select(Participation).where(Participation.contest_id == ch.id, Participation.user_id == user.id)
        )
        if existing and existing.status != P.WITHDRAWN:
            raise InvalidStateTransition("You are already registered for this contest")
        if ch.max_participants:
            taken = await session.scalar(
                select(func.count()).select_from(Participation)
                .where(Participation.contest_id == ch.id, Participation.status != P.WITHDRAWN.value)
            ) or 0
            if taken >= ch.max_participants:
                raise InvalidStateTransition("Contest has reached its participant limit")
        notes = payload.notes if payload else None
        if existing:
            # Re-registering after a withdrawal reuses the unique (user, contest) row
            existing.status = P.PENDING.value
            existing.approved_at = None
            existing.registered_at = datetime.now(timezone.utc)
            existing.notes = notes
            p = existing
        else:
            p = Participation(contest_id=ch.id, user_id=user.id, status=P.PENDING.value, notes=notes)
            session.add(p)
        await session.flush()
    await session.refresh(p)
    log.info("participation_registered", contest_id=str(contest_id), participation_id=str(p.id))
    return ParticipationPublic.model_validate(p)


@router.get("", response_model=list[ParticipationPublic])
async def list_participations(
    contest_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await contests.get_contest(session, contest_id)
    q = select(Participation).where(Participation.contest_id == contest_id)
    if not await authz.can(user.id, contest_id, Capability.MANAGE_CONTEST):
        q = q.where(Participation.user_id == user.id)
    rows = (await session.execute(q.order_by(Participation.registered_at.asc()))).scalars().all()
    return [ParticipationPublic.model_validate(p) for p in rows]


@router.patch("/{participation_id}", response_model=ParticipationPublic)
async def review(
    contest_id: UUID,
    participation_id: UUID,
    payload: ParticipationReview,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    is_admin = await authz.can(user.id, contest_id, Capability.MANAGE_CONTEST)
    async with unit_of_work(session):
        p = await session.get(Participation, participation_id)
        if not p or p.contest_id != contest_id:
            raise NotFound("Participation not found")
        is_owner = p.user_id == user.id
        current, target = P(p.status), P(payload.status)
        if target == P.WITHDRAWN:
            if not is_owner:
                raise Forbidden("Only the participant can withdraw")
            if current == P.WITHDRAWN:
                raise InvalidStateTransition("Participation is already withdrawn")
        elif current != target:
            if not is_admin:
                raise Forbidden("Forbidden")
            if (current, target) not in _REVIEW_MOVES:
                raise InvalidStateTransition(f"Cannot move participation from {current.value} to {target.value}")
        p.status = target.value
        # approved_at tracks the APPROVED state exactly
        if target == P.APPROVED and current != P.APPROVED:
            p.approved_at = datetime.now(timezone.utc)
        elif target != P.APPROVED:
            p.approved_at = None
        if payload.notes is not None:
            p.notes = payload.notes
    log.info("participation_reviewed", participation_id=str(p.id), from_status=current.value, to_status=target.value)
    return ParticipationPublic.model_validate(p)
