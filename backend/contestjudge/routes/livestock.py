from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.auth_deps import get_current_user
from contestjudge.db import get_session, unit_of_work
from contestjudge.errors import NotFound
from contestjudge.models.submission import Livestock
from contestjudge.models.user import User
from contestjudge.schemas.submission import LivestockCreate, LivestockPublic

router = APIRouter(prefix="/livestock", tags=["livestock"])


@router.post("", response_model=LivestockPublic, status_code=201)
async def create_livestock(
    payload: LivestockCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    async with unit_of_work(session):
        animal = Livestock(owner_id=user.id, **payload.model_dump())
        session.add(animal)
        await session.flush()
    return LivestockPublic.model_validate(animal)


@router.get("", response_model=list[LivestockPublic])
async def my_livestock(session: AsyncSession = Depends(get_session), user: User = Depends(get_current_user)):
    rows = (await session.execute(
        select(Livestock).where(Livestock.owner_id == user.id).order_by(Livestock.name.asc())
    )).scalars().all()
    return [LivestockPublic.model_validate(l) for l in rows]


@router.get("/{livestock_id}", response_model=LivestockPublic)
async def get_livestock(livestock_id: UUID, session: AsyncSession = Depends(get_session), _: User = Depends(get_current_user)):
    animal = await session.get(Livestock, livestock_id)
    if not animal:
        raise NotFound("Livestock not found")
    return LivestockPublic.model_validate(animal)
