from __future__ import annotations
from uuid import UUID
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from contestjudge.db import get_session
from contestjudge.enums import Capability as C, ContestRole
from contestjudge.errors import Forbidden
from contestjudge.models.contest import ContestUserRole

# Everyone, including anonymous viewers, may read published results.
_BASE = frozenset({C.VIEW_RESULTS})

ROLE_CAPABILITIES: dict[ContestRole, frozenset[C]] = {
    ContestRole.CONTEST_ADMINISTRATOR: _BASE | {
        C.MANAGE_CONTEST, C.MANAGE_USERS, C.MANAGE_CATEGORIES, C.MANAGE_SUBMISSIONS,
    },
    ContestRole.JUDGE: _BASE | {C.JUDGE},
    ContestRole.PARTICIPANT: _BASE | {C.PARTICIPATE},
    ContestRole.PUBLIC_VIEWER: _BASE,
}


def capabilities_for(role: str | None) -> frozenset[C]:
    if role is None:
        return _BASE
    return ROLE_CAPABILITIES.get(ContestRole(role), _BASE)


class Authorizer:
    """Single place that answers "may this user do X in this contest"."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._roles: dict[tuple[UUID, UUID], str | None] = {}

    async def role(self, user_id: UUID, contest_id: UUID) -> str | None:
        key = (user_id, contest_id)
        if key not in self._roles:
            self._roles[key] = await self.session.scalar(
                select(ContestUserRole.role).where(
                    ContestUserRole.user_id == user_id,
                    ContestUserRole.contest_id == contest_id,
                )
            )
        return self._roles[key]

    async def can(self, user_id: UUID | None, contest_id: UUID, capability: C) -> bool:
        if user_id is None:
            return capability in _BASE
        return capability in capabilities_for(await self.role(user_id, contest_id))

    async def require(self, user_id: UUID | None, contest_id: UUID, capability: C) -> None:
        if not await self.can(user_id, contest_id, capability):
            raise Forbidden(f"Missing {capability.value} permission for this contest")


def get_authorizer(session: AsyncSession = Depends(get_session)) -> Authorizer:
    return Authorizer(session)
