from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.auth_deps import get_current_user
from contestjudge.db import get_session, unit_of_work
from contestjudge.enums import Capability
from contestjudge.errors import Forbidden, InvalidStateTransition
from contestjudge.models.participation import Participation
from contestjudge.models.submission import Submission, SubmissionMedia
from contestjudge.models.user import User
from contestjudge.schemas.submission import (
    MediaCreate, MediaPublic, SubmissionCreate, SubmissionPage, SubmissionPublic, SubmissionStatusName, SubmissionUpdate,
)
from contestjudge.services import contests, submission_state, submissions
from contestjudge.services.authz import Authorizer, get_authorizer

router = APIRouter(prefix="/contests/{contest_id}/submissions", tags=["submissions"])


async def _access(authz: Authorizer, session: AsyncSession, user: User, sub: Submission) -> tuple[bool, bool]:
    """Returns (is_owner, is_admin); raises Forbidden when the caller may not see the entry."""
    is_owner = await submissions.owner_id(session, sub) == user.id
    is_admin = await authz.can(user.id, sub.contest_id, Capability.MANAGE_SUBMISSIONS)
    if not (is_owner or is_admin or await authz.can(user.id, sub.contest_id, Capability.JUDGE)):
        raise Forbidden("Forbidden")
    return is_owner, is_admin


@router.post("", response_model=SubmissionPublic, status_code=201)
async def create_submission(
    contest_id: UUID,
    payload: SubmissionCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    async with unit_of_work(session):
        ch = await contests.get_contest(session, contest_id)
        sub = await submissions.create(session, ch, user.id, payload)
    return submissions.to_public(sub)


@router.get("", response_model=SubmissionPage)
async def list_submissions(
    contest_id: UUID,
    status: SubmissionStatusName | None = None,
    category_id: UUID | None = Query(default=None, alias="categoryId"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await contests.get_contest(session, contest_id)
    q = select(Submission).where(Submission.contest_id == contest_id)
    sees_all = (
        await authz.can(user.id, contest_id, Capability.MANAGE_SUBMISSIONS)
        or await authz.can(user.id, contest_id, Capability.JUDGE)
    )
    if not sees_all:
        q = q.join(Participation, Participation.id == Submission.participation_id).where(Participation.user_id == user.id)
    if status:
        q = q.where(Submission.status == status)
    if category_id:
        q = q.where(Submission.category_id == category_id)

    total = await session.scalar(select(func.count()).select_from(q.subquery())) or 0
    rows = (await session.execute(
        q.order_by(Submission.created_at.desc(), Submission.id.asc()).offset((page - 1) * page_size).limit(page_size)
    )).scalars().all()
    return SubmissionPage(
        submissions=[submissions.to_public(s) for s in rows],
        total=int(total),
        page=page,
        page_size=page_size,
    )


@router.get("/{submission_id}", response_model=SubmissionPublic)
async def get_submission(
    contest_id: UUID,
    submission_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    sub = await submissions.get_in_contest(session, contest_id, submission_id)
    await _access(authz, session, user, sub)
    return submissions.to_public(sub)


@router.api_route("/{submission_id}", methods=["PUT", "PATCH"], response_model=SubmissionPublic)
async def update_submission(
    contest_id: UUID,
    submission_id: UUID,
    payload: SubmissionUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    async with unit_of_work(session):
        ch = await contests.get_contest(session, contest_id)
        sub = await submissions.get_in_contest(session, contest_id, submission_id, for_update=True)
        is_owner, is_admin = await _access(authz, session, user, sub)
        await submissions.update(session, ch, sub, payload, is_owner=is_owner, is_admin=is_admin)
    return submissions.to_public(sub)


@router.delete("/{submission_id}")
async def delete_submission(
    contest_id: UUID,
    submission_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    async with unit_of_work(session):
        sub = await submissions.get_in_contest(session, contest_id, submission_id, for_update=True)
        is_owner, is_admin = await _access(authz, session, user, sub)
        await submissions.remove(session, sub, is_owner=is_owner, is_admin=is_admin)
    return {"success": True}

# ---------- media ----------

@router.get("/{submission_id}/media", response_model=list[MediaPublic])
async def list_media(
    contest_id: UUID,
    submission_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    sub = await submissions.get_in_contest(session, contest_id, submission_id)
    await _access(authz, session, user, sub)
    rows = (await session.execute(
        select(SubmissionMedia).where(SubmissionMedia.submission_id == sub.id)
        .order_by(SubmissionMedia.is_primary.desc(), SubmissionMedia.created_at.asc())
    )).scalars().all()
    return [MediaPublic.model_validate(m) for m in rows]


@router.post("/{submission_id}/media", response_model=MediaPublic, status_code=201)
async def add_media(
    contest_id: UUID,
    submission_id: UUID,
    payload: MediaCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    async with unit_of_work(session):
        sub = await submissions.get_in_contest(session, contest_id, submission_id, for_update=True)
        is_owner, is_admin = await _access(authz, session, user, sub)
        if not is_admin:
            if not is_owner:
                raise Forbidden("Forbidden")
            if not submission_state.can_owner_edit(sub):
                raise InvalidStateTransition("Media can only be added while the submission is a draft")
        m = await submissions.add_media(
            session, sub, url=payload.url, mime_type=payload.mime_type, caption=payload.caption, is_primary=payload.is_primary,
        )
    return MediaPublic.model_validate(m)
