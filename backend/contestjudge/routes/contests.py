from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from contestjudge.auth_deps import get_current_user, get_optional_user
from contestjudge.db import get_session, unit_of_work
from contestjudge.enums import Capability, ContestRole, ContestStatus
from contestjudge.errors import InvalidStateTransition, NotFound, ValidationError
from contestjudge.models.contest import Category, Contest, ContestUserRole, Criteria
from contestjudge.models.submission import Submission
from contestjudge.models.user import User
from contestjudge.schemas.contest import (
    CategoryCreate, CategoryPublic, ContestCreate, ContestPublic, ContestStats, JudgeAssign, RolePublic, StatusChange,
)
from contestjudge.schemas.criteria import CriteriaCreate, CriteriaPublic, CriteriaUpdate
from contestjudge.services import contest_status, contests
from contestjudge.services.authz import Authorizer, get_authorizer

router = APIRouter(prefix="/contests", tags=["contests"])


@router.post("", response_model=ContestPublic, status_code=201)
async def create_contest(
    payload: ContestCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    if payload.registration_end < payload.registration_start:
        raise ValidationError("registrationEnd must be after registrationStart")
    if payload.contest_end < payload.contest_start:
        raise ValidationError("contestEnd must be after contestStart")
    async with unit_of_work(session):
        ch = Contest(
            name=payload.name,
            description=payload.description,
            type=payload.type,
            status=ContestStatus.DRAFT.value,
            registration_start=payload.registration_start,
            registration_end=payload.registration_end,
            contest_start=payload.contest_start,
            contest_end=payload.contest_end,
            max_participants=payload.max_participants,
            is_public=payload.is_public,
            created_by=user.id,
        )
        session.add(ch)
        await session.flush()
        # Creator administers the contest
        session.add(ContestUserRole(contest_id=ch.id, user_id=user.id, role=ContestRole.CONTEST_ADMINISTRATOR.value))
    await session.refresh(ch)
    return ContestPublic.model_validate(ch)


@router.get("/{contest_id}", response_model=ContestPublic)
async def get_contest(
    contest_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User | None = Depends(get_optional_user),
    authz: Authorizer = Depends(get_authorizer),
):
    ch = await contests.get_contest(session, contest_id)
    if not ch.is_public and (user is None or await authz.role(user.id, ch.id) is None):
        # Private contests stay invisible to outsiders
        raise NotFound("Contest not found")
    return ContestPublic.model_validate(ch)


@router.post("/{contest_id}/status", response_model=ContestPublic)
async def change_status(
    contest_id: UUID,
    payload: StatusChange,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    async with unit_of_work(session):
        ch = await contests.get_contest(session, contest_id, for_update=True)
        contest_status.advance(ch, payload.status)
    return ContestPublic.model_validate(ch)


@router.get("/{contest_id}/stats", response_model=ContestStats)
async def contest_stats(
    contest_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    await contests.get_contest(session, contest_id)
    return await contests.stats(session, contest_id)

# ---------- categories ----------

@router.get("/{contest_id}/categories", response_model=list[CategoryPublic])
async def list_categories(contest_id: UUID, session: AsyncSession = Depends(get_session)):
    await contests.get_contest(session, contest_id)
    rows = (await session.execute(
        select(Category).where(Category.contest_id == contest_id).order_by(Category.order.asc(), Category.name.asc())
    )).scalars().all()
    return [CategoryPublic.model_validate(c) for c in rows]


@router.post("/{contest_id}/categories", response_model=CategoryPublic, status_code=201)
async def create_category(
    contest_id: UUID,
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CATEGORIES)
    async with unit_of_work(session):
        await contests.get_contest(session, contest_id)
        cat = Category(contest_id=contest_id, **payload.model_dump())
        session.add(cat)
        await session.flush()
    return CategoryPublic.model_validate(cat)


@router.put("/{contest_id}/categories/{category_id}", response_model=CategoryPublic)
async def update_category(
    contest_id: UUID,
    category_id: UUID,
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CATEGORIES)
    async with unit_of_work(session):
        cat = await contests.get_category(session, contest_id, category_id)
        for field, value in payload.model_dump().items():
            setattr(cat, field, value)
    return CategoryPublic.model_validate(cat)


@router.delete("/{contest_id}/categories/{category_id}")
async def delete_category(
    contest_id: UUID,
    category_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CATEGORIES)
    async with unit_of_work(session):
        cat = await contests.get_category(session, contest_id, category_id)
        used = await session.scalar(select(func.count()).select_from(Submission).where(Submission.category_id == cat.id))
        if used:
            raise InvalidStateTransition("Cannot delete a category that has submissions")
        for crit in (await session.execute(select(Criteria).where(Criteria.category_id == cat.id))).scalars().all():
            await session.delete(crit)
        await session.flush()
        await session.delete(cat)
    return {"success": True}

# ---------- criteria ----------

@router.get("/{contest_id}/criteria", response_model=list[CriteriaPublic])
async def list_criteria(
    contest_id: UUID,
    category_id: UUID | None = Query(default=None, alias="categoryId"),
    session: AsyncSession = Depends(get_session),
):
    await contests.get_contest(session, contest_id)
    q = select(Criteria)
    if category_id:
        await contests.get_category(session, contest_id, category_id)
        q = q.where(Criteria.category_id == category_id)
    else:
        q = q.where(Criteria.contest_id == contest_id)
    rows = (await session.execute(q.order_by(Criteria.order.asc(), Criteria.name.asc()))).scalars().all()
    return [CriteriaPublic.model_validate(c) for c in rows]


@router.post("/{contest_id}/criteria", response_model=CriteriaPublic, status_code=201)
async def create_criteria(
    contest_id: UUID,
    payload: CriteriaCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    async with unit_of_work(session):
        await contests.get_contest(session, contest_id)
        crit = await contests.apply_criteria(session, contest_id, Criteria(), payload)
        session.add(crit)
        await session.flush()
    return CriteriaPublic.model_validate(crit)


@router.get("/{contest_id}/criteria/{criteria_id}", response_model=CriteriaPublic)
async def get_criteria(contest_id: UUID, criteria_id: UUID, session: AsyncSession = Depends(get_session)):
    return CriteriaPublic.model_validate(await contests.criteria_in_contest(session, contest_id, criteria_id))


@router.put("/{contest_id}/criteria/{criteria_id}", response_model=CriteriaPublic)
async def update_criteria(
    contest_id: UUID,
    criteria_id: UUID,
    payload: CriteriaUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    async with unit_of_work(session):
        crit = await contests.criteria_in_contest(session, contest_id, criteria_id)
        await contests.apply_criteria(session, contest_id, crit, payload)
    return CriteriaPublic.model_validate(crit)


@router.delete("/{contest_id}/criteria/{criteria_id}")
async def delete_criteria(
    contest_id: UUID,
    criteria_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    async with unit_of_work(session):
        crit = await contests.criteria_in_contest(session, contest_id, criteria_id)
        count, _ = await contests.score_stats(session, crit.id)
        if count:
            raise InvalidStateTransition("Cannot delete criteria with scores")
        await session.delete(crit)
    return {"success": True}

# ---------- judges ----------

@router.get("/{contest_id}/judges", response_model=list[RolePublic])
async def list_judges(
    contest_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    rows = (await session.execute(
        select(ContestUserRole, User)
        .join(User, User.id == ContestUserRole.user_id)
        .where(ContestUserRole.contest_id == contest_id, ContestUserRole.role == ContestRole.JUDGE.value)
        .order_by(ContestUserRole.created_at.asc())
    )).all()
    return [
        RolePublic(user_id=u.id, contest_id=r.contest_id, role=r.role, name=u.name, email=u.email)
        for (r, u) in rows
    ]


@router.post("/{contest_id}/judges", response_model=RolePublic, status_code=201)
async def assign_judge(
    contest_id: UUID,
    payload: JudgeAssign,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    async with unit_of_work(session):
        await contests.get_contest(session, contest_id)
        judge = await session.get(User, payload.user_id)
        if not judge:
            raise NotFound("User not found")
        existing = await session.scalar(
            select(ContestUserRole).where(ContestUserRole.contest_id == contest_id, ContestUserRole.user_id == judge.id)
        )
        if existing:
            if existing.role == ContestRole.JUDGE:
                raise InvalidStateTransition("Judge is already assigned to this contest")
            raise ValidationError(f"User already holds role {existing.role} in this contest")
        role = ContestUserRole(contest_id=contest_id, user_id=judge.id, role=ContestRole.JUDGE.value)
        session.add(role)
    return RolePublic(user_id=judge.id, contest_id=contest_id, role=role.role, name=judge.name, email=judge.email)


@router.delete("/{contest_id}/judges/{judge_id}")
async def remove_judge(
    contest_id: UUID,
    judge_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    authz: Authorizer = Depends(get_authorizer),
):
    await authz.require(user.id, contest_id, Capability.MANAGE_CONTEST)
    async with unit_of_work(session):
        role = await session.scalar(
            select(ContestUserRole).where(
                ContestUserRole.contest_id == contest_id,
                ContestUserRole.user_id == judge_id,
                ContestUserRole.role == ContestRole.JUDGE.value,
            )
        )
        if not role:
            raise NotFound("Judge assignment not found")
        await session.delete(role)
    return {"success": True}
