from __future__ import annotations
from datetime import datetime, timezone
import structlog
from contestjudge.enums import ContestStatus
from contestjudge.errors import InvalidStateTransition
from contestjudge.models.contest import Contest

log = structlog.get_logger()

# Forward steps only; COMPLETED is reached through publish_results.
_NEXT: dict[ContestStatus, ContestStatus] = {
    ContestStatus.DRAFT: ContestStatus.REGISTRATION_OPEN,
    ContestStatus.REGISTRATION_OPEN: ContestStatus.REGISTRATION_CLOSED,
    ContestStatus.REGISTRATION_CLOSED: ContestStatus.JUDGING,
    ContestStatus.JUDGING: ContestStatus.COMPLETED,
}

TERMINAL = frozenset({ContestStatus.COMPLETED, ContestStatus.CANCELLED})


def can_accept_submissions(contest: Contest) -> bool:
    return contest.status in (ContestStatus.REGISTRATION_OPEN, ContestStatus.JUDGING)


def can_register(contest: Contest) -> bool:
    return contest.status == ContestStatus.REGISTRATION_OPEN


def can_score(contest: Contest) -> bool:
    return contest.status == ContestStatus.JUDGING


def can_publish_results(contest: Contest) -> bool:
    return contest.status == ContestStatus.JUDGING


def results_are_public(contest: Contest) -> bool:
    return contest.status == ContestStatus.COMPLETED and contest.results_published is not None


def allowed_targets(status: str) -> set[ContestStatus]:
    current = ContestStatus(status)
    if current in TERMINAL:
        return set()
    targets = {ContestStatus.CANCELLED}
    nxt = _NEXT.get(current)
    if nxt is not None:
        targets.add(nxt)
    return targets


def advance(contest: Contest, target: str) -> Contest:
    """
    Move a contest one step along its lifecycle, or cancel it.

    Raises InvalidStateTransition for skips, moves out of a terminal state,
    and for COMPLETED, which only publish_results may set.
    """
    target_status = ContestStatus(target)
    current = ContestStatus(contest.status)
    if target_status == ContestStatus.COMPLETED:
        raise InvalidStateTransition("Contests are completed by publishing results")
    if target_status not in allowed_targets(current):
        raise InvalidStateTransition(f"Cannot move contest from {current.value} to {target_status.value}")
    contest.status = target_status.value
    log.info("contest_status_changed", contest_id=str(contest.id), from_status=current.value, to_status=target_status.value)
    return contest


def publish_results(contest: Contest, now: datetime | None = None) -> Contest:
    """
    One-way JUDGING -> COMPLETED transition that stamps results_published.
    Re-publishing is rejected rather than re-stamping the timestamp.
    """
    if not can_publish_results(contest):
        raise InvalidStateTransition(f"Results can only be published while JUDGING (status={contest.status})")
    contest.status = ContestStatus.COMPLETED.value
    contest.results_published = now or datetime.now(timezone.utc)
    log.info("results_published", contest_id=str(contest.id), results_published=contest.results_published.isoformat())
    return contest
