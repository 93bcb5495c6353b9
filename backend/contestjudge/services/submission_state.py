from __future__ import annotations
from datetime import datetime, timezone
import structlog
from contestjudge.enums import SubmissionStatus as S
from contestjudge.errors import Forbidden, InvalidStateTransition
from contestjudge.models.submission import Submission

log = structlog.get_logger()

JUDGEABLE = frozenset({S.SUBMITTED, S.UNDER_REVIEW, S.JUDGED})

# (from, to) -> needs elevated permission
_TRANSITIONS: dict[tuple[S, S], bool] = {
    (S.DRAFT, S.SUBMITTED): False,
    (S.SUBMITTED, S.UNDER_REVIEW): True,
    (S.SUBMITTED, S.JUDGED): True,
    (S.UNDER_REVIEW, S.JUDGED): True,
    (S.DRAFT, S.DISQUALIFIED): True,
    (S.SUBMITTED, S.DISQUALIFIED): True,
    (S.UNDER_REVIEW, S.DISQUALIFIED): True,
    (S.JUDGED, S.DISQUALIFIED): True,
}


def is_judgeable(submission: Submission) -> bool:
    return S(submission.status) in JUDGEABLE


def can_owner_edit(submission: Submission) -> bool:
    return submission.status == S.DRAFT


def transition(submission: Submission, target: str, *, is_owner: bool, is_admin: bool,
               now: datetime | None = None) -> Submission:
    """
    Apply a manual status change.

    Owners may only submit their own draft; every other move needs
    submission-management permission. submitted_at is stamped on the first
    move into SUBMITTED and never overwritten.
    """
    current, target_status = S(submission.status), S(target)
    if current == target_status:
        return submission
    key = (current, target_status)
    if key not in _TRANSITIONS:
        raise InvalidStateTransition(f"Cannot move submission from {current.value} to {target_status.value}")
    elevated = _TRANSITIONS[key]
    if elevated and not is_admin:
        raise Forbidden("You do not have permission to change to this status")
    if not elevated and not (is_owner or is_admin):
        raise Forbidden("Only the owner can submit this entry")
    _apply(submission, target_status, now)
    return submission


def mark_judged(submission: Submission) -> bool:
    """Automatic move driven by scoring. Returns True when the status changed."""
    if submission.status not in (S.SUBMITTED, S.UNDER_REVIEW):
        return False
    _apply(submission, S.JUDGED, None)
    return True


def _apply(submission: Submission, target: S, now: datetime | None) -> None:
    previous = submission.status
    submission.status = target.value
    if target == S.SUBMITTED and submission.submitted_at is None:
        submission.submitted_at = now or datetime.now(timezone.utc)
    log.info("submission_status_changed", submission_id=str(submission.id), from_status=previous, to_status=target.value)
