from datetime import datetime, timezone
import pytest
from contestjudge.enums import ContestStatus as CS
from contestjudge.errors import InvalidStateTransition
from contestjudge.models.contest import Contest
from contestjudge.services import contest_status


def _contest(status: CS) -> Contest:
    return Contest(name="Feria", type="LIVESTOCK", status=status.value)


@pytest.mark.parametrize("status,accepts,registers,scores,publishes", [
    (CS.DRAFT, False, False, False, False),
    (CS.REGISTRATION_OPEN, True, True, False, False),
    (CS.REGISTRATION_CLOSED, False, False, False, False),
    (CS.JUDGING, True, False, True, True),
    (CS.COMPLETED, False, False, False, False),
    (CS.CANCELLED, False, False, False, False),
])
def test_gates(status, accepts, registers, scores, publishes):
    c = _contest(status)
    assert contest_status.can_accept_submissions(c) is accepts
    assert contest_status.can_register(c) is registers
    assert contest_status.can_score(c) is scores
    assert contest_status.can_publish_results(c) is publishes


def test_advance_walks_lifecycle():
    c = _contest(CS.DRAFT)
    for target in (CS.REGISTRATION_OPEN, CS.REGISTRATION_CLOSED, CS.JUDGING):
        contest_status.advance(c, target.value)
        assert c.status == target.value


def test_advance_rejects_skip_and_completed():
    c = _contest(CS.DRAFT)
    with pytest.raises(InvalidStateTransition):
        contest_status.advance(c, "JUDGING")
    judging = _contest(CS.JUDGING)
    with pytest.raises(InvalidStateTransition):
        contest_status.advance(judging, "COMPLETED")
    assert judging.status == "JUDGING"


def test_cancel_from_any_open_state_but_not_terminal():
    c = _contest(CS.REGISTRATION_CLOSED)
    contest_status.advance(c, "CANCELLED")
    assert c.status == "CANCELLED"
    with pytest.raises(InvalidStateTransition):
        contest_status.advance(c, "REGISTRATION_OPEN")


def test_publish_results_stamps_and_completes():
    c = _contest(CS.JUDGING)
    at = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    contest_status.publish_results(c, now=at)
    assert c.status == "COMPLETED"
    assert c.results_published == at
    assert contest_status.results_are_public(c)


@pytest.mark.parametrize("status", [CS.DRAFT, CS.REGISTRATION_OPEN, CS.REGISTRATION_CLOSED, CS.CANCELLED])
def test_publish_outside_judging_leaves_contest_untouched(status):
    c = _contest(status)
    with pytest.raises(InvalidStateTransition):
        contest_status.publish_results(c)
    assert c.status == status.value
    assert c.results_published is None


def test_republish_rejected():
    c = _contest(CS.JUDGING)
    contest_status.publish_results(c)
    first = c.results_published
    with pytest.raises(InvalidStateTransition):
        contest_status.publish_results(c)
    assert c.results_published == first
