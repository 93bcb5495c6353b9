import uuid
import pytest
from contestjudge.errors import Forbidden, InvalidStateTransition
from contestjudge.models.submission import Submission
from contestjudge.services import submission_state


def _sub(status="DRAFT") -> Submission:
    return Submission(id=uuid.uuid4(), title="Holstein #12", status=status)


def test_owner_submits_draft_and_stamp_is_kept():
    s = _sub()
    submission_state.transition(s, "SUBMITTED", is_owner=True, is_admin=False)
    assert s.status == "SUBMITTED"
    stamped = s.submitted_at
    assert stamped is not None
    submission_state.transition(s, "UNDER_REVIEW", is_owner=False, is_admin=True)
    assert s.submitted_at == stamped


def test_stranger_cannot_submit():
    with pytest.raises(Forbidden):
        submission_state.transition(_sub(), "SUBMITTED", is_owner=False, is_admin=False)


def test_owner_needs_admin_for_elevated_moves():
    s = _sub("SUBMITTED")
    with pytest.raises(Forbidden):
        submission_state.transition(s, "JUDGED", is_owner=True, is_admin=False)
    assert s.status == "SUBMITTED"


@pytest.mark.parametrize("start,target", [
    ("DRAFT", "JUDGED"),
    ("DRAFT", "UNDER_REVIEW"),
    ("SUBMITTED", "DRAFT"),
    ("JUDGED", "SUBMITTED"),
    ("DISQUALIFIED", "SUBMITTED"),
    ("DISQUALIFIED", "JUDGED"),
])
def test_illegal_moves(start, target):
    s = _sub(start)
    with pytest.raises(InvalidStateTransition):
        submission_state.transition(s, target, is_owner=True, is_admin=True)
    assert s.status == start


def test_same_status_is_noop():
    s = _sub("UNDER_REVIEW")
    submission_state.transition(s, "UNDER_REVIEW", is_owner=False, is_admin=False)
    assert s.status == "UNDER_REVIEW"


def test_mark_judged_only_from_review_states():
    assert submission_state.mark_judged(_sub("SUBMITTED"))
    assert submission_state.mark_judged(_sub("UNDER_REVIEW"))
    assert not submission_state.mark_judged(_sub("DRAFT"))
    judged = _sub("JUDGED")
    assert not submission_state.mark_judged(judged)
    assert judged.status == "JUDGED"


def test_judgeable_statuses():
    assert not submission_state.is_judgeable(_sub("DRAFT"))
    assert not submission_state.is_judgeable(_sub("DISQUALIFIED"))
    assert submission_state.is_judgeable(_sub("JUDGED"))


def test_admin_can_disqualify_judged_entry():
    s = _sub("JUDGED")
    with pytest.raises(Forbidden):
        submission_state.transition(s, "DISQUALIFIED", is_owner=True, is_admin=False)
    submission_state.transition(s, "DISQUALIFIED", is_owner=False, is_admin=True)
    assert s.status == "DISQUALIFIED"
    assert not submission_state.is_judgeable(s)
