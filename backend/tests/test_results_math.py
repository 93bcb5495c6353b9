import uuid
from datetime import datetime, timedelta, timezone
from contestjudge.models.contest import Criteria
from contestjudge.schemas.results import SubmissionResult
from contestjudge.services.results import criteria_breakdown, rank, weighted_total
from contestjudge.services.scoring import is_complete


def _crit(name, weight, order=0):
    return Criteria(id=uuid.uuid4(), name=name, weight=weight, max_score=100, order=order)


def _result(total):
    return SubmissionResult(
        submission_id=uuid.uuid4(), title="x", participant_id=uuid.uuid4(), participant_name="p",
        criteria_scores=[], total_score=total,
    )


def test_weighted_average_across_judges():
    conformation = _crit("Conformation", 2.0, order=1)
    condition = _crit("Condition", 1.0, order=2)
    breakdown = criteria_breakdown([
        (conformation, 80), (conformation, 60),  # two judges -> 70
        (condition, 70),
    ])
    assert [c.criteria_name for c in breakdown] == ["Conformation", "Condition"]
    assert breakdown[0].average == 70.0
    assert breakdown[0].scores == [80.0, 60.0]
    assert weighted_total(breakdown) == 70.0


def test_unscored_and_zero_scores_total_zero():
    assert weighted_total([]) == 0.0
    zero = criteria_breakdown([(_crit("Aroma", 1.0), 0)])
    assert weighted_total(zero) == 0.0


def test_rank_breaks_ties_by_creation_time():
    now = datetime.now(timezone.utc)
    early, late, best = _result(50.0), _result(50.0), _result(90.0)
    ordered = rank([(late, now), (best, now + timedelta(hours=1)), (early, now - timedelta(hours=1))])
    assert ordered == [best, early, late]


def test_rank_accepts_naive_timestamps():
    now = datetime.now(timezone.utc)
    a, b = _result(10.0), _result(10.0)
    ordered = rank([(b, now.replace(tzinfo=None) + timedelta(minutes=1)), (a, now)])
    assert ordered == [a, b]


def test_is_complete():
    j1, j2, c1, c2 = (uuid.uuid4() for _ in range(4))
    assert is_complete([c1, c2], {(j1, c1), (j1, c2)}, [j1])
    assert not is_complete([c1, c2], {(j1, c1)}, [j1])
    assert not is_complete([c1, c2], {(j1, c1), (j1, c2)}, [j1, j2])
    assert not is_complete([], set(), [j1])


def test_weighted_total_over_judge_averages():
    a = _crit("Type", 2.0, order=0)
    b = Criteria(id=uuid.uuid4(), name="Finish", weight=1.0, max_score=50, order=1)
    breakdown = criteria_breakdown([(a, 80), (a, 90), (b, 40)])
    assert [c.average for c in breakdown] == [85.0, 40.0]
    assert weighted_total(breakdown) == 70.0
