"""Shared API flows: open a contest, enter submissions, move to judging."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone


def _now():
    return datetime.now(timezone.utc)


def contest_payload(name="Feria Ganadera"):
    return {
        "name": name,
        "type": "LIVESTOCK",
        "registrationStart": _now().isoformat(),
        "registrationEnd": (_now() + timedelta(days=7)).isoformat(),
        "contestStart": (_now() + timedelta(days=8)).isoformat(),
        "contestEnd": (_now() + timedelta(days=9)).isoformat(),
    }


@dataclass
class Ctx:
    cid: str
    category: str
    admin: dict
    judge: dict
    criteria: list[str] = field(default_factory=list)


async def open_contest(client, make_user, weights=(2.0, 1.0)) -> Ctx:
    _, admin = await make_user("admin")
    r = await client.post("/contests", headers=admin, json=contest_payload())
    assert r.status_code == 201, r.text
    cid = r.json()["id"]
    r = await client.post(f"/contests/{cid}/categories", headers=admin, json={"name": "Heifers"})
    assert r.status_code == 201, r.text
    ctx = Ctx(cid=cid, category=r.json()["id"], admin=admin, judge={})
    for i, w in enumerate(weights):
        r = await client.post(f"/contests/{cid}/criteria", headers=admin,
                              json={"name": f"Criterion {i}", "weight": w, "maxScore": 100, "order": i})
        assert r.status_code == 201, r.text
        ctx.criteria.append(r.json()["id"])
    judge_id, ctx.judge = await make_user("judge")
    r = await client.post(f"/contests/{cid}/judges", headers=admin, json={"userId": judge_id})
    assert r.status_code == 201, r.text
    r = await client.post(f"/contests/{cid}/status", headers=admin, json={"status": "REGISTRATION_OPEN"})
    assert r.status_code == 200, r.text
    return ctx


async def enter_submission(client, make_user, ctx: Ctx, title: str, submit: bool = True) -> tuple[str, dict]:
    _, hdrs = await make_user(title)
    r = await client.post(f"/contests/{ctx.cid}/participations", headers=hdrs)
    assert r.status_code == 201, r.text
    pid = r.json()["id"]
    r = await client.patch(f"/contests/{ctx.cid}/participations/{pid}", headers=ctx.admin, json={"status": "APPROVED"})
    assert r.status_code == 200, r.text
    assert r.json()["approvedAt"] is not None
    r = await client.post(f"/contests/{ctx.cid}/submissions", headers=hdrs, json={
        "title": title, "categoryId": ctx.category, "metadata": {"breed": "Holstein", "age": 18},
    })
    assert r.status_code == 201, r.text
    sid = r.json()["id"]
    assert r.json()["status"] == "DRAFT"
    if submit:
        r = await client.patch(f"/contests/{ctx.cid}/submissions/{sid}", headers=hdrs, json={"status": "SUBMITTED"})
        assert r.status_code == 200, r.text
        assert r.json()["submittedAt"] is not None
    return sid, hdrs


async def start_judging(client, ctx: Ctx):
    for status in ("REGISTRATION_CLOSED", "JUDGING"):
        r = await client.post(f"/contests/{ctx.cid}/status", headers=ctx.admin, json={"status": status})
        assert r.status_code == 200, r.text


async def post_score(client, ctx: Ctx, sid: str, criteria_id: str, score, headers=None):
    return await client.post(
        f"/contests/{ctx.cid}/submissions/{sid}/scores",
        headers=headers or ctx.judge,
        json={"criteriaId": criteria_id, "score": score},
    )


