import pytest
from flows import contest_payload, enter_submission, open_contest, post_score, start_judging


@pytest.mark.asyncio
async def test_create_contest_requires_token(client):
    r = await client.post("/contests", json=contest_payload())
    assert r.status_code == 401
    assert r.json()["error"] == "Unauthorized"
    r = await client.post("/contests", json=contest_payload(), headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_invalid_payload_is_validation_error(client, make_user):
    _, hdrs = await make_user("admin")
    payload = contest_payload()
    payload["type"] = "POULTRY"
    r = await client.post("/contests", headers=hdrs, json=payload)
    assert r.status_code == 422
    assert r.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_private_contest_hidden_from_outsiders(client, make_user):
    _, admin = await make_user("admin")
    _, outsider = await make_user("outsider")
    r = await client.post("/contests", headers=admin, json={**contest_payload(), "isPublic": False})
    cid = r.json()["id"]
    assert (await client.get(f"/contests/{cid}", headers=admin)).status_code == 200
    assert (await client.get(f"/contests/{cid}", headers=outsider)).status_code == 404
    assert (await client.get(f"/contests/{cid}")).status_code == 404


@pytest.mark.asyncio
async def test_criteria_weight_bounds_and_defaults(client, make_user):
    ctx = await open_contest(client, make_user, weights=())
    url = f"/contests/{ctx.cid}/criteria"
    r = await client.post(url, headers=ctx.admin, json={"name": "Type"})
    assert r.status_code == 201
    assert r.json()["weight"] == 1.0
    assert r.json()["maxScore"] == 100
    assert r.json()["scope"] == {"kind": "contest", "contestId": ctx.cid}
    for weight in (0.05, 11):
        r = await client.post(url, headers=ctx.admin, json={"name": "Bad", "weight": weight})
        assert r.status_code == 422, r.text
    r = await client.post(url, headers=ctx.judge, json={"name": "Nope"})
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_scored_criteria_cannot_be_deleted_or_shrunk(client, make_user):
    ctx = await open_contest(client, make_user)
    sid, _ = await enter_submission(client, make_user, ctx, "Nube")
    await start_judging(client, ctx)
    await post_score(client, ctx, sid, ctx.criteria[0], 90)

    url = f"/contests/{ctx.cid}/criteria/{ctx.criteria[0]}"
    assert (await client.delete(url, headers=ctx.admin)).status_code == 409
    r = await client.put(url, headers=ctx.admin, json={"name": "Criterion 0", "weight": 2.0, "maxScore": 50})
    assert r.status_code == 409
    r = await client.put(url, headers=ctx.admin, json={"name": "Renamed", "weight": 3.0, "maxScore": 100})
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"


@pytest.mark.asyncio
async def test_judge_assignment_conflicts(client, make_user):
    ctx = await open_contest(client, make_user)
    r = await client.get(f"/contests/{ctx.cid}/judges", headers=ctx.admin)
    [judge] = r.json()
    r = await client.post(f"/contests/{ctx.cid}/judges", headers=ctx.admin, json={"userId": judge["userId"]})
    assert r.status_code == 409
    r = await client.delete(f"/contests/{ctx.cid}/judges/{judge['userId']}", headers=ctx.admin)
    assert r.status_code == 200
    assert (await client.get(f"/contests/{ctx.cid}/judges", headers=ctx.admin)).json() == []


@pytest.mark.asyncio
async def test_participation_lifecycle(client, make_user):
    ctx = await open_contest(client, make_user)
    _, hdrs = await make_user("rancher")
    url = f"/contests/{ctx.cid}/participations"
    r = await client.post(url, headers=hdrs, json={"notes": "Two heifers"})
    assert r.status_code == 201
    pid = r.json()["id"]
    assert r.json()["status"] == "PENDING"
    assert (await client.post(url, headers=hdrs)).status_code == 409

    # Pending participants cannot submit yet
    r = await client.post(f"/contests/{ctx.cid}/submissions", headers=hdrs,
                          json={"title": "Early", "categoryId": ctx.category})
    assert r.status_code == 409
    # Only admins approve
    r = await client.patch(f"{url}/{pid}", headers=hdrs, json={"status": "APPROVED"})
    assert r.status_code == 403

    r = await client.patch(f"{url}/{pid}", headers=hdrs, json={"status": "WITHDRAWN"})
    assert r.status_code == 200
    r = await client.post(url, headers=hdrs)
    assert r.status_code == 201
    assert r.json()["id"] == pid
    assert r.json()["status"] == "PENDING"

    r = await client.patch(f"{url}/{pid}", headers=ctx.admin, json={"status": "REJECTED"})
    assert r.json()["approvedAt"] is None
    mine = (await client.get(url, headers=hdrs)).json()
    assert [p["id"] for p in mine] == [pid]


@pytest.mark.asyncio
async def test_registration_limits(client, make_user):
    _, admin = await make_user("admin")
    r = await client.post("/contests", headers=admin, json={**contest_payload(), "maxParticipants": 1})
    cid = r.json()["id"]
    _, first = await make_user("first")
    assert (await client.post(f"/contests/{cid}/participations", headers=first)).status_code == 409  # still DRAFT
    await client.post(f"/contests/{cid}/status", headers=admin, json={"status": "REGISTRATION_OPEN"})
    assert (await client.post(f"/contests/{cid}/participations", headers=first)).status_code == 201
    _, second = await make_user("second")
    r = await client.post(f"/contests/{cid}/participations", headers=second)
    assert r.status_code == 409
    assert "limit" in r.json()["detail"]


@pytest.mark.asyncio
async def test_submission_rules(client, make_user):
    ctx = await open_contest(client, make_user)
    r = await client.post(f"/contests/{ctx.cid}/categories", headers=ctx.admin,
                          json={"name": "Calves", "ageMax": 6, "maxEntries": 1})
    calves = r.json()["id"]
    sid, owner = await enter_submission(client, make_user, ctx, "Tiny", submit=False)

    base = f"/contests/{ctx.cid}/submissions"
    r = await client.patch(f"{base}/{sid}", headers=owner, json={"categoryId": calves})
    assert r.status_code == 422  # age 18 exceeds the calves limit
    r = await client.patch(f"{base}/{sid}", headers=owner,
                           json={"categoryId": calves, "metadata": {"age": 4}})
    assert r.status_code == 200, r.text
    r = await client.post(base, headers=owner, json={"title": "Second", "categoryId": calves, "metadata": {"age": 3}})
    assert r.status_code == 422  # one entry per participant
    r = await client.post(base, headers=owner, json={"title": "Wrong kind", "categoryId": ctx.category,
                                                      "metadata": {"kind": "COFFEE_PRODUCTS"}})
    assert r.status_code == 422

    r = await client.patch(f"{base}/{sid}", headers=owner, json={"status": "SUBMITTED"})
    assert r.status_code == 200
    r = await client.patch(f"{base}/{sid}", headers=owner, json={"title": "Renamed"})
    assert r.status_code == 409
    r = await client.patch(f"{base}/{sid}", headers=owner, json={"status": "JUDGED"})
    assert r.status_code == 403
    r = await client.patch(f"{base}/{sid}", headers=ctx.admin, json={"status": "DISQUALIFIED"})
    assert r.json()["status"] == "DISQUALIFIED"

    _, stranger = await make_user("stranger")
    assert (await client.get(f"{base}/{sid}", headers=stranger)).status_code == 403
    page = (await client.get(base, headers=ctx.judge, params={"status": "DISQUALIFIED"})).json()
    assert page["total"] == 1
    assert page["submissions"][0]["id"] == sid


@pytest.mark.asyncio
async def test_stats(client, make_user):
    ctx = await open_contest(client, make_user)
    await enter_submission(client, make_user, ctx, "One")
    await enter_submission(client, make_user, ctx, "Two", submit=False)
    r = await client.get(f"/contests/{ctx.cid}/stats", headers=ctx.admin)
    assert r.status_code == 200
    stats = r.json()
    assert stats["totalParticipants"] == 2
    assert stats["totalSubmissions"] == 2
    assert stats["totalJudges"] == 1
    assert stats["submissionsByStatus"] == {"SUBMITTED": 1, "DRAFT": 1}
    assert stats["participationsByStatus"] == {"APPROVED": 2}
    assert (await client.get(f"/contests/{ctx.cid}/stats", headers=ctx.judge)).status_code == 403
