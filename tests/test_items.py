import pytest

from conftest import error_code

ITEM = {"type": "ACTIVITY", "title": "Tram 28", "timezone": "Europe/Lisbon"}


@pytest.fixture
def trip_with_team(api):
    owner = api.register("owner@test.com")
    editor = api.register("editor@test.com")
    viewer = api.register("viewer@test.com")
    trip = api.create_trip(owner)
    api.add_member(owner, trip["id"], editor, "EDITOR")
    api.add_member(owner, trip["id"], viewer, "VIEWER")
    return trip, owner, editor, viewer


def _create(client, api, user, trip_id, **overrides):
    return client.post(f"/trips/{trip_id}/items", json={**ITEM, **overrides}, headers=api.auth(user))


def test_editor_creates_item(api, client, trip_with_team):
    trip, _, editor, _ = trip_with_team
    r = _create(
        client, api, editor, trip["id"],
        start_at="2030-05-02T09:00:00Z", end_at="2030-05-02T10:00:00Z", cost_cents=300, currency="EUR",
    )
    assert r.status_code == 201
    item = r.json()
    assert item["created_by"] == editor["id"]
    assert item["votes_count"] == 0
    assert item["start_at"] == "2030-05-02T09:00:00Z"


def test_viewer_cannot_create_item(api, client, trip_with_team):
    trip, _, _, viewer = trip_with_team
    r = _create(client, api, viewer, trip["id"])
    assert r.status_code == 403
    assert error_code(r) == "TRIP_FORBIDDEN"


def test_item_dates_are_validated(api, client, trip_with_team):
    trip, owner, _, _ = trip_with_team

    r = _create(client, api, owner, trip["id"], start_at="2030-05-02T10:00:00Z", end_at="2030-05-02T09:00:00Z")
    assert r.status_code == 400
    r = _create(client, api, owner, trip["id"], start_at="2031-01-01T10:00:00Z")
    assert r.status_code == 400
    assert "trip_start" in r.json()["error"]["details"]


def test_non_member_cannot_read_items(api, client, trip_with_team):
    trip, owner, _, _ = trip_with_team
    stranger = api.register("stranger@test.com")
    item = _create(client, api, owner, trip["id"]).json()

    r = client.get(f"/trips/{trip['id']}/items", headers=api.auth(stranger))
    assert r.status_code == 403
    r = client.get(f"/trips/{trip['id']}/items/{item['id']}", headers=api.auth(stranger))
    assert r.status_code == 403
    assert error_code(r) == "TRIP_FORBIDDEN"


def test_list_items_filters_and_sorts_by_votes(api, client, trip_with_team):
    trip, owner, editor, viewer = trip_with_team
    a = _create(client, api, owner, trip["id"], title="A",
                start_at="2030-05-02T09:00:00Z", end_at="2030-05-02T10:00:00Z").json()
    b = _create(client, api, owner, trip["id"], title="B",
                start_at="2030-05-03T09:00:00Z", end_at="2030-05-03T10:00:00Z").json()
    for user in (editor, viewer):
        client.post(f"/trips/{trip['id']}/items/{b['id']}/votes", headers=api.auth(user))

    r = client.get(
        f"/trips/{trip['id']}/items", params={"sort_field": "votes", "sort_dir": "desc"}, headers=api.auth(viewer)
    )
    assert r.status_code == 200
    assert [(i["title"], i["votes_count"]) for i in r.json()["data"]] == [("B", 2), ("A", 0)]

    r = client.get(f"/trips/{trip['id']}/items", params={"date": "2030-05-02"}, headers=api.auth(viewer))
    assert [i["id"] for i in r.json()["data"]] == [a["id"]]
    assert r.json()["pagination"]["total"] == 1


@pytest.mark.parametrize("day", ["2030-13-45", "2030-02-30", "2030-5-1"])
def test_list_items_rejects_impossible_day(api, client, trip_with_team, day):
    trip, owner, _, _ = trip_with_team

    r = client.get(f"/trips/{trip['id']}/items", params={"date": day}, headers=api.auth(owner))
    assert r.status_code == 400
    assert error_code(r) == "VALIDATION_ERROR"
    assert r.json()["error"]["details"][0]["field"] == "date"


def test_item_edit_rules(api, client, trip_with_team):
    trip, owner, editor, viewer = trip_with_team
    item = _create(client, api, owner, trip["id"]).json()
    url = f"/trips/{trip['id']}/items/{item['id']}"

    r = client.patch(url, json={"title": "Tram 28 (early)"}, headers=api.auth(viewer))
    assert r.status_code == 403
    assert error_code(r) == "ITEM_FORBIDDEN"

    r = client.patch(url, json={"title": "Tram 28 (early)"}, headers=api.auth(editor))
    assert r.status_code == 200
    assert r.json()["title"] == "Tram 28 (early)"

    r = client.patch(f"/trips/{trip['id']}/items/999", json={"title": "x"}, headers=api.auth(editor))
    assert r.status_code == 404
    assert error_code(r) == "ITEM_NOT_FOUND"


def test_author_keeps_edit_rights_after_demotion(api, client, trip_with_team):
    trip, owner, editor, _ = trip_with_team
    item = _create(client, api, editor, trip["id"]).json()
    client.patch(f"/trips/{trip['id']}/members/{editor['id']}", json={"role": "VIEWER"}, headers=api.auth(owner))

    url = f"/trips/{trip['id']}/items/{item['id']}"
    assert client.patch(url, json={"notes": "bring coins"}, headers=api.auth(editor)).status_code == 200
    assert client.delete(url, headers=api.auth(editor)).status_code == 204
    assert client.get(url, headers=api.auth(owner)).status_code == 404


def test_votes(api, client, trip_with_team):
    trip, owner, _, viewer = trip_with_team
    item = _create(client, api, owner, trip["id"]).json()
    url = f"/trips/{trip['id']}/items/{item['id']}/votes"

    r = client.post(url, headers=api.auth(viewer))
    assert r.status_code == 201
    assert r.json() == {"item_id": item["id"], "votes_count": 1}

    r = client.post(url, headers=api.auth(viewer))
    assert r.status_code == 409
    assert error_code(r) == "VOTE_CONFLICT"

    assert client.delete(url, headers=api.auth(viewer)).status_code == 204
    r = client.delete(url, headers=api.auth(viewer))
    assert r.status_code == 404
    assert error_code(r) == "VOTE_NOT_FOUND"


def test_stranger_cannot_vote(api, client, trip_with_team):
    trip, owner, _, _ = trip_with_team
    stranger = api.register("stranger@test.com")
    item = _create(client, api, owner, trip["id"]).json()

    r = client.post(f"/trips/{trip['id']}/items/{item['id']}/votes", headers=api.auth(stranger))
    assert r.status_code == 403
