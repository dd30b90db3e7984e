from conftest import error_code


def _members(client, api, user, trip_id):
    return client.get(f"/trips/{trip_id}/members", headers=api.auth(user))


def test_viewer_cannot_list_members(api, client):
    owner = api.register("owner@test.com")
    viewer = api.register("viewer@test.com")
    editor = api.register("editor@test.com")
    trip = api.create_trip(owner)
    api.add_member(owner, trip["id"], viewer)
    api.add_member(owner, trip["id"], editor, "EDITOR")

    r = _members(client, api, viewer, trip["id"])
    assert r.status_code == 403
    assert error_code(r) == "TRIP_FORBIDDEN"
    assert len(_members(client, api, editor, trip["id"]).json()) == 3


def test_owner_changes_role(api, client):
    owner = api.register("owner@test.com")
    viewer = api.register("viewer@test.com")
    trip = api.create_trip(owner)
    api.add_member(owner, trip["id"], viewer)

    r = client.patch(
        f"/trips/{trip['id']}/members/{viewer['id']}", json={"role": "EDITOR"}, headers=api.auth(owner)
    )
    assert r.status_code == 200
    assert r.json()["role"] == "EDITOR"
    assert r.json()["email"] == "viewer@test.com"

    # ahora puede invitar
    assert api.invite(viewer, trip["id"], "friend@test.com").status_code == 201


def test_owner_role_cannot_be_assigned_or_changed(api, client):
    owner = api.register("owner@test.com")
    viewer = api.register("viewer@test.com")
    trip = api.create_trip(owner)
    api.add_member(owner, trip["id"], viewer)
    base = f"/trips/{trip['id']}/members"

    r = client.patch(f"{base}/{viewer['id']}", json={"role": "OWNER"}, headers=api.auth(owner))
    assert r.status_code == 403
    r = client.patch(f"{base}/{owner['id']}", json={"role": "VIEWER"}, headers=api.auth(owner))
    assert r.status_code == 403
    r = client.delete(f"{base}/{owner['id']}", headers=api.auth(owner))
    assert r.status_code == 403
    assert error_code(r) == "TRIP_FORBIDDEN"


def test_editor_cannot_manage_members(api, client):
    owner = api.register("owner@test.com")
    editor = api.register("editor@test.com")
    viewer = api.register("viewer@test.com")
    trip = api.create_trip(owner)
    api.add_member(owner, trip["id"], editor, "EDITOR")
    api.add_member(owner, trip["id"], viewer)
    base = f"/trips/{trip['id']}/members"

    r = client.patch(f"{base}/{viewer['id']}", json={"role": "EDITOR"}, headers=api.auth(editor))
    assert r.status_code == 403
    assert client.delete(f"{base}/{viewer['id']}", headers=api.auth(editor)).status_code == 403


def test_remove_member_and_reinvite(api, client):
    owner = api.register("owner@test.com")
    viewer = api.register("viewer@test.com")
    trip = api.create_trip(owner)
    api.add_member(owner, trip["id"], viewer)
    base = f"/trips/{trip['id']}/members"

    assert client.delete(f"{base}/{viewer['id']}", headers=api.auth(owner)).status_code == 204
    r = client.delete(f"{base}/{viewer['id']}", headers=api.auth(owner))
    assert r.status_code == 404
    assert error_code(r) == "MEMBER_NOT_FOUND"

    # el invite aceptado se recicla para volver a entrar
    r = api.invite(owner, trip["id"], "viewer@test.com")
    assert r.status_code == 201
    assert api.accept(viewer, r.json()["id"]).status_code == 200
