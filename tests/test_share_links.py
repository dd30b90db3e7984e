import threading
from datetime import timedelta

from sqlalchemy import select, update

from app.core.clock import utc_now_naive
from app.core.database import SessionLocal
from app.core.errors import ErrorCode, Failure, Ok
from app.core.rate_limit import public_share_limiter
from app.models.share_link import ShareLink
from app.services.share_links import resolve_slug
from conftest import error_code


def _public(client, slug, **headers):
    return client.get(f"/public/share/{slug}/trip", headers=headers)


def test_owner_creates_link(api):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)

    r = api.create_share_link(owner, trip["id"], max_uses=5, note=" for the group chat ")
    assert r.status_code == 201
    link = r.json()
    assert link["trip_id"] == trip["id"]
    assert link["is_active"] is True
    assert link["uses"] == 0
    assert link["max_uses"] == 5
    assert link["note"] == "for the group chat"
    assert len(link["slug"]) >= 20


def test_only_owner_manages_links(api, client):
    owner = api.register("owner@test.com")
    editor = api.register("editor@test.com")
    trip = api.create_trip(owner)
    api.add_member(owner, trip["id"], editor, "EDITOR")

    r = api.create_share_link(editor, trip["id"])
    assert r.status_code == 403
    assert error_code(r) == "TRIP_FORBIDDEN"

    r = client.get(f"/trips/{trip['id']}/share-links", headers=api.auth(editor))
    assert r.status_code == 403


def test_create_rejects_past_expiry_and_bad_max_uses(api):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)

    r = api.create_share_link(owner, trip["id"], expires_at="2000-01-01T00:00:00Z")
    assert r.status_code == 400
    assert error_code(r) == "VALIDATION_ERROR"

    r = api.create_share_link(owner, trip["id"], max_uses=0)
    assert r.status_code == 400
    assert error_code(r) == "VALIDATION_ERROR"


def test_max_uses_is_enforced(api, client):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)
    slug = api.create_share_link(owner, trip["id"], max_uses=2).json()["slug"]

    assert _public(client, slug).status_code == 200
    assert _public(client, slug).status_code == 200
    r = _public(client, slug)
    assert r.status_code == 403
    assert error_code(r) == "SHARE_MAXED"

    links = client.get(f"/trips/{trip['id']}/share-links", headers=api.auth(owner)).json()
    assert links[0]["uses"] == 2


def test_revoked_link_is_invalid(api, client):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)
    link = api.create_share_link(owner, trip["id"]).json()
    assert _public(client, link["slug"]).status_code == 200

    url = f"/trips/{trip['id']}/share-links/{link['id']}"
    assert client.delete(url, headers=api.auth(owner)).status_code == 204
    # revocar otra vez no falla
    assert client.delete(url, headers=api.auth(owner)).status_code == 204

    r = _public(client, link["slug"])
    assert r.status_code == 404
    assert error_code(r) == "SHARE_INVALID"

    links = client.get(f"/trips/{trip['id']}/share-links", headers=api.auth(owner)).json()
    assert links[0]["is_active"] is False
    assert links[0]["revoked_at"] is not None


def test_revoke_unknown_link(api, client):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)
    r = client.delete(f"/trips/{trip['id']}/share-links/999", headers=api.auth(owner))
    assert r.status_code == 404
    assert error_code(r) == "NOT_FOUND"


def test_expired_link(api, client, db):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)
    link = api.create_share_link(owner, trip["id"]).json()
    db.execute(
        update(ShareLink)
        .where(ShareLink.id == link["id"])
        .values(expires_at=utc_now_naive() - timedelta(seconds=1))
    )
    db.commit()

    r = _public(client, link["slug"])
    assert r.status_code == 403
    assert error_code(r) == "SHARE_EXPIRED"


def test_unknown_slug(client):
    r = _public(client, "does-not-exist")
    assert r.status_code == 404
    assert error_code(r) == "SHARE_INVALID"


def test_public_payload_and_etag(api, client):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner, title="Azores")
    client.post(
        f"/trips/{trip['id']}/items",
        json={"type": "PLACE", "title": "Sete Cidades", "timezone": "Atlantic/Azores"},
        headers=api.auth(owner),
    )
    slug = api.create_share_link(owner, trip["id"]).json()["slug"]

    r = _public(client, slug)
    assert r.status_code == 200
    body = r.json()
    assert body["trip"]["title"] == "Azores"
    assert [i["title"] for i in body["items"]] == ["Sete Cidades"]
    assert body["items"][0]["votes_count"] == 0
    assert "owner_id" not in body["trip"]
    etag = r.headers["etag"]
    assert etag.startswith('W/"')
    assert r.headers["cache-control"].startswith("public, max-age=")

    r = _public(client, slug, **{"If-None-Match": etag})
    assert r.status_code == 304
    assert r.content == b""
    assert r.headers["etag"] == etag


def test_trip_changes_reach_public_view(api, client):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)
    slug = api.create_share_link(owner, trip["id"]).json()["slug"]
    first = _public(client, slug)

    client.patch(f"/trips/{trip['id']}", json={"title": "Renamed"}, headers=api.auth(owner))

    second = _public(client, slug)
    assert second.json()["trip"]["title"] == "Renamed"
    assert second.headers["etag"] != first.headers["etag"]


def test_public_endpoint_is_rate_limited(api, client, monkeypatch):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)
    slug = api.create_share_link(owner, trip["id"]).json()["slug"]
    monkeypatch.setattr(public_share_limiter, "limit", 2)

    assert _public(client, slug).status_code == 200
    assert _public(client, slug).status_code == 200
    r = _public(client, slug)
    assert r.status_code == 429
    assert error_code(r) == "RATE_LIMITED"
    assert int(r.headers["retry-after"]) >= 1


def test_concurrent_resolution_never_exceeds_max_uses(api, db):
    owner = api.register("owner@test.com")
    trip = api.create_trip(owner)
    slug = api.create_share_link(owner, trip["id"], max_uses=3).json()["slug"]

    workers = 8
    barrier = threading.Barrier(workers)
    results = []
    lock = threading.Lock()

    def worker():
        session = SessionLocal()
        try:
            barrier.wait()
            res = resolve_slug(session, slug)
        finally:
            session.close()
        with lock:
            results.append(res)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ok = [r for r in results if isinstance(r, Ok)]
    maxed = [r for r in results if isinstance(r, Failure) and r.code == ErrorCode.SHARE_MAXED]
    assert len(ok) == 3
    assert len(maxed) == workers - 3
    assert all(r.value == trip["id"] for r in ok)

    uses = db.execute(select(ShareLink.uses).where(ShareLink.slug == slug)).scalar_one()
    assert uses == 3


def test_random_slugs_do_not_grow_limiter_state(client, monkeypatch):
    monkeypatch.setattr(public_share_limiter, "max_keys", 50)

    for i in range(200):
        r = _public(client, f"random-{i}")
        assert error_code(r) == "SHARE_INVALID"
    assert public_share_limiter.tracked_keys <= 50
