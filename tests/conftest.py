"""Shared fixtures: a throwaway SQLite file, a TestClient and API helpers."""
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="tripboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.database import Base, SessionLocal, engine  # noqa: E402
from app.core.rate_limit import ALL_LIMITERS  # noqa: E402
from app.main import app  # noqa: E402
from app.services.public_cache import public_cache  # noqa: E402

PASSWORD = "secret-pass-1"

TRIP_BODY = {
    "title": "Lisbon long weekend",
    "description": "pasteis de nata",
    "start_date": "2030-05-01T00:00:00Z",
    "end_date": "2030-05-05T23:59:59Z",
    "timezone": "Europe/Lisbon",
}


@pytest.fixture(autouse=True)
def _fresh_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    for limiter in ALL_LIMITERS:
        limiter.reset()
    public_cache.clear()
    yield
    public_cache.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


class Api:
    """Thin wrapper so tests read as "owner creates trip", not header plumbing."""

    def __init__(self, client: TestClient):
        self.client = client

    def register(self, email: str, name: str | None = None) -> dict:
        r = self.client.post("/auth/register", json={"email": email, "password": PASSWORD, "name": name})
        assert r.status_code == 201, r.text
        body = r.json()
        return {"id": body["user"]["id"], "email": email, "token": body["access_token"]}

    @staticmethod
    def auth(user: dict) -> dict:
        return {"Authorization": f"Bearer {user['token']}"}

    def create_trip(self, owner: dict, **overrides) -> dict:
        r = self.client.post("/trips", json={**TRIP_BODY, **overrides}, headers=self.auth(owner))
        assert r.status_code == 201, r.text
        return r.json()

    def invite(self, inviter: dict, trip_id: int, email: str, role: str = "VIEWER"):
        return self.client.post(
            f"/trips/{trip_id}/invites", json={"email": email, "role": role}, headers=self.auth(inviter)
        )

    def accept(self, user: dict, invite_id: int):
        return self.client.post(f"/invites/{invite_id}/accept", headers=self.auth(user))

    def decline(self, user: dict, invite_id: int):
        return self.client.post(f"/invites/{invite_id}/decline", headers=self.auth(user))

    def add_member(self, owner: dict, trip_id: int, user: dict, role: str = "VIEWER") -> None:
        r = self.invite(owner, trip_id, user["email"], role)
        assert r.status_code == 201, r.text
        r = self.accept(user, r.json()["id"])
        assert r.status_code == 200, r.text

    def create_share_link(self, owner: dict, trip_id: int, **body):
        return self.client.post(f"/trips/{trip_id}/share-links", json=body, headers=self.auth(owner))


@pytest.fixture
def api(client) -> Api:
    return Api(client)


def error_code(response) -> str:
    return response.json()["error"]["code"]
