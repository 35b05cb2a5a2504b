import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.security import AuthClient, get_auth_client, get_current_user
from app.main import app

USER_BODY = {"id": "5b2a0c1f9c1d4e0012a1a001", "name": "Ana", "login": "ana", "permissions": ["user"]}


def auth_client(handler) -> AuthClient:
    return AuthClient("http://auth.test/v1", transport=httpx.MockTransport(handler))


@pytest.fixture()
def real_auth():
    """Use the real get_current_user, backed by a mocked auth service."""
    app.dependency_overrides.pop(get_current_user, None)

    def use(handler):
        app.dependency_overrides[get_auth_client] = lambda: auth_client(handler)

    return use


def test_missing_token_is_401(db_session, real_auth):
    real_auth(lambda request: httpx.Response(200, json=USER_BODY))
    client = TestClient(app)
    r = client.get("/cart")
    assert r.status_code == 401


def test_rejected_token_is_401(db_session, real_auth):
    real_auth(lambda request: httpx.Response(401, json={"error": "Unauthorized"}))
    client = TestClient(app)
    r = client.get("/cart", headers={"Authorization": "bearer expired"})
    assert r.status_code == 401


def test_auth_service_down_is_401(db_session, real_auth):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    real_auth(handler)
    client = TestClient(app)
    r = client.post("/cart/validate", headers={"Authorization": "bearer abc"})
    assert r.status_code == 401


def test_valid_token_resolves_user(db_session, real_auth):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=USER_BODY)

    real_auth(handler)
    client = TestClient(app)
    r = client.get("/cart", headers={"Authorization": "bearer abc"})

    assert r.status_code == 200
    assert r.json()["userId"] == USER_BODY["id"]
    assert seen == {"path": "/v1/users/current", "auth": "bearer abc"}


@pytest.mark.asyncio
async def test_current_user_keeps_token():
    user = await auth_client(lambda request: httpx.Response(200, json=USER_BODY)).current_user("bearer abc")
    assert user.id == USER_BODY["id"]
    assert user.login == "ana"
    assert user.permissions == ("user",)
    assert user.token == "bearer abc"


@pytest.mark.asyncio
async def test_current_user_bad_payload():
    user = await auth_client(lambda request: httpx.Response(200, json=["not", "a", "user"])).current_user("bearer abc")
    assert user is None
