"""Tests for the auth callback and Dataverse token endpoints."""

from datetime import datetime, timedelta, timezone

from conftest import encode_principal, make_jwt, make_request, response_json
from auth_tokens.routes import auth_callback, get_dataverse_token
from shared.token_store import get_token_store

PRINCIPAL = {
    "identityProvider": "aad",
    "userId": "b5f1a0c2",
    "userDetails": "mario.rossi@contoso.com",
    "userRoles": ["anonymous", "authenticated"],
}


def _iso(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).isoformat()


def _callback(method="GET", user_id="user-1", body=None):
    headers = {"X-User-ID": user_id} if user_id else {}
    return auth_callback(make_request(method, "/api/auth-callback", headers=headers, body=body))


def _dataverse_token_request(principal=PRINCIPAL, assertion=None):
    headers = {}
    if principal is not None:
        headers["x-ms-client-principal"] = principal if isinstance(principal, str) else encode_principal(principal)
    if assertion:
        headers["x-ms-token-aad-access-token"] = assertion
    return get_dataverse_token(make_request("GET", "/api/get-dataverse-token", headers=headers))


# =============================================================================
# auth-callback
# =============================================================================

async def test_saved_token_is_reported():
    saved = await _callback("POST", body={
        "accessToken": "abc",
        "refreshToken": "def",
        "expiresOn": _iso(timedelta(hours=1)),
    })
    assert saved.status_code == 200
    assert response_json(saved) == {"success": True, "message": "Token saved"}

    fetched = await _callback("GET")
    assert fetched.status_code == 200
    assert response_json(fetched) == {"success": True, "hasToken": True}


async def test_token_inside_expiry_skew_is_404_and_evicted():
    await _callback("POST", body={"accessToken": "abc", "expiresOn": _iso(timedelta(minutes=4))})

    response = await _callback("GET")

    assert response.status_code == 404
    assert response_json(response)["message"] == "Token not available or expired"
    assert "user-1" not in get_token_store()


async def test_unknown_user_is_404():
    response = await _callback("GET", user_id="stranger")
    assert response.status_code == 404


async def test_tokens_are_keyed_by_user():
    await _callback("POST", user_id="user-a", body={"accessToken": "a", "expiresOn": _iso(timedelta(hours=1))})

    assert (await _callback("GET", user_id="user-a")).status_code == 200
    assert (await _callback("GET", user_id="user-b")).status_code == 404


async def test_missing_user_header_is_400():
    response = await _callback("GET", user_id=None)

    assert response.status_code == 400
    assert response_json(response)["error"] == "User ID required"


async def test_post_without_access_token_is_400():
    response = await _callback("POST", body={"expiresOn": _iso(timedelta(hours=1))})

    assert response.status_code == 400
    assert response_json(response)["message"] == "accessToken required in the body"


async def test_post_with_bad_expiry_is_400():
    response = await _callback("POST", body={"accessToken": "abc", "expiresOn": "soon"})

    assert response.status_code == 400
    assert response_json(response)["error"] == "Invalid token data"
    assert "user-1" not in get_token_store()


async def test_callback_preflight_allows_user_header():
    response = await _callback("OPTIONS", user_id=None)

    assert response.status_code == 200
    assert "X-User-ID" in response.headers["Access-Control-Allow-Headers"]


# =============================================================================
# get-dataverse-token
# =============================================================================

async def test_dataverse_token_is_exchanged_and_stored(msal_client):
    assertion = make_jwt()

    response = await _dataverse_token_request(assertion=assertion)

    assert response.status_code == 200
    body = response_json(response)
    assert body["user"] == "mario.rossi@contoso.com"
    assert body["hasToken"] is True
    assert body["accessToken"] == "downstream-token"
    assert body["scopes"] == ["https://org4bd35fe5.crm4.dynamics.com/user_impersonation"]
    assert msal_client.obo_calls[0]["user_assertion"] == assertion

    assert get_token_store().get("b5f1a0c2") == "downstream-token"


async def test_dataverse_token_without_forwarded_token(msal_client):
    response = await _dataverse_token_request()

    assert response.status_code == 200
    body = response_json(response)
    assert body["user"] == "mario.rossi@contoso.com"
    assert body["hasToken"] is False
    assert "accessToken" not in body
    assert msal_client.obo_calls == []


async def test_dataverse_token_requires_principal(msal_client):
    response = await _dataverse_token_request(principal=None, assertion=make_jwt())

    assert response.status_code == 401
    assert response_json(response)["error"] == "Not authenticated"
    assert msal_client.obo_calls == []


async def test_dataverse_token_rejects_garbled_principal(msal_client):
    response = await _dataverse_token_request(principal="%%%not-base64%%%")

    assert response.status_code == 401


async def test_dataverse_token_exchange_failure_is_relayed(msal_client):
    msal_client.result = {"error": "invalid_grant", "error_description": "AADSTS50013: Assertion failed signature validation."}

    response = await _dataverse_token_request(assertion=make_jwt())

    assert response.status_code == 401
    body = response_json(response)
    assert body["error"] == "Error retrieving token"
    assert body["details"]["error"] == "invalid_grant"
    assert "hint" not in body
    assert "b5f1a0c2" not in get_token_store()
