"""Tests for MSAL token exchange."""

import pytest

from shared.auth import UnauthorizedError
from shared.token_broker import TokenExchangeError, acquire_app_token, acquire_token_on_behalf_of


def test_on_behalf_of_passes_assertion_and_scopes(msal_client):
    result = acquire_token_on_behalf_of("user-assertion", ["https://graph.microsoft.com/Files.Read.All"])

    assert result["access_token"] == "downstream-token"
    assert msal_client.obo_calls == [{
        "user_assertion": "user-assertion",
        "scopes": ["https://graph.microsoft.com/Files.Read.All"],
    }]


def test_on_behalf_of_without_assertion_never_calls_entra(msal_client):
    with pytest.raises(UnauthorizedError):
        acquire_token_on_behalf_of("", ["scope"])
    assert msal_client.obo_calls == []


def test_app_token_uses_client_credentials(msal_client):
    acquire_app_token(["https://graph.microsoft.com/.default"])
    assert msal_client.client_calls == [["https://graph.microsoft.com/.default"]]


def test_refusal_is_surfaced_unmodified(msal_client):
    msal_client.result = {
        "error": "invalid_grant",
        "error_description": "AADSTS65001: consent required",
        "error_codes": [65001],
        "correlation_id": "corr-1",
    }

    with pytest.raises(TokenExchangeError) as excinfo:
        acquire_token_on_behalf_of("user-assertion", ["scope"])

    error = excinfo.value
    assert error.result["correlation_id"] == "corr-1"
    assert error.consent_required is True
    assert error.is_grant_failure is True


@pytest.mark.parametrize("result, consent, grant", [
    ({"error": "consent_required"}, True, True),
    ({"error": "invalid_grant", "error_description": "AADSTS50013"}, False, True),
    ({"error": "invalid_client", "error_codes": [7000215]}, False, False),
    ({}, False, False),
])
def test_error_classification(result, consent, grant):
    error = TokenExchangeError(result)
    assert error.consent_required is consent
    assert error.is_grant_failure is grant

