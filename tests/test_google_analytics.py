import asyncio
import json
from urllib.parse import parse_qs

import httpx
import jwt
import pytest

from funnelscope.connectors.google_analytics.client import GoogleAnalyticsConnector
from funnelscope.connectors.google_auth import JWT_BEARER_GRANT, parse_service_account
from funnelscope.core.errors import AuthError, ResourceNotFoundError
from funnelscope.models.credentials import GoogleAnalyticsCredentials

TOKEN_URL = "https://oauth2.googleapis.com/token"
REPORT_PATH = "/v1beta/properties/123456789:runReport"

SUMMARY = {
    "rows": [
        {"metricValues": [{"value": "4200"}, {"value": "0.4213"}, {"value": "1500"}, {"value": "2800"}]}
    ],
    "rowCount": 1,
}
CHANNELS = {
    "rows": [
        {"dimensionValues": [{"value": "Organic Search"}], "metricValues": [{"value": "2000"}]},
        {"dimensionValues": [{"value": "Direct"}], "metricValues": [{"value": "1200"}]},
    ]
}
DAILY = {
    "rows": [
        {"dimensionValues": [{"value": "20260302"}], "metricValues": [{"value": "100"}]},
        {"dimensionValues": [{"value": "20260301"}], "metricValues": [{"value": "90"}]},
    ]
}


def ga_handler(public_key, overrides=None, token_response=None):
    reports = {"summary": (200, SUMMARY), "channels": (200, CHANNELS), "daily": (200, DAILY)}
    reports.update(overrides or {})

    def handler(request):
        if str(request.url) == TOKEN_URL:
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            assert form["grant_type"] == JWT_BEARER_GRANT
            claims = jwt.decode(
                form["assertion"],
                public_key,
                algorithms=["RS256"],
                audience=TOKEN_URL,
                options={"verify_exp": False, "verify_iat": False},
            )
            assert claims["iss"] == "reporter@funnel-demo.iam.gserviceaccount.com"
            assert claims["scope"].endswith("analytics.readonly")
            status, body = token_response or (200, {"access_token": "ya29.token", "expires_in": 3599})
            return httpx.Response(status, json=body)

        assert request.url.path == REPORT_PATH
        assert request.headers["authorization"] == "Bearer ya29.token"
        body = json.loads(request.content)
        dimensions = [d["name"] for d in body.get("dimensions", [])]
        if "sessionDefaultChannelGroup" in dimensions:
            status, data = reports["channels"]
        elif "date" in dimensions:
            status, data = reports["daily"]
        else:
            status, data = reports["summary"]
        return httpx.Response(status, json=data)

    return handler


@pytest.fixture
def credentials(service_account_json):
    return GoogleAnalyticsCredentials(
        property_id="properties/123456789",
        service_account_json=service_account_json,
    )


def fetch(mock_client, fixed_clock, handler, credentials):
    connector = GoogleAnalyticsConnector(client=mock_client(handler), clock=fixed_clock)
    return asyncio.run(connector.fetch(credentials))


def test_fetch_normalizes_property(mock_client, fixed_clock, rsa_key, credentials):
    m = fetch(mock_client, fixed_clock, ga_handler(rsa_key.public_key()), credentials)

    assert m.platform == "web_analytics"
    assert m.property_id == "123456789"
    assert m.monthly_sessions == 4200
    assert m.bounce_rate == 0.4213
    assert m.new_users_30d == 1500
    assert m.engaged_sessions_30d == 2800
    assert m.top_channel == "Organic Search"
    assert [(c.channel, c.sessions) for c in m.channels] == [("Organic Search", 2000), ("Direct", 1200)]
    assert [d.date for d in m.daily_sessions] == ["2026-03-01", "2026-03-02"]


def test_empty_property_produces_zeros(mock_client, fixed_clock, rsa_key, credentials):
    handler = ga_handler(
        rsa_key.public_key(),
        {"summary": (200, {"rowCount": 0}), "channels": (200, {}), "daily": (200, {})},
    )
    m = fetch(mock_client, fixed_clock, handler, credentials)

    assert m.monthly_sessions == 0
    assert m.bounce_rate == 0.0
    assert m.top_channel == "Unknown"
    assert m.channels == []
    assert m.daily_sessions == []


def test_failed_breakdowns_degrade_to_defaults(mock_client, fixed_clock, rsa_key, credentials):
    error = {"error": {"code": 400, "message": "Invalid dimension", "status": "INVALID_ARGUMENT"}}
    handler = ga_handler(rsa_key.public_key(), {"channels": (400, error), "daily": (400, error)})
    m = fetch(mock_client, fixed_clock, handler, credentials)

    assert m.monthly_sessions == 4200
    assert m.top_channel == "Unknown"
    assert m.daily_sessions == []


def test_missing_property_is_fatal(mock_client, fixed_clock, rsa_key, credentials):
    error = {"error": {"code": 404, "message": "Requested entity was not found.", "status": "NOT_FOUND"}}
    handler = ga_handler(rsa_key.public_key(), {"summary": (404, error)})

    with pytest.raises(ResourceNotFoundError) as exc_info:
        fetch(mock_client, fixed_clock, handler, credentials)
    assert str(exc_info.value) == "GA4 property '123456789' not found: Requested entity was not found."


def test_permission_denied_is_auth_error(mock_client, fixed_clock, rsa_key, credentials):
    error = {"error": {"code": 403, "message": "User does not have sufficient permissions for this property.", "status": "PERMISSION_DENIED"}}
    handler = ga_handler(rsa_key.public_key(), {"summary": (403, error)})

    with pytest.raises(AuthError) as exc_info:
        fetch(mock_client, fixed_clock, handler, credentials)
    assert "sufficient permissions" in exc_info.value.message


def test_rejected_assertion_surfaces_token_error(mock_client, fixed_clock, rsa_key, credentials):
    handler = ga_handler(
        rsa_key.public_key(),
        token_response=(400, {"error": "invalid_grant", "error_description": "Invalid JWT Signature."}),
    )
    with pytest.raises(AuthError) as exc_info:
        fetch(mock_client, fixed_clock, handler, credentials)
    assert str(exc_info.value) == "Google OAuth token error: Invalid JWT Signature."


def test_malformed_service_account_json():
    with pytest.raises(AuthError):
        parse_service_account("{not json", "web_analytics")
    with pytest.raises(AuthError) as exc_info:
        parse_service_account(json.dumps({"client_email": "x@y.z"}), "web_analytics")
    assert "private_key" in str(exc_info.value)
