"""FunnelScope — Google OAuth Token Exchange.

Two flows, both ending in a short-lived bearer token:
  - service account: RS256-signed JWT assertion (GA4)
  - installed app: refresh-token grant (Google Ads)
"""

import json
from datetime import datetime
from typing import Any, Dict

import jwt

from funnelscope.config import settings
from funnelscope.connectors.http_client import VendorClient
from funnelscope.core.errors import AuthError

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME = 3600  # seconds


def parse_service_account(raw: str, platform: str) -> Dict[str, Any]:
    """Decode the service-account key file, checking the fields we sign with."""
    try:
        info = json.loads(raw)
    except ValueError as e:
        raise AuthError(
            "Service account JSON is not valid JSON", platform=platform
        ) from e
    if not isinstance(info, dict):
        raise AuthError("Service account JSON must be an object", platform=platform)

    missing = [k for k in ("client_email", "private_key") if not info.get(k)]
    if missing:
        raise AuthError(
            f"Service account JSON is missing: {', '.join(missing)}",
            platform=platform,
        )
    return info


def sign_assertion(info: Dict[str, Any], scope: str, now: datetime, platform: str) -> str:
    issued = int(now.timestamp())
    claims = {
        "iss": info["client_email"],
        "scope": scope,
        "aud": info.get("token_uri") or settings.google_oauth_token_url,
        "iat": issued,
        "exp": issued + ASSERTION_LIFETIME,
    }
    try:
        return jwt.encode(claims, info["private_key"], algorithm="RS256")
    except (ValueError, TypeError, jwt.PyJWTError) as e:
        raise AuthError(
            f"Service account private key could not sign the token request: {e}",
            platform=platform,
        ) from e


async def _token_request(
    http: VendorClient, form: Dict[str, str], context: str
) -> str:
    resp = await http.request("POST", settings.google_oauth_token_url, data=form)
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    if not resp.is_success:
        reason = body.get("error_description") or body.get("error") or resp.reason_phrase
        raise AuthError(
            f"{context}: {reason}",
            platform=http.platform,
            status_code=resp.status_code,
        )
    token = body.get("access_token")
    if not token:
        raise AuthError(f"{context}: no access_token in response", platform=http.platform)
    return str(token)


async def service_account_token(
    http: VendorClient, service_account_json: str, scope: str, now: datetime
) -> str:
    """Exchange a signed service-account assertion for an access token."""
    info = parse_service_account(service_account_json, http.platform)
    assertion = sign_assertion(info, scope, now, http.platform)
    return await _token_request(
        http,
        {"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
        "Google OAuth token error",
    )


async def refresh_access_token(
    http: VendorClient, client_id: str, client_secret: str, refresh_token: str
) -> str:
    """Exchange a long-lived refresh token for an access token."""
    return await _token_request(
        http,
        {
            "client_id": client_id,
            "client_secret": client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        },
        "Google Ads token refresh error",
    )
