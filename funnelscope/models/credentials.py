"""FunnelScope — Platform Credential Models.

Stored verbatim (secrets included) in the ``platform-credentials`` document.
"""

from typing import Optional

import httpx
from pydantic import BaseModel, field_validator


def _required(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("must be a non-empty string")
    return value


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class MailchimpCredentials(BaseModel):
    """Mailchimp API key, e.g. ``abc123def456-us21``."""

    api_key: str
    list_id: Optional[str] = None  # empty → auto-pick the largest list

    @field_validator("api_key")
    @classmethod
    def check_api_key(cls, v: str) -> str:
        return _required(v)

    @field_validator("list_id")
    @classmethod
    def check_list_id(cls, v: Optional[str]) -> Optional[str]:
        return _optional(v)


class WooCommerceCredentials(BaseModel):
    """WooCommerce REST API consumer key pair."""

    store_url: str
    consumer_key: str
    consumer_secret: str

    @field_validator("consumer_key", "consumer_secret")
    @classmethod
    def check_keys(cls, v: str) -> str:
        return _required(v)

    @field_validator("store_url")
    @classmethod
    def check_store_url(cls, v: str) -> str:
        v = _required(v).rstrip("/")
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid store URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("must be an absolute http(s) URL, e.g. https://shop.example.com")
        return v


class GoogleAnalyticsCredentials(BaseModel):
    """GA4 numeric property ID + full service-account JSON key file contents."""

    property_id: str
    service_account_json: str

    @field_validator("service_account_json")
    @classmethod
    def check_service_account(cls, v: str) -> str:
        return _required(v)

    @field_validator("property_id")
    @classmethod
    def check_property_id(cls, v: str) -> str:
        v = _required(v)
        if v.startswith("properties/"):
            v = v[len("properties/") :]
        return _required(v)


class GoogleAdsCredentials(BaseModel):
    """Google Ads OAuth client + refresh token and developer token."""

    customer_id: str  # 10 digits; dashes are stripped
    developer_token: str
    client_id: str
    client_secret: str
    refresh_token: str
    login_customer_id: Optional[str] = None  # MCC / manager account

    @field_validator("developer_token", "client_id", "client_secret", "refresh_token")
    @classmethod
    def check_secrets(cls, v: str) -> str:
        return _required(v)

    @field_validator("customer_id")
    @classmethod
    def check_customer_id(cls, v: str) -> str:
        return _required((v or "").replace("-", ""))

    @field_validator("login_customer_id")
    @classmethod
    def check_login_customer_id(cls, v: Optional[str]) -> Optional[str]:
        v = _optional(v)
        return v.replace("-", "") if v else None


class StoredCredentials(BaseModel):
    """The ``platform-credentials`` document."""

    email_marketing: Optional[MailchimpCredentials] = None
    storefront: Optional[WooCommerceCredentials] = None
    web_analytics: Optional[GoogleAnalyticsCredentials] = None
    paid_ads: Optional[GoogleAdsCredentials] = None
