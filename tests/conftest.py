import json
from datetime import datetime, timezone

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from funnelscope.config import settings
from funnelscope.models.metrics import (
    EmailMarketingMetrics,
    PaidAdsMetrics,
    StorefrontMetrics,
    WebAnalyticsMetrics,
)

FIXED_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _instant_retries(monkeypatch):
    monkeypatch.setattr(settings, "http_retry_base_delay", 0.0)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def mock_client():
    """Build an AsyncClient whose every request goes to ``handler``."""

    def _build(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _build


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def service_account_json(rsa_key):
    pem = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    return json.dumps(
        {
            "type": "service_account",
            "client_email": "reporter@funnel-demo.iam.gserviceaccount.com",
            "private_key": pem,
            "token_uri": "https://oauth2.googleapis.com/token",
        }
    )


# ── Cached metrics records ──


@pytest.fixture
def email_metrics():
    return EmailMarketingMetrics(
        fetched_at=FIXED_NOW,
        list_id="L1",
        list_name="Newsletter",
        list_size=12400,
        open_rate=0.4213,
        click_rate=0.031,
        click_to_open_rate=0.0736,
        new_subscribers_30d=120,
        lost_subscribers_30d=15,
        automation_count=2,
    )


@pytest.fixture
def storefront_metrics():
    return StorefrontMetrics(
        fetched_at=FIXED_NOW,
        store_url="https://shop.example.com",
        total_orders_30d=124,
        total_revenue_30d=12400.0,
        aov_30d=100.0,
        repeat_purchase_rate=0.25,
        repeat_sample_size=200,
        total_customers=950,
    )


@pytest.fixture
def web_metrics():
    return WebAnalyticsMetrics(
        fetched_at=FIXED_NOW,
        property_id="123456789",
        monthly_sessions=3_400_000,
        bounce_rate=0.4213,
        new_users_30d=950,
        top_channel="Organic Search",
    )


@pytest.fixture
def ads_metrics():
    return PaidAdsMetrics(
        fetched_at=FIXED_NOW,
        customer_id="1234567890",
        total_spend_30d=950.0,
        total_clicks_30d=12400,
        avg_ctr=0.0233,
        total_conversions_30d=29.5,
    )


class FakeConnector:
    """Stands in for a platform connector: returns ``result`` or raises it."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    async def fetch(self, credentials):
        self.calls.append(credentials)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


@pytest.fixture
def fake_connector():
    return FakeConnector
