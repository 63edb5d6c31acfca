"""FunnelScope — Google Ads Connector.

Refresh-token auth, then a GAQL campaign search (paginated through
``nextPageToken``) and a customer currency lookup.
"""

from typing import Any, Dict, List

from funnelscope.config import settings
from funnelscope.connectors.base import PlatformConnector
from funnelscope.connectors.google_ads.transformer import build_ads_metrics
from funnelscope.connectors.google_auth import refresh_access_token
from funnelscope.connectors.http_client import VendorClient
from funnelscope.core.logging import get_logger
from funnelscope.models.credentials import GoogleAdsCredentials
from funnelscope.models.metrics import PaidAdsMetrics

logger = get_logger("google_ads.client")

MAX_PAGES = 10

CAMPAIGN_QUERY = """
    SELECT
      campaign.name,
      metrics.impressions,
      metrics.clicks,
      metrics.cost_micros,
      metrics.conversions
    FROM campaign
    WHERE segments.date DURING LAST_30_DAYS
      AND campaign.status = 'ENABLED'
    ORDER BY metrics.cost_micros DESC
"""

CURRENCY_QUERY = "SELECT customer.currency_code FROM customer LIMIT 1"


class GoogleAdsConnector(PlatformConnector[GoogleAdsCredentials, PaidAdsMetrics]):
    """Paid-ads metrics from the Google Ads REST API."""

    platform = "paid_ads"

    async def _fetch(
        self, http: VendorClient, credentials: GoogleAdsCredentials
    ) -> PaidAdsMetrics:
        token = await refresh_access_token(
            http,
            credentials.client_id,
            credentials.client_secret,
            credentials.refresh_token,
        )

        customer_id = credentials.customer_id
        url = (
            f"{settings.google_ads_api_base}/{settings.google_ads_api_version}"
            f"/customers/{customer_id}/googleAds:search"
        )
        headers = {
            "Authorization": f"Bearer {token}",
            "developer-token": credentials.developer_token,
        }
        if credentials.login_customer_id:
            headers["login-customer-id"] = credentials.login_customer_id

        async def search(query: str, context: str, max_pages: int) -> List[Dict[str, Any]]:
            results: List[Dict[str, Any]] = []
            body: Dict[str, Any] = {"query": query}
            for _ in range(max_pages):
                resp = await http.request("POST", url, headers=headers, json=body)
                http.raise_for_status(
                    resp,
                    context,
                    not_found=f"Google Ads customer '{customer_id}' not found",
                )
                data = http.decode(resp, context) or {}
                results.extend(data.get("results") or [])
                next_token = data.get("nextPageToken")
                if not next_token:
                    break
                body = {"query": query, "pageToken": next_token}
            return results

        async def currency() -> str:
            rows = await search(CURRENCY_QUERY, "Google Ads currency query", 1)
            customer = (rows[0].get("customer") or {}) if rows else {}
            return str(customer.get("currencyCode") or "USD")

        rows_out, currency_out = await self.settle(
            search(CAMPAIGN_QUERY, "Google Ads API", MAX_PAGES),
            currency(),
        )
        rows = self.primary(rows_out)
        logger.info(
            f"Fetched {len(rows)} campaign rows",
            extra={"platform": self.platform, "endpoint": url},
        )

        return build_ads_metrics(
            rows,
            self.secondary(currency_out, "USD", "currency"),
            customer_id=customer_id,
            fetched_at=self.clock(),
        )
