"""FunnelScope — Google Analytics 4 Connector.

Service-account auth, then three ``runReport`` calls against the GA4 Data
API: a headline summary, a channel breakdown and a daily time series.
"""

from typing import Any, Dict

from funnelscope.config import settings
from funnelscope.connectors.base import PlatformConnector
from funnelscope.connectors.google_analytics.transformer import build_web_metrics
from funnelscope.connectors.google_auth import service_account_token
from funnelscope.connectors.http_client import VendorClient
from funnelscope.core.errors import PrimaryFetchError
from funnelscope.models.credentials import GoogleAnalyticsCredentials
from funnelscope.models.metrics import WebAnalyticsMetrics

ANALYTICS_SCOPE = "https://www.googleapis.com/auth/analytics.readonly"


class GoogleAnalyticsConnector(
    PlatformConnector[GoogleAnalyticsCredentials, WebAnalyticsMetrics]
):
    """Web-analytics metrics from a GA4 property."""

    platform = "web_analytics"

    async def _fetch(
        self, http: VendorClient, credentials: GoogleAnalyticsCredentials
    ) -> WebAnalyticsMetrics:
        token = await service_account_token(
            http, credentials.service_account_json, ANALYTICS_SCOPE, self.clock()
        )

        pid = credentials.property_id
        endpoint = f"{settings.ga4_api_base}/properties/{pid}:runReport"
        headers = {"Authorization": f"Bearer {token}"}
        date_ranges = [
            {"startDate": f"{settings.metrics_window_days}daysAgo", "endDate": "today"}
        ]

        async def run_report(body: Dict[str, Any], context: str) -> Dict[str, Any]:
            resp = await http.request("POST", endpoint, headers=headers, json=body)
            http.raise_for_status(
                resp, context, not_found=f"GA4 property '{pid}' not found"
            )
            data = http.decode(resp, context)
            if not isinstance(data, dict):
                raise PrimaryFetchError(
                    f"{context} returned an unexpected body", platform=self.platform
                )
            return data

        summary_out, channels_out, daily_out = await self.settle(
            run_report(
                {
                    "metrics": [
                        {"name": "sessions"},
                        {"name": "bounceRate"},
                        {"name": "newUsers"},
                        {"name": "engagedSessions"},
                    ],
                    "dateRanges": date_ranges,
                },
                "GA4 API",
            ),
            run_report(
                {
                    "dimensions": [{"name": "sessionDefaultChannelGroup"}],
                    "metrics": [{"name": "sessions"}],
                    "dateRanges": date_ranges,
                    "orderBys": [{"metric": {"metricName": "sessions"}, "desc": True}],
                    "limit": settings.top_n_limit,
                },
                "GA4 channel report",
            ),
            run_report(
                {
                    "dimensions": [{"name": "date"}],
                    "metrics": [{"name": "sessions"}],
                    "dateRanges": date_ranges,
                    "orderBys": [{"dimension": {"dimensionName": "date"}}],
                },
                "GA4 daily report",
            ),
        )

        summary = self.primary(summary_out)
        return build_web_metrics(
            summary,
            self.secondary(channels_out, {}, "channels"),
            self.secondary(daily_out, {}, "daily_sessions"),
            property_id=pid,
            fetched_at=self.clock(),
        )
