"""FunnelScope — Google Ads Search Rows → Normalized Transformer.

Spend is accumulated in integer micros and converted to currency once.
"""

from datetime import datetime
from typing import Any, Dict, List

from funnelscope.core.metric_math import (
    round_money,
    round_rate,
    safe_div,
    safe_float,
    safe_int,
    select_top_performers,
)
from funnelscope.models.metrics import AdCampaignSummary, PaidAdsMetrics

MICROS = 1_000_000


def _field(metrics: Dict[str, Any], camel: str, snake: str) -> Any:
    """REST responses use camelCase; older payloads snake_case."""
    return metrics.get(camel, metrics.get(snake))


def parse_row(row: Dict[str, Any]) -> tuple[str, int, int, int, float]:
    """(campaign name, impressions, clicks, cost micros, conversions)."""
    m = row.get("metrics") or {}
    name = str((row.get("campaign") or {}).get("name") or "Unnamed campaign")
    return (
        name,
        safe_int(m.get("impressions")),
        safe_int(m.get("clicks")),
        safe_int(_field(m, "costMicros", "cost_micros")),
        safe_float(m.get("conversions")),
    )


def build_ads_metrics(
    rows: List[Dict[str, Any]],
    currency: str,
    *,
    customer_id: str,
    fetched_at: datetime,
) -> PaidAdsMetrics:
    total_impressions = 0
    total_clicks = 0
    total_cost_micros = 0
    total_conversions = 0.0
    campaigns: List[AdCampaignSummary] = []

    for row in rows:
        name, impressions, clicks, cost_micros, conversions = parse_row(row)
        total_impressions += impressions
        total_clicks += clicks
        total_cost_micros += cost_micros
        total_conversions += conversions
        campaigns.append(
            AdCampaignSummary(
                name=name,
                impressions=impressions,
                clicks=clicks,
                spend=round_money(cost_micros / MICROS),
                conversions=round_money(conversions),
                ctr=round_rate(safe_div(clicks, impressions)),
            )
        )

    total_spend = total_cost_micros / MICROS

    return PaidAdsMetrics(
        fetched_at=fetched_at,
        customer_id=customer_id,
        currency=currency or "USD",
        total_spend_30d=round_money(total_spend),
        total_clicks_30d=total_clicks,
        total_impressions_30d=total_impressions,
        avg_ctr=round_rate(safe_div(total_clicks, total_impressions)),
        avg_cpc=round_money(safe_div(total_spend, total_clicks)),
        total_conversions_30d=round_money(total_conversions),
        cost_per_conversion=round_money(safe_div(total_spend, total_conversions)),
        conversion_rate=round_rate(min(safe_div(total_conversions, total_clicks), 1.0)),
        campaign_count=len(campaigns),
        top_campaigns=select_top_performers(campaigns, key=lambda c: c.ctr),
    )
