"""FunnelScope — Per-Platform Status Previews.

Each builder turns one cached metrics record into 3–6 display-ready pairs.
"""

from typing import List

from funnelscope.core.formatting import fmt_count, fmt_number, fmt_pct, fmt_usd
from funnelscope.models.metrics import (
    EmailMarketingMetrics,
    PaidAdsMetrics,
    StorefrontMetrics,
    WebAnalyticsMetrics,
)
from funnelscope.models.status import PreviewItem


def email_marketing_preview(m: EmailMarketingMetrics) -> List[PreviewItem]:
    return [
        PreviewItem(label="List size", value=fmt_count(m.list_size)),
        PreviewItem(label="Open rate", value=fmt_pct(m.open_rate)),
        PreviewItem(label="CTOR", value=fmt_pct(m.click_to_open_rate)),
        PreviewItem(
            label="Growth (30d)",
            value=f"+{fmt_number(m.new_subscribers_30d)} / -{fmt_number(m.lost_subscribers_30d)}",
        ),
        PreviewItem(label="Automations", value=str(m.automation_count)),
    ]


def storefront_preview(m: StorefrontMetrics) -> List[PreviewItem]:
    return [
        PreviewItem(label="Revenue (30d)", value=fmt_usd(m.total_revenue_30d)),
        PreviewItem(label="Orders (30d)", value=fmt_number(m.total_orders_30d)),
        PreviewItem(label="AOV", value=fmt_usd(m.aov_30d)),
        PreviewItem(label="Repeat rate", value=fmt_pct(m.repeat_purchase_rate)),
        PreviewItem(label="Customers", value=fmt_count(m.total_customers)),
    ]


def web_analytics_preview(m: WebAnalyticsMetrics) -> List[PreviewItem]:
    return [
        PreviewItem(label="Sessions (30d)", value=fmt_count(m.monthly_sessions)),
        PreviewItem(label="Bounce rate", value=fmt_pct(m.bounce_rate)),
        PreviewItem(label="New users (30d)", value=fmt_count(m.new_users_30d)),
        PreviewItem(label="Top channel", value=m.top_channel),
    ]


def paid_ads_preview(m: PaidAdsMetrics) -> List[PreviewItem]:
    return [
        PreviewItem(label="Spend (30d)", value=fmt_usd(m.total_spend_30d)),
        PreviewItem(label="Clicks (30d)", value=fmt_count(m.total_clicks_30d)),
        PreviewItem(label="CTR", value=fmt_pct(m.avg_ctr)),
        PreviewItem(label="Conversions", value=fmt_number(m.total_conversions_30d)),
    ]
