"""FunnelScope — Per-Platform Prompt-Context Sections.

Each renderer spells out units in prose so the figures read unambiguously
inside an LLM prompt. Sub-lists are indented bullets.
"""

from datetime import datetime
from typing import List

from funnelscope.core.formatting import fmt_money, fmt_number, fmt_pct
from funnelscope.models.metrics import (
    EmailMarketingMetrics,
    PaidAdsMetrics,
    StorefrontMetrics,
    WebAnalyticsMetrics,
)


def _send_date(send_time: str) -> str:
    if not send_time:
        return "?"
    try:
        return datetime.fromisoformat(send_time.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return send_time


def email_marketing_section(m: EmailMarketingMetrics) -> List[str]:
    lines = [
        "### Mailchimp (Email Marketing)",
        f'- List: "{m.list_name}" — {fmt_number(m.list_size)} subscribers',
        f"- Average open rate (last 30d campaigns): {fmt_pct(m.open_rate)}",
        f"- Average click rate: {fmt_pct(m.click_rate)}",
        f"- Click-to-open rate (CTOR, averaged per campaign): {fmt_pct(m.click_to_open_rate)}",
        f"- Unsubscribe rate: {fmt_pct(m.unsubscribe_rate, 2)}",
        f"- Hard bounce rate: {fmt_pct(m.bounce_rate_hard, 2)}",
        f"- Campaigns sent in last 30 days: {m.campaign_count_30d}",
        f"- Email-attributed revenue (last 30d): {fmt_money(m.email_revenue_30d)}",
        f"- New subscribers (last month): {fmt_number(m.new_subscribers_30d)}"
        f" | Lost: {fmt_number(m.lost_subscribers_30d)}"
        f" | Net growth rate: {fmt_pct(m.list_growth_rate, 2)}",
        f"- Active automations/flows: {m.automation_count}",
    ]

    if m.automations:
        lines.append("- Automation details:")
        for a in m.automations:
            lines.append(
                f'  - "{a.title}" — open {fmt_pct(a.open_rate)}, click {fmt_pct(a.click_rate)}'
            )

    if m.top_campaigns:
        lines.append(
            "- Top-performing campaigns (≥20% above avg open rate, sorted by open rate):"
        )
        for c in m.top_campaigns:
            revenue = f" | revenue {fmt_money(c.revenue)}" if c.revenue > 0 else ""
            lines.append(
                f'  - "{c.subject}" ({_send_date(c.send_time)}) — '
                f"open {fmt_pct(c.open_rate)}, CTOR {fmt_pct(c.ctor)}{revenue}"
            )
    return lines


def storefront_section(m: StorefrontMetrics) -> List[str]:
    lines = [
        "### WooCommerce (Ecommerce)",
        f"- Revenue last 30 days: {fmt_money(m.total_revenue_30d)} {m.currency}",
        f"- Orders last 30 days: {fmt_number(m.total_orders_30d)}",
        f"- Average order value (30d): {fmt_money(m.aov_30d)}",
        f"- Revenue last 12 months: {fmt_money(m.total_revenue_12m)} {m.currency}",
        f"- Orders last 12 months: {fmt_number(m.total_orders_12m)}",
        f"- Average order value (12m): {fmt_money(m.aov_12m)}",
        f"- Total customers: {fmt_number(m.total_customers)}",
        f"- New customers last 30 days: {fmt_number(m.new_customers_30d)}"
        f" | last 12 months: {fmt_number(m.new_customers_12m)}",
        f"- Refunded orders last 30 days: {fmt_number(m.refund_count_30d)}"
        f" | last 12 months: {fmt_number(m.refund_count_12m)}",
        f"- Repeat purchase rate: {fmt_pct(m.repeat_purchase_rate)}"
        f" (estimated from a sample of {fmt_number(m.repeat_sample_size)} recent completed orders)",
        f"- Product catalog size: {fmt_number(m.product_count)} products",
    ]

    if m.top_products_12m:
        lines.append("- Top-selling products (last 12 months, by units sold):")
        for p in m.top_products_12m:
            lines.append(f'  - "{p.name}" — {fmt_number(p.quantity_sold)} units')

    if m.repeat_purchase_products:
        lines.append("- Most common second-purchase products (repeat customers):")
        for p in m.repeat_purchase_products:
            lines.append(f'  - "{p.name}" — {fmt_number(p.quantity_sold)} customers')
    return lines


def web_analytics_section(m: WebAnalyticsMetrics) -> List[str]:
    lines = [
        "### Google Analytics 4 (Traffic)",
        f"- Sessions last 30 days: {fmt_number(m.monthly_sessions)}",
        f"- Engaged sessions last 30 days: {fmt_number(m.engaged_sessions_30d)}",
        f"- Bounce rate: {fmt_pct(m.bounce_rate)}",
        f"- New users last 30 days: {fmt_number(m.new_users_30d)}",
        f"- Top traffic channel: {m.top_channel}",
    ]
    if m.channels:
        lines.append("- Channel breakdown (sessions):")
        for c in m.channels:
            lines.append(f"  - {c.channel}: {fmt_number(c.sessions)}")
    return lines


def paid_ads_section(m: PaidAdsMetrics) -> List[str]:
    lines = [
        "### Google Ads (Paid Traffic)",
        f"- Total ad spend last 30 days: {fmt_money(m.total_spend_30d)} {m.currency}",
        f"- Total clicks: {fmt_number(m.total_clicks_30d)}",
        f"- Total impressions: {fmt_number(m.total_impressions_30d)}",
        f"- Average CTR: {fmt_pct(m.avg_ctr, 2)}",
        f"- Average CPC: {fmt_money(m.avg_cpc)}",
        f"- Conversions: {fmt_number(m.total_conversions_30d)}",
        f"- Conversion rate (conversions / clicks): {fmt_pct(m.conversion_rate, 2)}",
        f"- Cost per conversion: {fmt_money(m.cost_per_conversion)}",
        f"- Enabled campaigns with activity: {m.campaign_count}",
    ]
    if m.top_campaigns:
        lines.append("- Top campaigns by CTR (≥20% above avg CTR):")
        for c in m.top_campaigns:
            lines.append(
                f'  - "{c.name}" — CTR {fmt_pct(c.ctr, 2)}, spend {fmt_money(c.spend)},'
                f" conversions {fmt_number(c.conversions)}"
            )
    return lines
