"""FunnelScope — Mailchimp Raw → Normalized Transformer.

Pure arithmetic over the raw list / campaign / automation / growth-history
payloads. No I/O.
"""

from datetime import datetime
from typing import Any, Dict, List

from funnelscope.core.metric_math import (
    as_fraction,
    mean,
    round_money,
    round_rate,
    safe_div,
    safe_float,
    safe_int,
    select_top_performers,
)
from funnelscope.models.metrics import (
    AutomationSummary,
    CampaignSummary,
    EmailMarketingMetrics,
)

ACTIVE_AUTOMATION_STATUS = "sending"


def pick_largest_list(lists: List[Dict[str, Any]]) -> Dict[str, Any] | None:
    """The list with the most members; ties keep API order (stable sort)."""
    if not lists:
        return None
    ranked = sorted(
        lists,
        key=lambda l: safe_int((l.get("stats") or {}).get("member_count")),
        reverse=True,
    )
    return ranked[0]


def summarize_campaign(raw: Dict[str, Any]) -> CampaignSummary:
    report = raw.get("report_summary") or {}
    unique_opens = safe_int(report.get("unique_opens"))
    unique_clicks = safe_int(report.get("subscriber_clicks"))
    return CampaignSummary(
        id=str(raw.get("id", "")),
        subject=str((raw.get("settings") or {}).get("subject_line") or ""),
        send_time=str(raw.get("send_time") or ""),
        open_rate=as_fraction(report.get("open_rate")),
        click_rate=as_fraction(report.get("click_rate")),
        ctor=safe_div(unique_clicks, unique_opens),
        revenue=safe_float((report.get("ecommerce") or {}).get("total_revenue")),
        unique_opens=unique_opens,
        unique_clicks=unique_clicks,
    )


def summarize_automation(raw: Dict[str, Any]) -> AutomationSummary:
    report = raw.get("report_summary") or {}
    return AutomationSummary(
        id=str(raw.get("id", "")),
        title=str((raw.get("settings") or {}).get("title") or ""),
        status=str(raw.get("status") or ""),
        emails_sent=safe_int(raw.get("emails_sent")),
        open_rate=round_rate(as_fraction(report.get("open_rate"))),
        click_rate=round_rate(as_fraction(report.get("click_rate"))),
    )


def _rounded(c: CampaignSummary) -> CampaignSummary:
    return c.model_copy(
        update={
            "open_rate": round_rate(c.open_rate),
            "click_rate": round_rate(c.click_rate),
            "ctor": round_rate(c.ctor),
            "revenue": round_money(c.revenue),
        }
    )


def build_email_metrics(
    list_data: Dict[str, Any],
    campaigns: List[Dict[str, Any]],
    automations: List[Dict[str, Any]],
    growth: Dict[str, Any],
    *,
    list_id: str,
    list_name: str,
    fetched_at: datetime,
) -> EmailMarketingMetrics:
    """Reduce raw Mailchimp payloads into an ``EmailMarketingMetrics`` record.

    Window rates are averaged per campaign (average of rates). When no
    campaign was sent in the window, the list-level roll-ups stand in.
    """
    stats = list_data.get("stats") or {}
    summaries = [summarize_campaign(c) for c in campaigns]
    n = len(summaries)

    if n > 0:
        open_rate = mean([c.open_rate for c in summaries])
        click_rate = mean([c.click_rate for c in summaries])
        # NOTE: mean of per-campaign CTOR, not total clicks / total opens
        ctor = mean([c.ctor for c in summaries])
    else:
        open_rate = as_fraction(stats.get("avg_open_rate"))
        click_rate = as_fraction(stats.get("avg_click_rate"))
        ctor = safe_div(click_rate, open_rate)

    list_size = safe_int(stats.get("member_count"))
    new_subs = safe_int(growth.get("subscribed"))
    lost_subs = safe_int(growth.get("unsubscribed")) + safe_int(growth.get("cleaned"))

    active = [
        summarize_automation(a)
        for a in automations
        if a.get("status") == ACTIVE_AUTOMATION_STATUS
    ]
    top = select_top_performers(summaries, key=lambda c: c.open_rate)

    return EmailMarketingMetrics(
        fetched_at=fetched_at,
        list_id=list_id,
        list_name=list_name or str(list_data.get("name") or list_id),
        list_size=list_size,
        open_rate=round_rate(open_rate),
        click_rate=round_rate(click_rate),
        click_to_open_rate=round_rate(min(ctor, 1.0)),
        unsubscribe_rate=round_rate(as_fraction(stats.get("unsubscribe_rate"))),
        bounce_rate_hard=round_rate(as_fraction(stats.get("hard_bounce_rate"))),
        campaign_count_30d=n,
        email_revenue_30d=round_money(sum(c.revenue for c in summaries)),
        new_subscribers_30d=new_subs,
        lost_subscribers_30d=lost_subs,
        list_growth_rate=round_rate(safe_div(new_subs - lost_subs, list_size)),
        automation_count=len(active),
        automations=active,
        top_campaigns=[_rounded(c) for c in top],
    )
