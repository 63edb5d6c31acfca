"""FunnelScope — GA4 runReport → Normalized Transformer."""

from datetime import datetime
from typing import Any, Dict, List

from funnelscope.core.metric_math import as_fraction, round_rate, safe_int
from funnelscope.models.metrics import (
    ChannelSessions,
    DailySessions,
    WebAnalyticsMetrics,
)


def _dimension(row: Dict[str, Any], i: int = 0) -> str:
    values = row.get("dimensionValues") or []
    return str(values[i].get("value", "")) if len(values) > i else ""


def _metric(row: Dict[str, Any], i: int) -> str:
    values = row.get("metricValues") or []
    return values[i].get("value", "0") if len(values) > i else "0"


def parse_channels(report: Dict[str, Any]) -> List[ChannelSessions]:
    """Sessions per default channel group, as ordered by the report."""
    return [
        ChannelSessions(
            channel=_dimension(row) or "Unknown",
            sessions=safe_int(_metric(row, 0)),
        )
        for row in report.get("rows") or []
    ]


def parse_daily_sessions(report: Dict[str, Any]) -> List[DailySessions]:
    """Daily time series; GA4 ``date`` dimension values are YYYYMMDD."""
    points = []
    for row in report.get("rows") or []:
        raw = _dimension(row)
        day = f"{raw[:4]}-{raw[4:6]}-{raw[6:8]}" if len(raw) == 8 else raw
        points.append(DailySessions(date=day, sessions=safe_int(_metric(row, 0))))
    points.sort(key=lambda p: p.date)
    return points


def build_web_metrics(
    summary: Dict[str, Any],
    channels_report: Dict[str, Any],
    daily_report: Dict[str, Any],
    *,
    property_id: str,
    fetched_at: datetime,
) -> WebAnalyticsMetrics:
    rows = summary.get("rows") or []
    row = rows[0] if rows else {}
    channels = parse_channels(channels_report)

    return WebAnalyticsMetrics(
        fetched_at=fetched_at,
        property_id=property_id,
        monthly_sessions=safe_int(_metric(row, 0)),
        bounce_rate=round_rate(as_fraction(_metric(row, 1))),
        new_users_30d=safe_int(_metric(row, 2)),
        engaged_sessions_30d=safe_int(_metric(row, 3)),
        top_channel=channels[0].channel if channels else "Unknown",
        channels=channels,
        daily_sessions=parse_daily_sessions(daily_report),
    )
