"""FunnelScope — Normalized Metrics Models (Tagged Union).

Every connector normalizes into one of these records. The ``platform`` field
is the discriminator. Rates are fractions in [0, 1]; currency fields are
decimal amounts in the vendor's currency (USD where none is exposed).
Records are replaced wholesale on each fetch, never merged.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ─────────────────────────────────────────────
# EMAIL MARKETING (Mailchimp)
# ─────────────────────────────────────────────


class CampaignSummary(BaseModel):
    """One sent campaign from the trailing window."""

    id: str
    subject: str = ""
    send_time: str = ""
    open_rate: float = 0.0
    click_rate: float = 0.0
    ctor: float = 0.0  # unique clicks / unique opens
    revenue: float = 0.0  # 0 when ecommerce tracking is off
    unique_opens: int = 0
    unique_clicks: int = 0


class AutomationSummary(BaseModel):
    """An active automation / customer journey."""

    id: str
    title: str = ""
    status: str = ""
    emails_sent: int = 0
    open_rate: float = 0.0
    click_rate: float = 0.0


class EmailMarketingMetrics(BaseModel):
    platform: Literal["email_marketing"] = "email_marketing"
    fetched_at: datetime
    list_id: str
    list_name: str = ""
    list_size: int = 0
    open_rate: float = 0.0
    click_rate: float = 0.0
    click_to_open_rate: float = 0.0
    unsubscribe_rate: float = 0.0
    bounce_rate_hard: float = 0.0
    campaign_count_30d: int = 0
    email_revenue_30d: float = 0.0
    new_subscribers_30d: int = 0
    lost_subscribers_30d: int = 0
    list_growth_rate: float = 0.0  # (new - lost) / list_size
    automation_count: int = 0
    automations: List[AutomationSummary] = []
    top_campaigns: List[CampaignSummary] = []  # outliers, open_rate desc


# ─────────────────────────────────────────────
# STOREFRONT (WooCommerce)
# ─────────────────────────────────────────────


class ProductSummary(BaseModel):
    product_id: int
    name: str = ""
    quantity_sold: int = 0


class StorefrontMetrics(BaseModel):
    platform: Literal["storefront"] = "storefront"
    fetched_at: datetime
    store_url: str
    currency: str = "USD"
    total_orders_30d: int = 0
    total_revenue_30d: float = 0.0
    aov_30d: float = 0.0
    new_customers_30d: int = 0
    refund_count_30d: int = 0
    total_orders_12m: int = 0
    total_revenue_12m: float = 0.0
    aov_12m: float = 0.0
    new_customers_12m: int = 0
    refund_count_12m: int = 0
    total_customers: int = 0
    product_count: int = 0
    repeat_purchase_rate: float = 0.0  # sample-based estimate
    repeat_sample_size: int = 0  # orders in the repeat-purchase sample
    top_products_12m: List[ProductSummary] = []
    repeat_purchase_products: List[ProductSummary] = []  # bought as 2nd order


# ─────────────────────────────────────────────
# WEB ANALYTICS (Google Analytics 4)
# ─────────────────────────────────────────────


class ChannelSessions(BaseModel):
    channel: str
    sessions: int = 0


class DailySessions(BaseModel):
    date: str  # YYYY-MM-DD
    sessions: int = 0


class WebAnalyticsMetrics(BaseModel):
    platform: Literal["web_analytics"] = "web_analytics"
    fetched_at: datetime
    property_id: str
    monthly_sessions: int = 0
    bounce_rate: float = 0.0
    new_users_30d: int = 0
    engaged_sessions_30d: int = 0
    top_channel: str = "Unknown"
    channels: List[ChannelSessions] = []
    daily_sessions: List[DailySessions] = []


# ─────────────────────────────────────────────
# PAID ADS (Google Ads)
# ─────────────────────────────────────────────


class AdCampaignSummary(BaseModel):
    name: str
    impressions: int = 0
    clicks: int = 0
    spend: float = 0.0
    conversions: float = 0.0
    ctr: float = 0.0


class PaidAdsMetrics(BaseModel):
    platform: Literal["paid_ads"] = "paid_ads"
    fetched_at: datetime
    customer_id: str
    currency: str = "USD"
    total_spend_30d: float = 0.0
    total_clicks_30d: int = 0
    total_impressions_30d: int = 0
    avg_ctr: float = 0.0
    avg_cpc: float = 0.0
    total_conversions_30d: float = 0.0
    cost_per_conversion: float = 0.0
    conversion_rate: float = 0.0  # conversions / clicks
    campaign_count: int = 0
    top_campaigns: List[AdCampaignSummary] = []  # outliers, ctr desc


PlatformMetrics = Annotated[
    Union[
        EmailMarketingMetrics,
        StorefrontMetrics,
        WebAnalyticsMetrics,
        PaidAdsMetrics,
    ],
    Field(discriminator="platform"),
]


class StoredMetrics(BaseModel):
    """The ``platform-metrics`` document."""

    email_marketing: Optional[EmailMarketingMetrics] = None
    storefront: Optional[StorefrontMetrics] = None
    web_analytics: Optional[WebAnalyticsMetrics] = None
    paid_ads: Optional[PaidAdsMetrics] = None
    last_synced_at: Optional[datetime] = None
