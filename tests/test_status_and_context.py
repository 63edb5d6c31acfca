from funnelscope.models.credentials import MailchimpCredentials, StoredCredentials
from funnelscope.models.metrics import ChannelSessions, ProductSummary, StoredMetrics
from funnelscope.services.prompt_context import CLOSING_NOTE, HEADING, summarize
from funnelscope.services.status import build_statuses


def _preview(status):
    return {item.label: item.value for item in status.preview}


def test_nothing_connected():
    statuses = build_statuses(StoredCredentials(), StoredMetrics())
    for status in statuses.model_dump().values():
        assert status == {"connected": False, "last_synced": None, "preview": None}


def test_connected_without_cached_metrics_has_no_preview():
    creds = StoredCredentials(email_marketing=MailchimpCredentials(api_key="key-us21"))
    statuses = build_statuses(creds, StoredMetrics())
    assert statuses.email_marketing.connected is True
    assert statuses.email_marketing.preview is None
    assert statuses.storefront.connected is False


def test_previews_format_cached_metrics(email_metrics, storefront_metrics, web_metrics, ads_metrics):
    metrics = StoredMetrics(
        email_marketing=email_metrics,
        storefront=storefront_metrics,
        web_analytics=web_metrics,
        paid_ads=ads_metrics,
    )
    statuses = build_statuses(StoredCredentials(), metrics)

    assert statuses.storefront.last_synced == storefront_metrics.fetched_at
    assert _preview(statuses.email_marketing) == {
        "List size": "12.4K",
        "Open rate": "42.1%",
        "CTOR": "7.4%",
        "Growth (30d)": "+120 / -15",
        "Automations": "2",
    }
    assert _preview(statuses.storefront) == {
        "Revenue (30d)": "$12K",
        "Orders (30d)": "124",
        "AOV": "$100",
        "Repeat rate": "25.0%",
        "Customers": "950",
    }
    assert _preview(statuses.web_analytics)["Sessions (30d)"] == "3.4M"
    assert _preview(statuses.web_analytics)["Top channel"] == "Organic Search"
    assert _preview(statuses.paid_ads) == {
        "Spend (30d)": "$950",
        "Clicks (30d)": "12.4K",
        "CTR": "2.3%",
        "Conversions": "29.5",
    }
    for status in statuses.model_dump().values():
        assert 3 <= len(status["preview"]) <= 6


def test_status_builder_is_idempotent(storefront_metrics):
    metrics = StoredMetrics(storefront=storefront_metrics)
    assert build_statuses(StoredCredentials(), metrics) == build_statuses(StoredCredentials(), metrics)


def test_prompt_context_is_empty_without_cached_metrics():
    assert summarize(StoredMetrics()) == ""


def test_prompt_context_renders_cached_platforms_in_order(storefront_metrics, ads_metrics, email_metrics):
    text = summarize(StoredMetrics(paid_ads=ads_metrics, storefront=storefront_metrics, email_marketing=email_metrics))

    assert text.startswith(HEADING + "\n")
    assert text.endswith(CLOSING_NOTE)
    mailchimp = text.index("### Mailchimp (Email Marketing)")
    woo = text.index("### WooCommerce (Ecommerce)")
    ads = text.index("### Google Ads (Paid Traffic)")
    assert mailchimp < woo < ads
    assert "### Google Analytics 4 (Traffic)" not in text
    assert "- Average order value (30d): $100.00" in text
    assert "- Total ad spend last 30 days: $950.00 USD" in text


def test_prompt_context_lists_sub_items(storefront_metrics, web_metrics):
    storefront = storefront_metrics.model_copy(
        update={"top_products_12m": [ProductSummary(product_id=2, name="Tee", quantity_sold=9)]}
    )
    web = web_metrics.model_copy(update={"channels": [ChannelSessions(channel="Direct", sessions=1200)]})
    text = summarize(StoredMetrics(storefront=storefront, web_analytics=web))

    assert '  - "Tee" — 9 units' in text
    assert "  - Direct: 1,200" in text


def test_prompt_context_is_deterministic(email_metrics):
    metrics = StoredMetrics(email_marketing=email_metrics)
    assert summarize(metrics) == summarize(metrics)
