import asyncio

import httpx
import pytest

from funnelscope.connectors.woocommerce.client import WooCommerceConnector
from funnelscope.connectors.woocommerce.transformer import (
    analyze_repeat_purchases,
    header_total,
    parse_sales_report,
)
from funnelscope.core.errors import AuthError
from funnelscope.models.credentials import WooCommerceCredentials

API_PREFIX = "/wp-json/wc/v3"
DAY_30 = "2026-02-13"  # fixed clock minus 30 days

ORDERS = [
    {"id": 1, "customer_id": 7, "date_created": "2026-01-01T09:00:00", "line_items": [{"product_id": 1, "name": "Mug"}]},
    {
        "id": 2,
        "customer_id": 7,
        "date_created": "2026-02-01T09:00:00",
        "line_items": [
            {"product_id": 2, "name": "Tee"},
            {"product_id": 2, "name": "Tee"},
            {"product_id": 3, "name": "Cap"},
        ],
    },
    {"id": 3, "customer_id": 8, "date_created": "2026-01-15T09:00:00", "line_items": [{"product_id": 1, "name": "Mug"}]},
    {"id": 4, "customer_id": 0, "date_created": "2026-01-16T09:00:00", "line_items": [{"product_id": 1, "name": "Mug"}]},
    {"id": 5, "customer_id": 0, "date_created": "2026-01-17T09:00:00", "line_items": [{"product_id": 4, "name": "Bag"}]},
    {"id": 6, "customer_id": 9, "date_created": "2026-02-10T09:00:00", "line_items": [{"product_id": 3, "name": "Cap"}]},
    {"id": 7, "customer_id": 9, "date_created": "2026-01-05T09:00:00", "line_items": [{"product_id": 1, "name": "Mug"}]},
]


def _total(n):
    return httpx.Response(200, json=[{}], headers={"X-WP-Total": str(n)})


def woo_handler(fail=(), empty=False, seen=None):
    """Route WooCommerce calls; ``fail`` names calls answered with an error."""

    def respond(name, build):
        if name in fail:
            return httpx.Response(401, json={"code": "woocommerce_rest_cannot_view", "message": "Sorry, you cannot list resources."})
        return build()

    def handler(request):
        if seen is not None:
            seen.append(request)
        path = request.url.path[len(API_PREFIX):]
        params = request.url.params

        if path == "/reports/sales":
            if params["date_min"] == DAY_30:
                body = [{"total_sales": "0.00", "num_orders": 0}] if empty else [{"total_sales": "300.00", "num_orders": 3}]
                return respond("sales_30d", lambda: httpx.Response(200, json=body))
            body = [{"total_sales": "0.00", "num_orders": 0}] if empty else [{"total_sales": "3600.00", "num_orders": 24}]
            return respond("sales_12m", lambda: httpx.Response(200, json=body))
        if path == "/customers":
            if "role" not in params:
                return respond("customers", lambda: _total(0 if empty else 120))
            recent = params["after"].startswith(DAY_30)
            return respond("customers", lambda: _total(0 if empty else (8 if recent else 60)))
        if path == "/products":
            return respond("products", lambda: _total(0 if empty else 45))
        if path == "/orders" and params["status"] == "refunded":
            recent = params["after"].startswith(DAY_30)
            return respond("refunds", lambda: _total(0 if empty else (1 if recent else 4)))
        if path == "/orders" and params["status"] == "completed":
            page = [] if empty or params["page"] != "1" else ORDERS
            return respond("orders", lambda: httpx.Response(200, json=page))
        if path == "/settings/general/woocommerce_currency":
            return respond("currency", lambda: httpx.Response(200, json={"id": "woocommerce_currency", "value": "EUR"}))
        if path == "/reports/top_sellers":
            sellers = [] if empty else [
                {"title": "Mug", "product_id": 1, "quantity": 5},
                {"title": "Tee", "product_id": 2, "quantity": 9},
            ]
            return respond("top_sellers", lambda: httpx.Response(200, json=sellers))
        raise AssertionError(f"unexpected call {request.url}")

    return handler


def fetch(mock_client, fixed_clock, handler):
    connector = WooCommerceConnector(client=mock_client(handler), clock=fixed_clock)
    credentials = WooCommerceCredentials(
        store_url="https://shop.example.com/",
        consumer_key="ck_live",
        consumer_secret="cs_live",
    )
    return asyncio.run(connector.fetch(credentials))


def test_header_total():
    assert header_total(httpx.Response(200, headers={"X-WP-Total": "12"})) == 12
    assert header_total(httpx.Response(200)) == 0
    assert header_total(httpx.Response(200, headers={"X-WP-Total": "abc"})) == 0


def test_parse_sales_report():
    assert parse_sales_report([{"total_sales": "300.00", "num_orders": 3}]) == (3, 300.0)
    assert parse_sales_report([]) == (0, 0.0)


def test_fetch_normalizes_store(mock_client, fixed_clock):
    seen = []
    m = fetch(mock_client, fixed_clock, woo_handler(seen=seen))

    assert m.platform == "storefront"
    assert m.store_url == "https://shop.example.com"
    assert m.currency == "EUR"
    assert m.total_orders_30d == 3
    assert m.total_revenue_30d == 300.0
    assert m.aov_30d == 100.0
    assert m.total_orders_12m == 24
    assert m.aov_12m == 150.0
    assert m.total_customers == 120
    assert m.new_customers_30d == 8
    assert m.new_customers_12m == 60
    assert m.refund_count_30d == 1
    assert m.refund_count_12m == 4
    assert m.product_count == 45
    assert [p.name for p in m.top_products_12m] == ["Tee", "Mug"]

    assert all(r.headers["authorization"].startswith("Basic ") for r in seen)


def test_repeat_purchase_analysis_uses_second_order_per_customer(mock_client, fixed_clock):
    m = fetch(mock_client, fixed_clock, woo_handler())

    # customers 7, 8 and 9 in the sample; 7 and 9 ordered twice
    assert m.repeat_purchase_rate == 0.6667
    assert m.repeat_sample_size == len(ORDERS)
    assert [(p.name, p.quantity_sold) for p in m.repeat_purchase_products] == [
        ("Cap", 2),
        ("Tee", 1),
    ]


def test_repeat_analysis_ignores_guests():
    guests = [{"customer_id": 0, "line_items": []}, {"customer_id": 0, "line_items": []}]
    analysis = analyze_repeat_purchases(guests)
    assert analysis.rate == 0.0
    assert analysis.customers == 0
    assert analysis.sample_size == 2


def test_empty_store_has_zero_aov(mock_client, fixed_clock):
    m = fetch(mock_client, fixed_clock, woo_handler(empty=True))

    assert m.total_orders_30d == 0
    assert m.aov_30d == 0.0
    assert m.aov_12m == 0.0
    assert m.repeat_purchase_rate == 0.0
    assert m.top_products_12m == []
    assert m.repeat_purchase_products == []


def test_failed_secondary_calls_degrade_to_defaults(mock_client, fixed_clock):
    handler = woo_handler(fail={"customers", "orders", "currency", "top_sellers"})
    m = fetch(mock_client, fixed_clock, handler)

    assert m.aov_30d == 100.0
    assert m.total_customers == 0
    assert m.new_customers_30d == 0
    assert m.currency == "USD"
    assert m.repeat_sample_size == 0
    assert m.top_products_12m == []
    assert m.product_count == 45


def test_failed_headline_report_is_fatal(mock_client, fixed_clock):
    with pytest.raises(AuthError) as exc_info:
        fetch(mock_client, fixed_clock, woo_handler(fail={"sales_30d"}))
    assert "Sorry, you cannot list resources." in str(exc_info.value)
    assert exc_info.value.platform == "storefront"
