"""FunnelScope — WooCommerce Raw → Normalized Transformer."""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Tuple

import httpx

from funnelscope.config import settings
from funnelscope.core.metric_math import (
    round_money,
    round_rate,
    safe_div,
    safe_float,
    safe_int,
)
from funnelscope.models.metrics import ProductSummary, StorefrontMetrics

TOTAL_HEADER = "X-WP-Total"


def header_total(resp: httpx.Response) -> int:
    """Collection size from ``X-WP-Total``; 0 when absent or malformed."""
    return max(safe_int(resp.headers.get(TOTAL_HEADER, "0")), 0)


def parse_sales_report(data: Any) -> Tuple[int, float]:
    """(orders, revenue) from ``reports/sales``.

    WC v3 answers with a one-element array; revenue is ``total_sales``.
    """
    raw = data[0] if isinstance(data, list) and data else data
    if not isinstance(raw, dict):
        return 0, 0.0
    return safe_int(raw.get("num_orders")), safe_float(raw.get("total_sales"))


def parse_top_sellers(data: Any) -> List[ProductSummary]:
    if not isinstance(data, list):
        return []
    products = [
        ProductSummary(
            product_id=safe_int(item.get("product_id") or item.get("id")),
            name=str(
                item.get("title") or item.get("name") or f"Product {item.get('product_id')}"
            ),
            quantity_sold=safe_int(item.get("quantity")),
        )
        for item in data
        if isinstance(item, dict)
    ]
    products.sort(key=lambda p: p.quantity_sold, reverse=True)
    return products[: settings.top_n_limit]


@dataclass
class RepeatPurchaseAnalysis:
    """Sample-based repeat-purchase estimate (not a population statistic)."""

    rate: float = 0.0
    sample_size: int = 0  # orders in the sample
    customers: int = 0  # distinct registered customers in the sample
    repeat_customers: int = 0
    second_order_products: List[ProductSummary] = field(default_factory=list)


def analyze_repeat_purchases(orders: List[Dict[str, Any]]) -> RepeatPurchaseAnalysis:
    """Group the order sample by customer and inspect each second order.

    Guest orders (``customer_id`` 0) are skipped. Repeat rate is customers
    with ≥2 sampled orders over customers with ≥1. Only a repeat customer's
    chronologically second order counts toward "what they buy second";
    each product counts once per customer.
    """
    by_customer: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
    for order in orders:
        customer_id = safe_int(order.get("customer_id"))
        if not customer_id:
            continue
        by_customer[customer_id].append(order)

    counts: Counter = Counter()
    names: Dict[int, str] = {}
    repeat_customers = 0
    for customer_orders in by_customer.values():
        if len(customer_orders) < 2:
            continue
        repeat_customers += 1
        customer_orders.sort(key=lambda o: str(o.get("date_created") or ""))
        seen = set()
        for item in customer_orders[1].get("line_items") or []:
            pid = safe_int(item.get("product_id"))
            if not pid or pid in seen:
                continue
            seen.add(pid)
            counts[pid] += 1
            names.setdefault(pid, str(item.get("name") or f"Product {pid}"))

    # Counter.most_common keeps first-seen order among equal counts
    ranked = counts.most_common(settings.top_n_limit)
    return RepeatPurchaseAnalysis(
        rate=safe_div(repeat_customers, len(by_customer)),
        sample_size=len(orders),
        customers=len(by_customer),
        repeat_customers=repeat_customers,
        second_order_products=[
            ProductSummary(product_id=pid, name=names[pid], quantity_sold=count)
            for pid, count in ranked
        ],
    )


def build_storefront_metrics(
    *,
    store_url: str,
    fetched_at: datetime,
    sales_30d: Any,
    sales_12m: Any,
    currency: str,
    total_customers: int,
    new_customers_30d: int,
    new_customers_12m: int,
    product_count: int,
    refunds_30d: int,
    refunds_12m: int,
    top_sellers: Any,
    orders_sample: List[Dict[str, Any]],
) -> StorefrontMetrics:
    orders_30d, revenue_30d = parse_sales_report(sales_30d)
    orders_12m, revenue_12m = parse_sales_report(sales_12m)
    repeat = analyze_repeat_purchases(orders_sample)

    return StorefrontMetrics(
        fetched_at=fetched_at,
        store_url=store_url,
        currency=currency or "USD",
        total_orders_30d=orders_30d,
        total_revenue_30d=round_money(revenue_30d),
        aov_30d=round_money(safe_div(revenue_30d, orders_30d)),
        new_customers_30d=new_customers_30d,
        refund_count_30d=refunds_30d,
        total_orders_12m=orders_12m,
        total_revenue_12m=round_money(revenue_12m),
        aov_12m=round_money(safe_div(revenue_12m, orders_12m)),
        new_customers_12m=new_customers_12m,
        refund_count_12m=refunds_12m,
        total_customers=total_customers,
        product_count=product_count,
        repeat_purchase_rate=round_rate(repeat.rate),
        repeat_sample_size=repeat.sample_size,
        top_products_12m=parse_top_sellers(top_sellers),
        repeat_purchase_products=repeat.second_order_products,
    )
