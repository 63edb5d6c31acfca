"""FunnelScope — WooCommerce Connector.

HTTP Basic auth with the REST API consumer key / secret. Collection sizes
come from the ``X-WP-Total`` header of ``per_page=1`` requests.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List

import httpx

from funnelscope.config import settings
from funnelscope.connectors.base import PlatformConnector
from funnelscope.connectors.http_client import VendorClient
from funnelscope.connectors.woocommerce.transformer import (
    build_storefront_metrics,
    header_total,
)
from funnelscope.models.credentials import WooCommerceCredentials
from funnelscope.models.metrics import StorefrontMetrics

ORDER_SAMPLE_FIELDS = "id,customer_id,date_created,line_items"


def _day(d: datetime) -> str:
    """``reports/*`` endpoints take YYYY-MM-DD."""
    return d.strftime("%Y-%m-%d")


def _ts(d: datetime) -> str:
    """Collection endpoints take full ISO-8601 timestamps (no offset)."""
    return d.strftime("%Y-%m-%dT%H:%M:%S")


class WooCommerceConnector(PlatformConnector[WooCommerceCredentials, StorefrontMetrics]):
    """Storefront metrics from the WooCommerce REST API (v3)."""

    platform = "storefront"

    async def _fetch(
        self, http: VendorClient, credentials: WooCommerceCredentials
    ) -> StorefrontMetrics:
        base = credentials.store_url + settings.woocommerce_api_path
        auth = httpx.BasicAuth(credentials.consumer_key, credentials.consumer_secret)

        now = self.clock()
        ago_30 = now - timedelta(days=settings.metrics_window_days)
        ago_12m = now - timedelta(days=settings.long_window_days)

        def get(path: str, params: Dict[str, Any]):
            return http.request("GET", f"{base}{path}", params=params, auth=auth)

        async def total(path: str, params: Dict[str, Any]) -> int:
            resp = await get(path, {"per_page": 1, **params})
            http.raise_for_status(resp, f"WooCommerce {path}")
            return header_total(resp)

        async def report(path: str, params: Dict[str, Any]) -> Any:
            resp = await get(path, params)
            http.raise_for_status(resp, f"WooCommerce {path}")
            return http.decode(resp, f"WooCommerce {path}")

        async def currency() -> str:
            data = await report("/settings/general/woocommerce_currency", {})
            return str((data or {}).get("value") or "USD")

        async def order_page(page: int) -> List[Dict[str, Any]]:
            data = await report(
                "/orders",
                {
                    "status": "completed",
                    "after": _ts(ago_12m),
                    "per_page": settings.repeat_order_page_size,
                    "page": page,
                    "_fields": ORDER_SAMPLE_FIELDS,
                },
            )
            return data if isinstance(data, list) else []

        pages = range(1, settings.repeat_order_sample_pages + 1)
        (
            sales_30d,
            sales_12m,
            customers_all,
            customers_30d,
            customers_12m,
            products,
            refunds_30d,
            refunds_12m,
            store_currency,
            top_sellers,
            *order_pages,
        ) = await self.settle(
            report("/reports/sales", {"date_min": _day(ago_30), "date_max": _day(now)}),
            report("/reports/sales", {"date_min": _day(ago_12m), "date_max": _day(now)}),
            total("/customers", {}),
            total("/customers", {"role": "customer", "after": _ts(ago_30)}),
            total("/customers", {"role": "customer", "after": _ts(ago_12m)}),
            total("/products", {"status": "publish"}),
            total("/orders", {"status": "refunded", "after": _ts(ago_30), "before": _ts(now)}),
            total("/orders", {"status": "refunded", "after": _ts(ago_12m), "before": _ts(now)}),
            currency(),
            report(
                "/reports/top_sellers",
                {"date_min": _day(ago_12m), "date_max": _day(now), "per_page": 15},
            ),
            *[order_page(p) for p in pages],
        )

        headline = self.primary(sales_30d)

        orders_sample: List[Dict[str, Any]] = []
        for i, page in enumerate(order_pages, start=1):
            orders_sample.extend(self.secondary(page, [], f"orders_page_{i}"))

        return build_storefront_metrics(
            store_url=credentials.store_url,
            fetched_at=self.clock(),
            sales_30d=headline,
            sales_12m=self.secondary(sales_12m, [], "sales_12m"),
            currency=self.secondary(store_currency, "USD", "currency"),
            total_customers=self.secondary(customers_all, 0, "customers_total"),
            new_customers_30d=self.secondary(customers_30d, 0, "customers_30d"),
            new_customers_12m=self.secondary(customers_12m, 0, "customers_12m"),
            product_count=self.secondary(products, 0, "products_total"),
            refunds_30d=self.secondary(refunds_30d, 0, "refunds_30d"),
            refunds_12m=self.secondary(refunds_12m, 0, "refunds_12m"),
            top_sellers=self.secondary(top_sellers, [], "top_sellers"),
            orders_sample=orders_sample,
        )
