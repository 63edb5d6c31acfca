"""FunnelScope — Mailchimp Connector.

HTTP Basic auth (any username, API key as password) against the data center
named by the key's suffix, e.g. ``abc123-us21`` → ``us21.api.mailchimp.com``.
"""

from datetime import timedelta
from typing import Any, Dict, List, Tuple

import httpx

from funnelscope.config import settings
from funnelscope.connectors.base import PlatformConnector
from funnelscope.connectors.http_client import VendorClient
from funnelscope.connectors.mailchimp.transformer import (
    build_email_metrics,
    pick_largest_list,
)
from funnelscope.core.errors import AuthError, PrimaryFetchError, ResourceNotFoundError
from funnelscope.core.logging import get_logger
from funnelscope.models.credentials import MailchimpCredentials
from funnelscope.models.metrics import EmailMarketingMetrics

logger = get_logger("mailchimp.client")

PLATFORM = "email_marketing"


def server_prefix(api_key: str) -> str:
    """Data-center segment after the last dash of the API key."""
    key, sep, dc = api_key.rpartition("-")
    if not sep or not key or not dc:
        raise AuthError(
            "Mailchimp API key is malformed: expected '<key>-<data center>', e.g. 'abc123-us21'",
            platform=PLATFORM,
        )
    return dc


class MailchimpConnector(PlatformConnector[MailchimpCredentials, EmailMarketingMetrics]):
    """Email-marketing metrics from the Mailchimp Marketing API."""

    platform = PLATFORM

    async def _fetch(
        self, http: VendorClient, credentials: MailchimpCredentials
    ) -> EmailMarketingMetrics:
        dc = server_prefix(credentials.api_key)
        base = f"https://{dc}.api.mailchimp.com/{settings.mailchimp_api_version}"
        auth = httpx.BasicAuth("anystring", credentials.api_key)

        list_id, list_name = await self._resolve_list(http, base, auth, credentials)

        since = self.clock() - timedelta(days=settings.metrics_window_days)
        list_out, campaigns_out, automations_out, growth_out = await self.settle(
            self._list_detail(http, base, auth, list_id),
            self._campaigns(http, base, auth, list_id, since.isoformat()),
            self._automations(http, base, auth),
            self._growth(http, base, auth, list_id),
        )

        list_data = self.primary(list_out)
        return build_email_metrics(
            list_data,
            self.secondary(campaigns_out, [], "campaigns"),
            self.secondary(automations_out, [], "automations"),
            self.secondary(growth_out, {}, "growth_history"),
            list_id=list_id,
            list_name=list_name,
            fetched_at=self.clock(),
        )

    async def _resolve_list(
        self,
        http: VendorClient,
        base: str,
        auth: httpx.BasicAuth,
        credentials: MailchimpCredentials,
    ) -> Tuple[str, str]:
        """Use the configured list, or pick the account's largest one."""
        if credentials.list_id:
            return credentials.list_id, ""

        resp = await http.request(
            "GET",
            f"{base}/lists",
            params={
                "count": 100,
                "fields": "lists.id,lists.name,lists.stats.member_count",
            },
            auth=auth,
        )
        http.raise_for_status(resp, "Mailchimp API")
        lists = (http.decode(resp, "Mailchimp lists") or {}).get("lists") or []

        chosen = pick_largest_list(lists)
        if chosen is None:
            raise ResourceNotFoundError(
                "No Mailchimp audience lists found in this account",
                platform=PLATFORM,
            )
        logger.info(
            f"Auto-selected Mailchimp list {chosen.get('id')} from {len(lists)} lists",
            extra={"platform": PLATFORM},
        )
        return str(chosen.get("id", "")), str(chosen.get("name") or "")

    # ── Data calls ──

    async def _list_detail(
        self, http: VendorClient, base: str, auth: httpx.BasicAuth, list_id: str
    ) -> Dict[str, Any]:
        resp = await http.request("GET", f"{base}/lists/{list_id}", auth=auth)
        http.raise_for_status(
            resp,
            "Mailchimp list fetch",
            not_found=f"Mailchimp audience list '{list_id}' not found",
        )
        data = http.decode(resp, "Mailchimp list fetch")
        if not isinstance(data, dict):
            raise PrimaryFetchError(
                "Mailchimp list fetch returned an unexpected body", platform=PLATFORM
            )
        return data

    async def _campaigns(
        self,
        http: VendorClient,
        base: str,
        auth: httpx.BasicAuth,
        list_id: str,
        since: str,
    ) -> List[Dict[str, Any]]:
        data = await http.get_json(
            f"{base}/campaigns",
            "Mailchimp campaigns",
            params={
                "list_id": list_id,
                "since_send_time": since,
                "status": "sent",
                "count": 50,
            },
            auth=auth,
        )
        return data.get("campaigns") or []

    async def _automations(
        self, http: VendorClient, base: str, auth: httpx.BasicAuth
    ) -> List[Dict[str, Any]]:
        data = await http.get_json(
            f"{base}/automations",
            "Mailchimp automations",
            params={"count": 100},
            auth=auth,
        )
        return data.get("automations") or []

    async def _growth(
        self, http: VendorClient, base: str, auth: httpx.BasicAuth, list_id: str
    ) -> Dict[str, Any]:
        data = await http.get_json(
            f"{base}/lists/{list_id}/growth-history",
            "Mailchimp growth history",
            params={"count": 1, "sort_field": "month", "sort_dir": "DESC"},
            auth=auth,
        )
        history = data.get("history") or []
        return history[0] if history else {}
