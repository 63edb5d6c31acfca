"""FunnelScope — Platform Registry.

One entry per platform slot: its credential model, connector, status
preview and prompt section. Everything that handles "which platform" looks
it up here instead of branching on the key.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Type

from pydantic import BaseModel

from funnelscope.connectors.base import PlatformConnector
from funnelscope.connectors.google_ads.client import GoogleAdsConnector
from funnelscope.connectors.google_analytics.client import GoogleAnalyticsConnector
from funnelscope.connectors.mailchimp.client import MailchimpConnector
from funnelscope.connectors.woocommerce.client import WooCommerceConnector
from funnelscope.core.errors import UnknownPlatformError
from funnelscope.models.credentials import (
    GoogleAdsCredentials,
    GoogleAnalyticsCredentials,
    MailchimpCredentials,
    WooCommerceCredentials,
)
from funnelscope.models.status import PreviewItem
from funnelscope.services import previews, sections


@dataclass(frozen=True)
class PlatformSpec:
    platform: str
    display_name: str
    credentials_model: Type[BaseModel]
    connector_cls: Type[PlatformConnector]
    preview: Callable[[Any], List[PreviewItem]]
    section: Callable[[Any], List[str]]

    def connector(self, **kwargs: Any) -> PlatformConnector:
        return self.connector_cls(**kwargs)

    def parse_credentials(self, raw: Any) -> BaseModel:
        if isinstance(raw, self.credentials_model):
            return raw
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        return self.credentials_model.model_validate(raw)


PLATFORMS: Dict[str, PlatformSpec] = {
    spec.platform: spec
    for spec in (
        PlatformSpec(
            platform="email_marketing",
            display_name="Mailchimp",
            credentials_model=MailchimpCredentials,
            connector_cls=MailchimpConnector,
            preview=previews.email_marketing_preview,
            section=sections.email_marketing_section,
        ),
        PlatformSpec(
            platform="storefront",
            display_name="WooCommerce",
            credentials_model=WooCommerceCredentials,
            connector_cls=WooCommerceConnector,
            preview=previews.storefront_preview,
            section=sections.storefront_section,
        ),
        PlatformSpec(
            platform="web_analytics",
            display_name="Google Analytics",
            credentials_model=GoogleAnalyticsCredentials,
            connector_cls=GoogleAnalyticsConnector,
            preview=previews.web_analytics_preview,
            section=sections.web_analytics_section,
        ),
        PlatformSpec(
            platform="paid_ads",
            display_name="Google Ads",
            credentials_model=GoogleAdsCredentials,
            connector_cls=GoogleAdsConnector,
            preview=previews.paid_ads_preview,
            section=sections.paid_ads_section,
        ),
    )
}


def get_platform(platform: str) -> PlatformSpec:
    """Look up a platform, raising ``UnknownPlatformError`` for unknown keys."""
    spec = PLATFORMS.get(platform)
    if spec is None:
        raise UnknownPlatformError(platform)
    return spec
