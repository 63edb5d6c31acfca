"""FunnelScope — Central Configuration via Pydantic Settings."""

import os
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── App ──
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # ── Outbound HTTP ──
    http_timeout_seconds: float = 30.0
    http_max_retries: int = 3
    http_retry_base_delay: float = 2.0  # seconds

    # ── Metric windows & selection ──
    metrics_window_days: int = 30
    long_window_days: int = 365
    top_n_limit: int = 10
    outlier_multiplier: float = 1.2
    repeat_order_sample_pages: int = 2  # 2 × 100 = up to 200 orders
    repeat_order_page_size: int = 100

    # ── Vendors ──
    mailchimp_api_version: str = "3.0"
    google_oauth_token_url: str = "https://oauth2.googleapis.com/token"
    ga4_api_base: str = "https://analyticsdata.googleapis.com/v1beta"
    google_ads_api_base: str = "https://googleads.googleapis.com"
    google_ads_api_version: str = "v18"
    woocommerce_api_path: str = "/wp-json/wc/v3"

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/funnelscope.db"
        return "sqlite:///./funnelscope.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
