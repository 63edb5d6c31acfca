"""FunnelScope — Prompt-Context Summarizer.

Renders the cached metrics into a deterministic text block for the report
synthesis prompt. Returns "" when nothing is cached so callers can leave the
section out entirely.
"""

from typing import List

from funnelscope.models.metrics import StoredMetrics
from funnelscope.services.registry import PLATFORMS

HEADING = "## Live Platform Metrics (real-time API data)"

CLOSING_NOTE = (
    "Note: The above are live metrics fetched directly from integrated platforms. "
    "These are authoritative data points — use them to grade the relevant funnel "
    "stages with HIGH confidence."
)


def summarize(metrics: StoredMetrics) -> str:
    body: List[str] = []
    for key, spec in PLATFORMS.items():
        cached = getattr(metrics, key)
        if cached is None:
            continue
        body.extend(spec.section(cached))
        body.append("")

    if not body:
        return ""

    return "\n".join([HEADING, "", *body, CLOSING_NOTE])
