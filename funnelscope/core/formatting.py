"""FunnelScope — Display Formatting.

Short UI-facing renderings used by the status previews, and the longer
prose renderings used by the prompt-context summary.
"""


def fmt_pct(rate: float, decimals: int = 1) -> str:
    """0.4213 → "42.1%"."""
    return f"{rate * 100:.{decimals}f}%"


def _abbreviate(value: float, decimals: int, plain_decimals: int) -> str | None:
    """Scaled "K"/"M" rendering, or None when the value rounds below 1000.

    Thresholds are checked on the rounded value so 999_999 becomes "1M",
    never "1000K".
    """
    if round(value / 1000, decimals) >= 1000:
        return f"{value / 1_000_000:.{decimals}f}M"
    if round(value, plain_decimals) >= 1000:
        return f"{value / 1000:.{decimals}f}K"
    return None


def fmt_usd(amount: float) -> str:
    """950 → "$950", 12400 → "$12K", 3400000 → "$3M"."""
    scaled = _abbreviate(amount, 0, 0)
    if scaled is not None:
        return f"${scaled}"
    return f"${amount:.0f}"


def fmt_count(n: float) -> str:
    """950 → "950", 12400 → "12.4K", 3400000 → "3.4M"."""
    return _abbreviate(n, 1, 2) or fmt_number(n)


def fmt_number(n: float) -> str:
    """Thousands-grouped number; integral floats lose their ".0"."""
    if isinstance(n, float) and not n.is_integer():
        return f"{n:,.2f}".rstrip("0").rstrip(".")
    return f"{int(n):,}"


def fmt_money(amount: float) -> str:
    """Prose currency: 12345.5 → "$12,345.50"."""
    return f"${amount:,.2f}"
