"""FunnelScope — Shared Metric Arithmetic.

Every connector reduces vendor payloads with these helpers so that division
guards, rounding precision and top-N selection behave identically across
platforms.
"""

from typing import Any, Callable, List, Sequence, TypeVar

from funnelscope.config import settings

T = TypeVar("T")

MONEY_PRECISION = 2  # currency and plain decimal ratios
RATE_PRECISION = 4  # fractions shown as percentages with one decimal


def safe_float(value: Any) -> float:
    """Safely convert a value to float."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def safe_int(value: Any) -> int:
    """Safely convert a value (including numeric strings like "12.0") to int."""
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 0


def safe_div(numerator: float, denominator: float) -> float:
    """X / Y, or 0 when Y is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator


def mean(values: Sequence[float]) -> float:
    return safe_div(sum(values), len(values))


def round_money(value: float) -> float:
    return round(value, MONEY_PRECISION)


def round_rate(value: float) -> float:
    return round(value, RATE_PRECISION)


def select_top_performers(
    items: Sequence[T],
    key: Callable[[T], float],
    multiplier: float | None = None,
    limit: int | None = None,
) -> List[T]:
    """Return the outliers of a window, best first.

    Keeps items whose ``key`` is at least ``multiplier`` × the window average
    of ``key`` across all items, sorted descending, capped at ``limit``.
    Returns fewer than ``limit`` items when fewer qualify. Items scoring 0
    never qualify, so an all-zero window yields an empty list.
    """
    if not items:
        return []
    multiplier = settings.outlier_multiplier if multiplier is None else multiplier
    limit = settings.top_n_limit if limit is None else limit

    threshold = mean([key(item) for item in items]) * multiplier
    survivors = [item for item in items if key(item) > 0 and key(item) >= threshold]
    survivors.sort(key=key, reverse=True)
    return survivors[:limit]


def as_fraction(rate: Any) -> float:
    """A vendor rate already expressed as a fraction, clamped to [0, 1].

    The value is never rescaled, so ordering between inputs is preserved.
    """
    return min(max(safe_float(rate), 0.0), 1.0)
