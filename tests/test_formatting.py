from funnelscope.core.formatting import (
    fmt_count,
    fmt_money,
    fmt_number,
    fmt_pct,
    fmt_usd,
)


def test_fmt_pct():
    assert fmt_pct(0.4213) == "42.1%"
    assert fmt_pct(0.0125, 2) == "1.25%"
    assert fmt_pct(0) == "0.0%"


def test_fmt_usd_abbreviates_without_decimals():
    assert fmt_usd(950) == "$950"
    assert fmt_usd(12400) == "$12K"
    assert fmt_usd(3_400_000) == "$3M"


def test_fmt_count():
    assert fmt_count(950) == "950"
    assert fmt_count(12400) == "12.4K"
    assert fmt_count(3_400_000) == "3.4M"


def test_fmt_number():
    assert fmt_number(12345) == "12,345"
    assert fmt_number(3.0) == "3"
    assert fmt_number(29.5) == "29.5"


def test_fmt_money():
    assert fmt_money(12345.5) == "$12,345.50"
    assert fmt_money(0) == "$0.00"


def test_suffix_is_chosen_after_rounding():
    assert fmt_usd(999.4) == "$999"
    assert fmt_usd(999.6) == "$1K"
    assert fmt_usd(999_999) == "$1M"
    assert fmt_count(999.999) == "1.0K"
    assert fmt_count(999_960) == "1.0M"
    assert fmt_count(999_940) == "999.9K"
