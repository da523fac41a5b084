"""
Tests for dashboard aggregates: revenue, stock, low stock, recent sales, weekly series.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lunestock.domains.inventory.dashboard import (
    compute_dashboard_stats,
    count_low_stock,
    weekly_sales_series,
)
from lunestock.domains.inventory.models import Product, ProductVariant, Sale

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)  # a Friday


def _variant(vid: str, stock: int, product_id: str = "p1") -> ProductVariant:
    return ProductVariant(id=vid, product_id=product_id, size="M", color="Negro", stock=stock)


def _sale(sid: str, when: datetime, total: str = "39.9", quantity: int = 1) -> Sale:
    return Sale(
        id=sid,
        product_name="Polo Básico",
        size="M",
        color="Negro",
        quantity=quantity,
        price=Decimal(total) / quantity,
        total=Decimal(total),
        date=when,
    )


def test_total_revenue_is_exact_sum() -> None:
    """Revenue equals the sum of sale totals with no float drift."""
    sales = [
        _sale("s1", NOW, "79.8", 2),
        _sale("s2", NOW, "39.9"),
        _sale("s3", NOW, "119.7", 3),
        _sale("s4", NOW, "0.1"),
        _sale("s5", NOW, "0.2"),
    ]
    stats = compute_dashboard_stats([], sales, now=NOW)
    assert stats.total_revenue == Decimal("239.7")
    assert stats.total_revenue == sum((s.total for s in sales), Decimal("0"))


def test_low_stock_boundary() -> None:
    """Stock 4 counts as low, stock 5 does not."""
    variants = [_variant("a", 4), _variant("b", 5), _variant("c", 0), _variant("d", 12)]
    assert count_low_stock(variants) == 2
    stats = compute_dashboard_stats(variants, [], now=NOW)
    assert stats.low_stock_items == 2
    assert stats.total_stock == 21


def test_recent_sales_window() -> None:
    """A sale exactly seven days old is recent; one second older is not."""
    sales = [
        _sale("in", NOW - timedelta(days=7)),
        _sale("out", NOW - timedelta(days=7, seconds=1)),
        _sale("today", NOW),
    ]
    stats = compute_dashboard_stats([], sales, now=NOW)
    assert stats.recent_sales == 2


def test_total_products_from_list_or_variants() -> None:
    """Product count uses the product list when given, distinct ids otherwise."""
    variants = [_variant("a", 1, "p1"), _variant("b", 1, "p1"), _variant("c", 1, "p2")]
    assert compute_dashboard_stats(variants, [], now=NOW).total_products == 2
    products = [Product(id=f"p{i}", name=f"P{i}") for i in range(3)]
    assert compute_dashboard_stats(variants, [], products=products, now=NOW).total_products == 3


def test_empty_inputs_give_zeros() -> None:
    """No rows at all renders a zeroed dashboard."""
    stats = compute_dashboard_stats([], [], now=NOW)
    assert stats.total_revenue == Decimal("0")
    assert (stats.total_stock, stats.recent_sales, stats.low_stock_items, stats.total_products) == (0, 0, 0, 0)
    series = weekly_sales_series([], now=NOW)
    assert [p.value for p in series] == [0] * 7


def test_weekly_series_shape() -> None:
    """Seven buckets, oldest first, ending today, labeled by weekday."""
    series = weekly_sales_series([], now=NOW)
    assert len(series) == 7
    assert series[-1].day == date(2024, 5, 10)
    assert series[0].day == date(2024, 5, 4)
    assert [p.label for p in series] == ["Sat", "Sun", "Mon", "Tue", "Wed", "Thu", "Fri"]
    assert all(a.day < b.day for a, b in zip(series, series[1:]))


def test_weekly_series_day_boundaries() -> None:
    """Sales on a midnight boundary land in exactly one bucket."""
    sales = [
        _sale("midnight", datetime(2024, 5, 9, 0, 0, 0, tzinfo=timezone.utc)),
        _sale("last_us", datetime(2024, 5, 8, 23, 59, 59, 999999, tzinfo=timezone.utc)),
        _sale("first_day", datetime(2024, 5, 4, 0, 0, tzinfo=timezone.utc)),
        _sale("too_old", datetime(2024, 5, 3, 23, 59, 59, tzinfo=timezone.utc)),
        _sale("end_of_today", datetime(2024, 5, 10, 23, 59, 59, 999999, tzinfo=timezone.utc)),
    ]
    series = weekly_sales_series(sales, now=NOW)
    by_day = {p.day: p.value for p in series}
    assert by_day[date(2024, 5, 9)] == 1
    assert by_day[date(2024, 5, 8)] == 1
    assert by_day[date(2024, 5, 4)] == 1
    assert by_day[date(2024, 5, 10)] == 1
    assert sum(by_day.values()) == 4


def test_weekly_series_uses_timezone_of_now() -> None:
    """Days are calendar days in the timezone of the reference time."""
    lima = timezone(timedelta(hours=-5))
    now = datetime(2024, 5, 10, 12, 0, tzinfo=lima)
    sale = _sale("late", datetime(2024, 5, 10, 3, 0, tzinfo=timezone.utc))  # 22:00 on the 9th in Lima
    series = weekly_sales_series([sale], now=now)
    by_day = {p.day: p.value for p in series}
    assert by_day[date(2024, 5, 9)] == 1
    assert by_day[date(2024, 5, 10)] == 0


@pytest.mark.parametrize("stocks", [[], [0], [1, 2, 3], [100, 0, 4, 5]])
def test_stats_non_negative(stocks: list[int]) -> None:
    """All statistics are non-negative for non-negative input."""
    variants = [_variant(str(i), s) for i, s in enumerate(stocks)]
    stats = compute_dashboard_stats(variants, [_sale("s", NOW)], now=NOW)
    assert stats.total_revenue >= 0
    assert stats.total_stock >= 0
    assert stats.low_stock_items >= 0
    assert stats.recent_sales >= 0
