"""
Dashboard aggregates: headline statistics and the weekly sales series.

Pure functions of their inputs. Nothing here is cached; the dashboard
recomputes everything from the rows it was given on every view.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from lunestock.domains.inventory.models import (
    DashboardStats,
    Product,
    ProductVariant,
    Sale,
    SalesPoint,
)

LOW_STOCK_THRESHOLD = 5
RECENT_DAYS = 7
SERIES_DAYS = 7

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _local_day(moment: datetime, now: datetime) -> date:
    """Calendar day of `moment` as seen in the timezone of `now`."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(now.tzinfo).date()


def total_revenue(sales: Iterable[Sale]) -> Decimal:
    return sum((s.total for s in sales), Decimal("0"))


def total_stock(variants: Iterable[ProductVariant]) -> int:
    return sum(v.stock for v in variants)


def count_low_stock(
    variants: Iterable[ProductVariant], threshold: int = LOW_STOCK_THRESHOLD
) -> int:
    """Variants with strictly fewer than `threshold` units."""
    return sum(1 for v in variants if v.stock < threshold)


def count_recent_sales(
    sales: Iterable[Sale], *, now: datetime | None = None, days: int = RECENT_DAYS
) -> int:
    """Sales dated at or after `now - days`."""
    cutoff = _now(now) - timedelta(days=days)
    return sum(1 for s in sales if s.date >= cutoff)


def compute_dashboard_stats(
    variants: Sequence[ProductVariant],
    sales: Sequence[Sale],
    *,
    products: Sequence[Product] | None = None,
    now: datetime | None = None,
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    recent_days: int = RECENT_DAYS,
) -> DashboardStats:
    """
    Derive the dashboard cards from the full variant and sale lists.

    Args:
        variants: Every product variant, with its current stock.
        sales: Every recorded sale.
        products: Product list for the product counter. When omitted, the
            distinct product ids referenced by `variants` are counted.
        now: Reference time. Defaults to the current UTC time.
        low_stock_threshold: Stock strictly below this counts as low.
        recent_days: Window for the recent-sales counter.

    Returns:
        DashboardStats. Every field is non-negative for non-negative input.
    """
    if products is not None:
        n_products = len(products)
    else:
        n_products = len({v.product_id for v in variants})
    return DashboardStats(
        total_revenue=total_revenue(sales),
        total_stock=total_stock(variants),
        recent_sales=count_recent_sales(sales, now=now, days=recent_days),
        low_stock_items=count_low_stock(variants, low_stock_threshold),
        total_products=n_products,
    )


def weekly_sales_series(
    sales: Iterable[Sale],
    *,
    now: datetime | None = None,
    days: int = SERIES_DAYS,
) -> list[SalesPoint]:
    """
    Count sales per calendar day for the `days` days ending today.

    Each bucket covers one whole day, from 00:00 to 23:59:59.999999 in the
    timezone of `now`, both ends included. Buckets are returned oldest first
    and the last one is today. A sale falls in at most one bucket; sales
    outside the window are ignored.
    """
    ref = _now(now)
    today = ref.date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    counts: dict[date, int] = {d: 0 for d in window}
    for sale in sales:
        d = _local_day(sale.date, ref)
        if d in counts:
            counts[d] += 1
    return [SalesPoint(label=WEEKDAY_LABELS[d.weekday()], day=d, value=counts[d]) for d in window]
