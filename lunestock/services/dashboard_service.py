"""Dashboard screen: headline statistics and the weekly sales chart."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo

from lunestock.domains.inventory import dashboard
from lunestock.domains.inventory.models import (
    TABLE_PRODUCTS,
    TABLE_SALES,
    TABLE_VARIANTS,
    DashboardStats,
    Product,
    ProductVariant,
    Sale,
    SalesPoint,
)
from lunestock.infrastructure.data.store_client import DataStore
from lunestock.services.base import StoreService, shop_now
from lunestock.utils.config import low_stock_threshold, recent_sales_days, shop_timezone


@dataclass(frozen=True)
class DashboardView:
    stats: DashboardStats
    weekly_sales: list[SalesPoint]


class DashboardService(StoreService):
    def __init__(
        self,
        store: DataStore,
        threshold: int | None = None,
        recent_days: int | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        super().__init__(store)
        self.threshold = threshold if threshold is not None else low_stock_threshold()
        self.recent_days = recent_days if recent_days is not None else recent_sales_days()
        self.tz = tz if tz is not None else shop_timezone()

    def _reference_time(self, now: datetime | None) -> datetime:
        if now is None:
            return shop_now(self.tz)
        if self.tz is not None and now.tzinfo is not None:
            return now.astimezone(self.tz)
        return now

    def load(self, now: datetime | None = None) -> DashboardView:
        """
        Fetch products, variants and sales and derive the dashboard.

        Days are the shop's calendar days (SHOP_TIMEZONE, else the server's
        local time). Missing tables read as empty, so a fresh store shows zeros.
        """
        ref = self._reference_time(now)
        products = self._fetch_all(Product, TABLE_PRODUCTS)
        variants = self._fetch_all(ProductVariant, TABLE_VARIANTS)
        sales = self._fetch_all(Sale, TABLE_SALES)
        stats = dashboard.compute_dashboard_stats(
            variants,
            sales,
            products=products,
            now=ref,
            low_stock_threshold=self.threshold,
            recent_days=self.recent_days,
        )
        return DashboardView(stats=stats, weekly_sales=dashboard.weekly_sales_series(sales, now=ref))
