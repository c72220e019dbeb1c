from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from seller_ops.core.dates import normalize_date
from seller_ops.core.profit import DEFAULT_PLATFORM_FEE_RATE, margin_percent, order_key, sale_line_amounts
from seller_ops.core.records import get_field, number_field

TIMEFRAMES = ("daily", "monthly")


@dataclass
class ReportBucket:
    period: str
    revenue: float = 0.0
    profit: float = 0.0
    losses: float = 0.0
    order_keys: set = field(default_factory=set)

    @property
    def net_profit(self) -> float:
        return self.profit - self.losses

    @property
    def orders(self) -> int:
        return len(self.order_keys)

    def as_dict(self) -> dict:
        return {
            "period": self.period,
            "revenue": self.revenue,
            "profit": self.profit,
            "losses": self.losses,
            "net_profit": self.net_profit,
            "orders": self.orders,
        }


@dataclass
class SalesReport:
    timeframe: str
    buckets: list[ReportBucket]
    totals: dict

    def as_dict(self) -> dict:
        return {
            "timeframe": self.timeframe,
            "buckets": [bucket.as_dict() for bucket in self.buckets],
            "totals": self.totals,
        }


def bucket_key(value, timeframe: str) -> str:
    day = normalize_date(value)
    if day is None:
        raise ValueError("sale_date is required")
    if timeframe == "daily":
        return day.isoformat()
    if timeframe == "monthly":
        return day.strftime("%Y-%m")
    raise ValueError("timeframe must be one of: {}".format(", ".join(TIMEFRAMES)))


def _sale_sort_key(sale):
    return (normalize_date(get_field(sale, "sale_date")) or date.min, get_field(sale, "id", 0))


def line_profits(sales: Iterable, fee_rate: float = DEFAULT_PLATFORM_FEE_RATE) -> list[tuple]:
    """Return ``(sale, order_key, total_revenue, profit)`` in chronological order.

    The order's additional cost is charged to its earliest line only, so any
    bucketing of the result counts it once.
    """
    rows = []
    charged = set()
    for sale in sorted(sales, key=_sale_sort_key):
        key = order_key(sale)
        amounts = sale_line_amounts(sale, fee_rate)
        profit = amounts.total_revenue - amounts.platform_fee - amounts.cost_of_goods
        if key not in charged:
            charged.add(key)
            profit -= number_field(sale, "additional_costs")
        rows.append((sale, key, amounts.total_revenue, profit))
    return rows


def _loss_index(canceled_orders: Iterable) -> dict:
    losses: dict = {}
    for order in canceled_orders or ():
        sale_id = get_field(order, "sale_id")
        if sale_id is None:
            continue
        losses[sale_id] = losses.get(sale_id, 0.0) + number_field(order, "total_loss")
    return losses


def _build_totals(buckets: list[ReportBucket]) -> dict:
    revenue = sum(bucket.revenue for bucket in buckets)
    profit = sum(bucket.profit for bucket in buckets)
    losses = sum(bucket.losses for bucket in buckets)
    order_keys = set()
    for bucket in buckets:
        order_keys |= bucket.order_keys
    net_profit = profit - losses
    return {
        "revenue": revenue,
        "profit": profit,
        "losses": losses,
        "net_profit": net_profit,
        "orders": len(order_keys),
        "profit_margin": margin_percent(net_profit, revenue),
    }


def process_sales_data(
    sales: Iterable,
    canceled_orders: Iterable = (),
    timeframe: str = "daily",
    fee_rate: float = DEFAULT_PLATFORM_FEE_RATE,
) -> SalesReport:
    if timeframe not in TIMEFRAMES:
        raise ValueError("timeframe must be one of: {}".format(", ".join(TIMEFRAMES)))

    losses_by_sale = _loss_index(canceled_orders)
    grouped: dict[str, ReportBucket] = {}
    for sale, key, revenue, profit in line_profits(sales, fee_rate):
        period = bucket_key(get_field(sale, "sale_date"), timeframe)
        bucket = grouped.get(period)
        if bucket is None:
            bucket = ReportBucket(period=period)
            grouped[period] = bucket
        bucket.revenue += revenue
        bucket.profit += profit
        bucket.losses += losses_by_sale.get(get_field(sale, "id"), 0.0)
        bucket.order_keys.add(key)

    buckets = [grouped[period] for period in sorted(grouped)]
    return SalesReport(timeframe=timeframe, buckets=buckets, totals=_build_totals(buckets))


def aggregate_monthly_data(daily_buckets: Iterable[ReportBucket]) -> list[ReportBucket]:
    """Collapse daily buckets into ``YYYY-MM`` buckets."""
    grouped: dict[str, ReportBucket] = {}
    for daily in daily_buckets:
        period = daily.period[:7]
        bucket = grouped.get(period)
        if bucket is None:
            bucket = ReportBucket(period=period)
            grouped[period] = bucket
        bucket.revenue += daily.revenue
        bucket.profit += daily.profit
        bucket.losses += daily.losses
        bucket.order_keys |= daily.order_keys
    return [grouped[period] for period in sorted(grouped)]


def aggregate_monthly_report(report: SalesReport) -> SalesReport:
    if report.timeframe == "monthly":
        return report
    buckets = aggregate_monthly_data(report.buckets)
    return SalesReport(timeframe="monthly", buckets=buckets, totals=_build_totals(buckets))
