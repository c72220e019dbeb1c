from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from seller_ops.core.dates import normalize_date
from seller_ops.core.profit import DEFAULT_PLATFORM_FEE_RATE
from seller_ops.core.records import get_field, number_field
from seller_ops.core.reports import line_profits

COMPARISON_WINDOWS = {
    "week": 7,
    "month": 30,
    "quarter": 90,
    "year": 365,
}


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def contains(self, value) -> bool:
        day = normalize_date(value)
        return day is not None and self.start <= day <= self.end


@dataclass(frozen=True)
class ComparisonRange:
    current: DateRange
    previous: DateRange


def comparison_date_range(time_range: str, today: Optional[date] = None) -> ComparisonRange:
    """Current window ends today; the previous window is the same length right before it."""
    days = COMPARISON_WINDOWS.get(time_range)
    if days is None:
        raise ValueError(
            "time_range must be one of: {}".format(", ".join(COMPARISON_WINDOWS))
        )
    end = today or date.today()
    current_start = end - timedelta(days=days - 1)
    previous_end = current_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=days - 1)
    return ComparisonRange(
        current=DateRange(current_start, end),
        previous=DateRange(previous_start, previous_end),
    )


def percentage_change(current: float, previous: float) -> Optional[float]:
    """Percent change from ``previous`` to ``current``; None when undefined."""
    if not previous:
        return None
    change = (current - previous) / abs(previous) * 100
    if not math.isfinite(change):
        return None
    return change


def calculate_product_metrics(rows: Iterable, fee_rate: float = DEFAULT_PLATFORM_FEE_RATE) -> list[dict]:
    """Per-SKU totals; an order's additional cost lands on its earliest line's SKU."""
    grouped: dict[str, dict] = {}
    for row, key, revenue, profit in line_profits(rows, fee_rate):
        sku = get_field(row, "sku")
        if not sku:
            continue
        metrics = grouped.get(sku)
        if metrics is None:
            metrics = {
                "sku": sku,
                "name": get_field(row, "product_name") or sku,
                "quantity_sold": 0.0,
                "order_keys": set(),
                "total_revenue": 0.0,
                "total_profit": 0.0,
                "last_sale_date": None,
            }
            grouped[sku] = metrics
        metrics["quantity_sold"] += number_field(row, "quantity_sold")
        metrics["order_keys"].add(key)
        metrics["total_revenue"] += revenue
        metrics["total_profit"] += profit
        sale_date = normalize_date(get_field(row, "sale_date"))
        if sale_date and (metrics["last_sale_date"] is None or sale_date > metrics["last_sale_date"]):
            metrics["last_sale_date"] = sale_date

    results = []
    for metrics in grouped.values():
        count = len(metrics.pop("order_keys"))
        metrics["order_count"] = count
        revenue = metrics["total_revenue"]
        metrics["avg_quantity_per_order"] = metrics["quantity_sold"] / count if count else 0.0
        metrics["avg_revenue"] = revenue / count if count else 0.0
        metrics["profit_margin"] = metrics["total_profit"] / revenue * 100 if revenue > 0 else 0.0
        results.append(metrics)
    return results


def split_by_period(rows: Iterable, current: DateRange, previous: DateRange) -> tuple[list, list]:
    current_rows = []
    previous_rows = []
    for row in rows:
        sale_date = get_field(row, "sale_date")
        if current.contains(sale_date):
            current_rows.append(row)
        elif previous.contains(sale_date):
            previous_rows.append(row)
    return current_rows, previous_rows


def calculate_product_trends(
    rows: Iterable,
    current_start: date,
    current_end: date,
    previous_start: date,
    previous_end: date,
    fee_rate: float = DEFAULT_PLATFORM_FEE_RATE,
) -> list[dict]:
    current_rows, previous_rows = split_by_period(
        rows,
        DateRange(current_start, current_end),
        DateRange(previous_start, previous_end),
    )
    previous_by_sku = {
        item["sku"]: item for item in calculate_product_metrics(previous_rows, fee_rate)
    }

    results = []
    for item in calculate_product_metrics(current_rows, fee_rate):
        previous = previous_by_sku.get(item["sku"])
        if previous is None:
            item["profit_margin_trend"] = None
            item["quantity_trend"] = None
        else:
            item["profit_margin_trend"] = percentage_change(
                item["profit_margin"], previous["profit_margin"]
            )
            item["quantity_trend"] = percentage_change(
                item["quantity_sold"], previous["quantity_sold"]
            )
        results.append(item)

    results.sort(key=lambda item: item["total_revenue"], reverse=True)
    return results


def summarize_period(
    rows: Iterable,
    current_start: date,
    current_end: date,
    previous_start: date,
    previous_end: date,
    fee_rate: float = DEFAULT_PLATFORM_FEE_RATE,
) -> dict:
    current_rows, previous_rows = split_by_period(
        rows,
        DateRange(current_start, current_end),
        DateRange(previous_start, previous_end),
    )
    current_lines = line_profits(current_rows, fee_rate)
    previous_lines = line_profits(previous_rows, fee_rate)
    revenue = sum(line[2] for line in current_lines)
    profit = sum(line[3] for line in current_lines)
    previous_revenue = sum(line[2] for line in previous_lines)
    previous_profit = sum(line[3] for line in previous_lines)
    return {
        "total_revenue": revenue,
        "total_profit": profit,
        "total_orders": len({line[1] for line in current_lines}),
        "average_profit_margin": profit / revenue * 100 if revenue > 0 else 0.0,
        "revenue_growth": percentage_change(revenue, previous_revenue),
        "profit_growth": percentage_change(profit, previous_profit),
    }


def rank_worst_products(products: Iterable, limit: int = 10) -> list:
    """Negative margins first, then lowest margin, then lowest total profit."""

    def _rank(item):
        margin = number_field(item, "profit_margin")
        return (0 if margin < 0 else 1, margin, number_field(item, "total_profit"))

    return sorted(products, key=_rank)[:limit]
