from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Iterable

from seller_ops.core.dates import normalize_date
from seller_ops.core.records import get_field, number_field

VELOCITY_EPSILON = 0.01
TREND_WINDOW_DAYS = 14
TREND_THRESHOLD = 0.10

CRITICAL_DAYS = 7
WARNING_DAYS = 14
GOOD_DAYS = 60

HIGH_VALUE_THRESHOLD = 500
HIGH_AVERAGE_VALUE_THRESHOLD = 200
TOP_SUPPLIER_COUNT = 5


@dataclass(frozen=True)
class SalesVelocity:
    daily_average: float = 0.0
    weekly_average: float = 0.0
    monthly_average: float = 0.0
    trend: str = "stable"

    def as_dict(self) -> dict:
        return asdict(self)


def _dated_sales(sales: Iterable, product_id=None) -> list[tuple]:
    rows = []
    for sale in sales:
        if product_id is not None and get_field(sale, "product_id") != product_id:
            continue
        sale_date = normalize_date(get_field(sale, "sale_date"))
        if sale_date is None:
            continue
        rows.append((sale_date, number_field(sale, "quantity_sold"), sale))
    rows.sort(key=lambda item: item[0])
    return rows


def _window_units(rows: list[tuple], start, end) -> float:
    return sum(quantity for sale_date, quantity, _ in rows if start <= sale_date <= end)


def calculate_sales_velocity(sales: Iterable, product_id=None) -> SalesVelocity:
    """Average units per day over the span of recorded sales.

    The trend compares the 14 days ending at the latest sale against the 14
    days before that; a move beyond 10% either way changes the label.
    """
    rows = _dated_sales(sales, product_id)
    if not rows:
        return SalesVelocity()

    first_date = rows[0][0]
    last_date = rows[-1][0]
    total_days = max(1, (last_date - first_date).days)
    total_units = sum(quantity for _, quantity, _ in rows)
    daily = total_units / total_days

    recent_start = last_date - timedelta(days=TREND_WINDOW_DAYS - 1)
    previous_end = recent_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=TREND_WINDOW_DAYS - 1)
    recent_avg = _window_units(rows, recent_start, last_date) / TREND_WINDOW_DAYS
    previous_avg = _window_units(rows, previous_start, previous_end) / TREND_WINDOW_DAYS

    trend = "stable"
    if recent_avg > previous_avg * (1 + TREND_THRESHOLD):
        trend = "increasing"
    elif recent_avg < previous_avg * (1 - TREND_THRESHOLD):
        trend = "decreasing"

    return SalesVelocity(
        daily_average=daily,
        weekly_average=daily * 7,
        monthly_average=daily * 30,
        trend=trend,
    )


def days_of_stock(quantity: float, daily_velocity: float) -> float:
    return float(quantity or 0) / max(daily_velocity, VELOCITY_EPSILON)


def classify_health(days: float) -> str:
    if days <= CRITICAL_DAYS:
        return "critical"
    if days <= WARNING_DAYS:
        return "warning"
    if days <= GOOD_DAYS:
        return "good"
    return "overstocked"


def assess_product_health(product, sales: Iterable) -> dict:
    product_id = get_field(product, "id")
    # A product without an id has no sales of its own.
    product_sales = [] if product_id is None else [
        sale for sale in sales if get_field(sale, "product_id") == product_id
    ]
    velocity = calculate_sales_velocity(product_sales)
    quantity = number_field(product, "quantity")
    days = days_of_stock(quantity, velocity.daily_average)
    return {
        "product_id": product_id,
        "sku": get_field(product, "sku"),
        "name": get_field(product, "name"),
        "quantity": quantity,
        "daily_velocity": velocity.daily_average,
        "trend": velocity.trend,
        "days_of_stock": days,
        "health": classify_health(days),
    }


def summarize_inventory_health(products: Iterable, sales: Iterable) -> dict:
    sales = list(sales)
    items = [assess_product_health(product, sales) for product in products]
    counts = {"critical": 0, "warning": 0, "good": 0, "overstocked": 0}
    for item in items:
        counts[item["health"]] += 1
    items.sort(key=lambda item: item["days_of_stock"])
    return {"counts": counts, "products": items}


def calculate_health_score(status_counts: dict) -> int:
    active = status_counts.get("active", 0)
    low_stock = status_counts.get("low_stock", 0)
    total = sum(status_counts.values())
    if not total:
        return 0
    return round((active * 1.0 + low_stock * 0.4) / total * 100)


def health_status_label(score: float) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 75:
        return "Good"
    if score >= 60:
        return "Average"
    if score >= 40:
        return "Needs Attention"
    return "Critical"


def _stock_value(product) -> float:
    value = get_field(product, "stock_value")
    if value is not None:
        return number_field(product, "stock_value")
    return number_field(product, "quantity") * number_field(product, "cost_per_item")


def inventory_status_breakdown(products: Iterable) -> dict:
    statuses: dict[str, dict] = {}
    suppliers: dict[str, dict] = {}
    total_value = 0.0
    high_value_items = 0
    product_count = 0

    for product in products:
        product_count += 1
        status = get_field(product, "status", "active")
        value = _stock_value(product)
        total_value += value
        if value > HIGH_VALUE_THRESHOLD:
            high_value_items += 1

        bucket = statuses.setdefault(status, {"count": 0, "value": 0.0})
        bucket["count"] += 1
        bucket["value"] += value

        supplier = get_field(product, "supplier") or "Unknown"
        supplier_bucket = suppliers.setdefault(supplier, {"supplier": supplier, "count": 0, "value": 0.0})
        supplier_bucket["count"] += 1
        supplier_bucket["value"] += value

    status_counts = {status: bucket["count"] for status, bucket in statuses.items()}
    score = calculate_health_score(status_counts)
    average_value = total_value / product_count if product_count else 0.0
    top_suppliers = sorted(suppliers.values(), key=lambda item: item["value"], reverse=True)

    return {
        "total_products": product_count,
        "total_value": total_value,
        "average_value": average_value,
        "statuses": statuses,
        "health_score": score,
        "health_status": health_status_label(score),
        "top_suppliers": top_suppliers[:TOP_SUPPLIER_COUNT],
        "recommendations": build_health_recommendations(
            status_counts,
            high_value_items=high_value_items,
            average_value=average_value,
        ),
    }


def build_health_recommendations(
    status_counts: dict,
    *,
    high_value_items: int = 0,
    average_value: float = 0.0,
) -> list[str]:
    recommendations = []
    low_stock = status_counts.get("low_stock", 0)
    out_of_stock = status_counts.get("out_of_stock", 0)
    if low_stock:
        recommendations.append(
            "Restock {} low-stock product(s) before they sell out.".format(low_stock)
        )
    if out_of_stock:
        recommendations.append(
            "Reorder or deactivate {} out-of-stock product(s).".format(out_of_stock)
        )
    if high_value_items:
        recommendations.append(
            "Review {} high-value item(s) holding more than ${} of stock.".format(
                high_value_items, HIGH_VALUE_THRESHOLD
            )
        )
    if average_value > HIGH_AVERAGE_VALUE_THRESHOLD:
        recommendations.append(
            "Average stock value per product is high; consider smaller purchase batches."
        )
    if not recommendations:
        recommendations.append("Inventory levels look healthy.")
    return recommendations
