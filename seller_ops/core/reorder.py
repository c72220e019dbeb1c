from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Iterable

from seller_ops.core.dates import normalize_date
from seller_ops.core.inventory_health import (
    CRITICAL_DAYS,
    WARNING_DAYS,
    calculate_sales_velocity,
    days_of_stock,
)
from seller_ops.core.records import get_field, number_field

SAFETY_FACTOR = 1.5
INCREASING_FACTOR = 1.2
DECREASING_FACTOR = 0.8
MARGIN_WINDOW_DAYS = 30


@dataclass(frozen=True)
class ReorderRecommendation:
    product_id: object
    sku: str
    name: str
    current_stock: float
    daily_velocity: float
    monthly_velocity: float
    trend: str
    recommended_quantity: int
    priority: str
    reason: str
    estimated_days_until_stockout: int

    def as_dict(self) -> dict:
        return asdict(self)


def recommended_quantity(monthly_average: float, trend: str) -> int:
    quantity = math.ceil(monthly_average * SAFETY_FACTOR)
    if trend == "increasing":
        quantity = math.ceil(quantity * INCREASING_FACTOR)
    elif trend == "decreasing":
        quantity = math.ceil(quantity * DECREASING_FACTOR)
    return quantity


def priority_for(days: float) -> tuple[str, str]:
    rounded = math.ceil(days)
    if days <= CRITICAL_DAYS:
        return "high", "Critical inventory level: Only {} days of stock remaining".format(rounded)
    if days <= WARNING_DAYS:
        return "medium", "Low inventory: {} days of stock remaining".format(rounded)
    return "low", "Adequate inventory: {} days of stock remaining".format(rounded)


def trailing_average_margin(product_sales: list) -> float | None:
    """Mean profit margin of sales in the 30 days ending at the latest sale."""
    dated = [
        (normalize_date(get_field(sale, "sale_date")), sale)
        for sale in product_sales
    ]
    dated = [(sale_date, sale) for sale_date, sale in dated if sale_date is not None]
    if not dated:
        return None
    last_date = max(sale_date for sale_date, _ in dated)
    window_start = last_date - timedelta(days=MARGIN_WINDOW_DAYS - 1)
    margins = [
        number_field(sale, "profit_margin")
        for sale_date, sale in dated
        if sale_date >= window_start
    ]
    return sum(margins) / len(margins)


def generate_reorder_recommendations(
    products: Iterable,
    sales: Iterable,
    minimum_profit_margin: float = 0.0,
) -> list[ReorderRecommendation]:
    sales_by_product: dict = {}
    for sale in sales:
        sales_by_product.setdefault(get_field(sale, "product_id"), []).append(sale)

    recommendations = []
    for product in products:
        product_id = get_field(product, "id")
        product_sales = sales_by_product.get(product_id, []) if product_id is not None else []
        velocity = calculate_sales_velocity(product_sales)
        stock = number_field(product, "quantity")
        days = days_of_stock(stock, velocity.daily_average)

        quantity = recommended_quantity(velocity.monthly_average, velocity.trend)
        priority, reason = priority_for(days)

        average_margin = trailing_average_margin(product_sales)
        if average_margin is not None and average_margin < minimum_profit_margin:
            priority = "low"
            reason = (
                "Below minimum profit margin of {}%. Review pricing before reordering.".format(
                    minimum_profit_margin
                )
            )
            quantity = 0

        recommendations.append(
            ReorderRecommendation(
                product_id=product_id,
                sku=get_field(product, "sku", ""),
                name=get_field(product, "name", ""),
                current_stock=stock,
                daily_velocity=velocity.daily_average,
                monthly_velocity=velocity.monthly_average,
                trend=velocity.trend,
                recommended_quantity=quantity,
                priority=priority,
                reason=reason,
                estimated_days_until_stockout=math.ceil(days),
            )
        )
    return recommendations


def should_trigger_auto_reorder(recommendation: ReorderRecommendation, auto_reorder_enabled: bool) -> bool:
    return (
        bool(auto_reorder_enabled)
        and recommendation.priority == "high"
        and recommendation.estimated_days_until_stockout <= CRITICAL_DAYS
        and recommendation.recommended_quantity > 0
    )
