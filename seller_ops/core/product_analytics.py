from __future__ import annotations

from typing import Iterable

from seller_ops.core.dates import normalize_date
from seller_ops.core.records import get_field, number_field

LOW_MARGIN = 15
HIGH_MARGIN = 25
HIGH_VOLUME = 20
LOW_VOLUME = 10
MAX_PRICE_INCREASE = 10


def calculate_product_analytics(products: Iterable, sales: Iterable) -> list[dict]:
    """Lifetime sales figures for every product, including unsold ones."""
    sales_by_product: dict = {}
    for sale in sales:
        sales_by_product.setdefault(get_field(sale, "product_id"), []).append(sale)

    results = []
    for product in products:
        product_id = get_field(product, "id")
        product_sales = sales_by_product.get(product_id, []) if product_id is not None else []
        quantity = sum(number_field(sale, "quantity_sold") for sale in product_sales)
        revenue = sum(number_field(sale, "total_revenue") for sale in product_sales)
        cost = sum(
            number_field(sale, "cost_per_unit") * number_field(sale, "quantity_sold")
            for sale in product_sales
        )
        profit = sum(number_field(sale, "net_profit") for sale in product_sales)
        order_count = len(product_sales)
        sale_dates = [
            normalize_date(get_field(sale, "sale_date"))
            for sale in product_sales
            if get_field(sale, "sale_date") is not None
        ]
        results.append(
            {
                "product_id": product_id,
                "sku": get_field(product, "sku"),
                "name": get_field(product, "name"),
                "current_stock": number_field(product, "quantity"),
                "cost_per_item": number_field(product, "cost_per_item"),
                "quantity_sold": quantity,
                "order_count": order_count,
                "total_revenue": revenue,
                "total_cost": cost,
                "total_profit": profit,
                "avg_quantity_per_order": quantity / order_count if order_count else 0.0,
                "avg_revenue": revenue / order_count if order_count else 0.0,
                "profit_margin": (revenue - cost) / revenue * 100 if revenue > 0 else 0.0,
                "sales_only_roi": profit / cost * 100 if cost > 0 else 0.0,
                "last_sale_date": max(sale_dates) if sale_dates else None,
            }
        )
    results.sort(key=lambda item: item["total_revenue"], reverse=True)
    return results


def pricing_recommendation(performance) -> dict:
    margin = number_field(performance, "profit_margin")
    quantity = number_field(performance, "quantity_sold")
    avg_quantity = number_field(performance, "avg_quantity_per_order")

    if margin < LOW_MARGIN:
        increase = min(MAX_PRICE_INCREASE, LOW_MARGIN - margin)
        action = "price_increase"
        message = "Raise price by {:.1f}% to reach a {}% margin.".format(increase, LOW_MARGIN)
        adjustment = increase
    elif quantity > HIGH_VOLUME and avg_quantity < 2:
        action = "bundle"
        message = "High volume with single-unit orders; offer a multi-pack bundle."
        adjustment = 0.0
    elif quantity < LOW_VOLUME and margin > HIGH_MARGIN:
        action = "marketing"
        message = "Healthy margin but few sales; invest in listing quality or promotion."
        adjustment = 0.0
    elif quantity > HIGH_VOLUME and margin > HIGH_MARGIN:
        action = "protect"
        message = "Top performer; keep price stable and protect stock levels."
        adjustment = 0.0
    else:
        action = "monitor"
        message = "Performance is steady; keep monitoring."
        adjustment = 0.0

    return {
        "sku": get_field(performance, "sku"),
        "name": get_field(performance, "name"),
        "action": action,
        "message": message,
        "price_adjustment_percent": adjustment,
        "profit_margin": margin,
    }


def generate_pricing_recommendations(performance: Iterable) -> list[dict]:
    return [pricing_recommendation(item) for item in performance]
