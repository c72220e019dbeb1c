from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Optional

from seller_ops.core.records import get_field, number_field

DEFAULT_PLATFORM_FEE_RATE = 0.08
DEFAULT_LABEL_COST = 2.25
DEFAULT_BASE_SHIPPING_COST = 1.75


@dataclass(frozen=True)
class LineAmounts:
    revenue: float
    shipping_income: float
    total_revenue: float
    platform_fee: float
    cost_of_goods: float


@dataclass(frozen=True)
class ProfitBreakdown:
    revenue: float = 0.0
    shipping_income: float = 0.0
    total_revenue: float = 0.0
    platform_fee: float = 0.0
    cost_of_goods: float = 0.0
    additional_costs: float = 0.0
    net_profit: float = 0.0
    profit_margin: float = 0.0

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SaleFinancials:
    total_revenue: float
    platform_fee: float
    net_profit: float
    profit_margin: float
    roi: Optional[float]


def margin_percent(net_profit: float, total_revenue: float) -> float:
    if not total_revenue:
        return 0.0
    return net_profit / total_revenue * 100


def order_key(sale) -> str:
    order_number = get_field(sale, "order_number")
    if order_number is not None and str(order_number).strip():
        return str(order_number).strip()
    return "unknown_sale_{}".format(get_field(sale, "id", ""))


def sale_line_amounts(sale, fee_rate: float = DEFAULT_PLATFORM_FEE_RATE) -> LineAmounts:
    quantity = number_field(sale, "quantity_sold")
    revenue = number_field(sale, "sale_price") * quantity
    shipping_income = number_field(sale, "shipping_fee_per_unit") * quantity
    total_revenue = revenue + shipping_income
    return LineAmounts(
        revenue=revenue,
        shipping_income=shipping_income,
        total_revenue=total_revenue,
        platform_fee=total_revenue * fee_rate,
        cost_of_goods=number_field(sale, "cost_per_unit") * quantity,
    )


def calculate_profit_breakdown(
    sales: Iterable,
    fee_rate: float = DEFAULT_PLATFORM_FEE_RATE,
) -> ProfitBreakdown:
    """Aggregate sale lines into a single breakdown.

    Lines are grouped by order key; the per-order additional cost is taken
    from the first line seen for each order and added exactly once.
    """
    orders: dict[str, dict[str, float]] = {}
    for sale in sales:
        key = order_key(sale)
        amounts = sale_line_amounts(sale, fee_rate)
        totals = orders.get(key)
        if totals is None:
            totals = {
                "revenue": 0.0,
                "shipping_income": 0.0,
                "total_revenue": 0.0,
                "platform_fee": 0.0,
                "cost_of_goods": 0.0,
                "additional_costs": number_field(sale, "additional_costs"),
            }
            orders[key] = totals
        totals["revenue"] += amounts.revenue
        totals["shipping_income"] += amounts.shipping_income
        totals["total_revenue"] += amounts.total_revenue
        totals["platform_fee"] += amounts.platform_fee
        totals["cost_of_goods"] += amounts.cost_of_goods

    summed = {
        "revenue": 0.0,
        "shipping_income": 0.0,
        "total_revenue": 0.0,
        "platform_fee": 0.0,
        "cost_of_goods": 0.0,
        "additional_costs": 0.0,
    }
    for totals in orders.values():
        for field, value in totals.items():
            summed[field] += value

    net_profit = (
        summed["total_revenue"]
        - summed["platform_fee"]
        - summed["cost_of_goods"]
        - summed["additional_costs"]
    )
    return ProfitBreakdown(
        net_profit=net_profit,
        profit_margin=margin_percent(net_profit, summed["total_revenue"]),
        **summed,
    )


def calculate_total_profit(sales: Iterable, fee_rate: float = DEFAULT_PLATFORM_FEE_RATE) -> float:
    return calculate_profit_breakdown(sales, fee_rate).net_profit


def calculate_sale_financials(
    quantity: float,
    sale_price: float,
    shipping_fee_per_unit: float = 0.0,
    cost_per_unit: float = 0.0,
    additional_costs: float = 0.0,
    fee_rate: float = DEFAULT_PLATFORM_FEE_RATE,
) -> SaleFinancials:
    """Derived columns stored on a single sale row."""
    total_revenue = (sale_price + shipping_fee_per_unit) * quantity
    platform_fee = total_revenue * fee_rate
    cost_of_goods = cost_per_unit * quantity
    net_profit = total_revenue - platform_fee - cost_of_goods - additional_costs

    invested = cost_of_goods + additional_costs + platform_fee
    if invested > 0:
        roi = net_profit / invested * 100
    elif net_profit > 0:
        roi = None
    else:
        roi = 0.0

    return SaleFinancials(
        total_revenue=total_revenue,
        platform_fee=platform_fee,
        net_profit=net_profit,
        profit_margin=margin_percent(net_profit, total_revenue),
        roi=roi,
    )


def calculate_cancellation_loss(refund_amount: float, shipping_status: str, settings=None) -> float:
    loss = float(refund_amount or 0)
    if shipping_status == "after_shipping":
        label_cost = number_field(settings, "label_cost") if settings is not None else 0.0
        base_shipping = number_field(settings, "shipping_base_cost") if settings is not None else 0.0
        loss += label_cost or DEFAULT_LABEL_COST
        loss += base_shipping or DEFAULT_BASE_SHIPPING_COST
    return loss


def calculate_total_cancellation_losses(canceled_orders: Iterable, settings=None) -> dict:
    summary = {
        "total_loss": 0.0,
        "before_shipping_loss": 0.0,
        "after_shipping_loss": 0.0,
        "total_orders": 0,
        "before_shipping_orders": 0,
        "after_shipping_orders": 0,
    }
    for order in canceled_orders:
        shipping_status = get_field(order, "cancellation_type", "before_shipping")
        loss = calculate_cancellation_loss(
            number_field(order, "refund_amount"),
            shipping_status,
            settings,
        )
        summary["total_loss"] += loss
        summary["total_orders"] += 1
        if shipping_status == "after_shipping":
            summary["after_shipping_loss"] += loss
            summary["after_shipping_orders"] += 1
        else:
            summary["before_shipping_loss"] += loss
            summary["before_shipping_orders"] += 1
    return summary


def format_currency(amount: float) -> str:
    amount = float(amount or 0)
    sign = "-" if amount < 0 else ""
    return "{}${:,.2f}".format(sign, abs(amount))


def format_percentage(value: float) -> str:
    return "{:.1f}%".format(float(value or 0))
