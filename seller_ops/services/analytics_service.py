from datetime import date

from sqlalchemy.orm import Session

from seller_ops.config import get_settings
from seller_ops.core.inventory_health import inventory_status_breakdown, summarize_inventory_health
from seller_ops.core.product_analytics import calculate_product_analytics, generate_pricing_recommendations
from seller_ops.core.profit import calculate_profit_breakdown
from seller_ops.core.reorder import generate_reorder_recommendations
from seller_ops.core.reports import aggregate_monthly_report, process_sales_data
from seller_ops.core.trends import calculate_product_trends, comparison_date_range, summarize_period
from seller_ops.services.inventory_service import list_products
from seller_ops.services.sales_service import list_canceled_orders, list_sales
from seller_ops.services.settings_service import get_or_create_settings


def _fee_rate() -> float:
    return get_settings().PLATFORM_FEE_RATE


def profit_breakdown(db: Session, user_id: str, *, start_date=None, end_date=None) -> dict:
    sales = list_sales(db, user_id, start_date=start_date, end_date=end_date, status="active")
    return calculate_profit_breakdown(sales, _fee_rate()).as_dict()


def sales_report(
    db: Session,
    user_id: str,
    *,
    timeframe: str = "daily",
    start_date=None,
    end_date=None,
) -> dict:
    """Canceled sales stay in the buckets; their recorded loss is subtracted."""
    sales = list_sales(db, user_id, start_date=start_date, end_date=end_date)
    canceled = list_canceled_orders(db, user_id)
    if timeframe == "monthly_from_daily":
        report = aggregate_monthly_report(process_sales_data(sales, canceled, "daily", _fee_rate()))
    else:
        report = process_sales_data(sales, canceled, timeframe, _fee_rate())
    return report.as_dict()


def _comparison_sales(db, user_id, time_range, today):
    ranges = comparison_date_range(time_range, today)
    sales = list_sales(
        db,
        user_id,
        start_date=ranges.previous.start,
        end_date=ranges.current.end,
        status="active",
    )
    return ranges, sales


def product_trends(db: Session, user_id: str, *, time_range: str = "month", today: date | None = None) -> dict:
    ranges, sales = _comparison_sales(db, user_id, time_range, today)
    products = calculate_product_trends(
        sales,
        ranges.current.start,
        ranges.current.end,
        ranges.previous.start,
        ranges.previous.end,
        _fee_rate(),
    )
    return {
        "time_range": time_range,
        "current": {"start": ranges.current.start, "end": ranges.current.end},
        "previous": {"start": ranges.previous.start, "end": ranges.previous.end},
        "products": products,
    }


def period_summary(db: Session, user_id: str, *, time_range: str = "month", today: date | None = None) -> dict:
    ranges, sales = _comparison_sales(db, user_id, time_range, today)
    summary = summarize_period(
        sales,
        ranges.current.start,
        ranges.current.end,
        ranges.previous.start,
        ranges.previous.end,
        _fee_rate(),
    )
    summary["time_range"] = time_range
    return summary


def product_analytics(db: Session, user_id: str) -> dict:
    products = list_products(db, user_id)
    sales = list_sales(db, user_id, status="active")
    performance = calculate_product_analytics(products, sales)
    sold = [item for item in performance if item["order_count"]]
    return {
        "products": performance,
        "pricing_recommendations": generate_pricing_recommendations(sold),
    }


def inventory_health(db: Session, user_id: str) -> dict:
    products = list_products(db, user_id)
    stocked = [product for product in products if product.status != "inactive"]
    sales = list_sales(db, user_id, status="active")
    report = summarize_inventory_health(stocked, sales)
    report["status_breakdown"] = inventory_status_breakdown(products)
    return report


def reorder_recommendations(db: Session, user_id: str) -> list:
    settings = get_or_create_settings(db, user_id)
    products = list_products(db, user_id, include_inactive=False)
    sales = list_sales(db, user_id, status="active")
    return generate_reorder_recommendations(
        products,
        sales,
        minimum_profit_margin=settings.minimum_profit_margin or 0.0,
    )
