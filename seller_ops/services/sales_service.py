import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.config import get_settings
from seller_ops.core.constants import CANCELLATION_TYPES
from seller_ops.core.dates import normalize_date
from seller_ops.core.profit import calculate_cancellation_loss, calculate_sale_financials, calculate_total_cancellation_losses
from seller_ops.models.canceled_order import CanceledOrder
from seller_ops.models.sale import Sale
from seller_ops.services.inventory_service import consume_inventory_fifo, find_product
from seller_ops.services.settings_service import get_or_create_settings

logger = logging.getLogger(__name__)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def _to_number(value, field, *, minimum=0.0):
    if value is None or value == "":
        return 0.0
    number = float(value)
    if number < minimum:
        raise ValueError("{} must be non-negative".format(field))
    return number


def _order_already_charged(db: Session, user_id: str, order_number) -> bool:
    if order_number is None:
        return False
    # Unflushed lines from the same import batch.
    for pending in db.new:
        if isinstance(pending, Sale) and pending.user_id == user_id and pending.order_number == order_number:
            return True
    stmt =select(Sale.id).where(Sale.user_id == user_id, Sale.order_number == order_number).limit(1)
    return db.execute(stmt).first() is not None


def record_sale(db: Session, user_id: str, values: dict, *, commit: bool = True) -> Sale:
    """Store one sale line, drawing stock from the product's oldest batches."""
    sku = (values.get("sku") or "").strip()
    if not sku:
        raise ValueError("sku is required")
    quantity = values.get("quantity_sold")
    if quantity is None or int(quantity) <= 0:
        raise ValueError("quantity_sold must be a positive integer")
    quantity = int(quantity)
    if values.get("sale_price") is None:
        raise ValueError("sale_price is required")
    sale_price = _to_number(values.get("sale_price"), "sale_price")
    shipping_fee = _to_number(values.get("shipping_fee_per_unit"), "shipping_fee_per_unit")
    additional_costs = _to_number(values.get("additional_costs"), "additional_costs")
    sale_date = normalize_date(values.get("sale_date")) or date.today()

    product = find_product(db, user_id, sku)
    cost_per_unit = values.get("cost_per_unit")
    if product is not None:
        consumed_cost = consume_inventory_fifo(db, product, quantity, sale_date=sale_date)
        if cost_per_unit is None:
            cost_per_unit = consumed_cost / quantity
    else:
        logger.warning("Recording sale for unknown SKU %s (user %s)", sku, user_id)
    cost_per_unit = _to_number(cost_per_unit, "cost_per_unit")

    order_number = (values.get("order_number") or "").strip() or None
    # Later lines of an order keep the cost on record but not in their profit.
    charged_costs = 0.0 if _order_already_charged(db, user_id, order_number) else additional_costs
    financials = calculate_sale_financials(
        quantity,
        sale_price,
        shipping_fee,
        cost_per_unit,
        charged_costs,
        fee_rate=get_settings().PLATFORM_FEE_RATE,
    )
    sale = Sale(
        user_id=user_id,
        product_id=product.id if product is not None else None,
        sku=sku,
        product_name=values.get("product_name") or (product.name if product is not None else None),
        order_number=order_number,
        quantity_sold=quantity,
        sale_price=sale_price,
        shipping_fee_per_unit=shipping_fee,
        cost_per_unit=cost_per_unit,
        additional_costs=additional_costs,
        total_revenue=financials.total_revenue,
        platform_fee=financials.platform_fee,
        net_profit=financials.net_profit,
        profit_margin=financials.profit_margin,
        roi=financials.roi,
        sale_date=sale_date,
        status="active",
    )
    db.add(sale)
    if commit:
        _commit(db)
        db.refresh(sale)
    return sale


def list_sales(
    db: Session,
    user_id: str,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    status: str | None = None,
    sku: str | None = None,
) -> list[Sale]:
    stmt = select(Sale).where(Sale.user_id == user_id)
    if start_date is not None:
        stmt = stmt.where(Sale.sale_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Sale.sale_date <= end_date)
    if status:
        stmt = stmt.where(Sale.status == status)
    if sku:
        stmt = stmt.where(Sale.sku == sku)
    return list(db.execute(stmt.order_by(Sale.sale_date, Sale.id)).scalars().all())


def list_canceled_orders(db: Session, user_id: str) -> list[CanceledOrder]:
    return list(
        db.execute(
            select(CanceledOrder)
            .where(CanceledOrder.user_id == user_id)
            .order_by(CanceledOrder.cancellation_date, CanceledOrder.id)
        )
        .scalars()
        .all()
    )


def cancel_sale(
    db: Session,
    user_id: str,
    sale_id: int,
    *,
    cancellation_type: str,
    refund_amount: float | None = None,
    cancellation_date=None,
    notes: str | None = None,
) -> CanceledOrder:
    if cancellation_type not in CANCELLATION_TYPES:
        raise ValueError(
            "cancellation_type must be one of: {}".format(", ".join(CANCELLATION_TYPES))
        )
    sale = db.get(Sale, sale_id)
    if sale is None or sale.user_id != user_id:
        raise LookupError("Sale not found.")
    if sale.status == "canceled":
        raise ValueError("Sale is already canceled.")

    refund = sale.total_revenue if refund_amount is None else _to_number(refund_amount, "refund_amount")
    settings = get_or_create_settings(db, user_id)
    total_loss = calculate_cancellation_loss(refund, cancellation_type, settings)

    sale.status = "canceled"
    canceled = CanceledOrder(
        user_id=user_id,
        sale_id=sale.id,
        cancellation_date=normalize_date(cancellation_date) or date.today(),
        cancellation_type=cancellation_type,
        refund_amount=refund,
        shipping_cost_loss=total_loss - refund,
        product_cost_loss=0.0,
        total_loss=total_loss,
        notes=notes,
    )
    db.add(canceled)
    _commit(db)
    db.refresh(canceled)
    logger.info(
        "Sale %s canceled (%s), loss %.2f",
        sale.id,
        cancellation_type,
        total_loss,
        extra={"user_id": user_id, "sale_id": sale.id},
    )
    return canceled


def cancellation_summary(db: Session, user_id: str) -> dict:
    settings = get_or_create_settings(db, user_id)
    return calculate_total_cancellation_losses(list_canceled_orders(db, user_id), settings)
