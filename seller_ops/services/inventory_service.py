import logging
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.core.costing import aggregate_batches, derive_product_status, plan_fifo_consumption
from seller_ops.core.dates import normalize_date
from seller_ops.models.product import Product
from seller_ops.models.product_batch import ProductBatch

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "name",
    "supplier",
    "source",
    "image_url",
    "product_link",
    "remarks",
    "status",
)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def list_products(db: Session, user_id: str, *, status: str | None = None, include_inactive: bool = True):
    stmt = select(Product).where(Product.user_id == user_id)
    if status:
        stmt = stmt.where(Product.status == status)
    elif not include_inactive:
        stmt = stmt.where(Product.status != "inactive")
    return list(db.execute(stmt.order_by(Product.sku)).scalars().all())


def find_product(db: Session, user_id: str, sku: str) -> Product | None:
    return (
        db.execute(select(Product).where(Product.user_id == user_id, Product.sku == sku))
        .scalars()
        .first()
    )


def get_product(db: Session, user_id: str, sku: str) -> Product:
    product = find_product(db, user_id, sku)
    if product is None:
        raise LookupError("Product not found.")
    return product


def load_batches(db: Session, product_id: int) -> list[ProductBatch]:
    return list(
        db.execute(
            select(ProductBatch)
            .where(ProductBatch.product_id == product_id)
            .order_by(ProductBatch.purchase_date, ProductBatch.id)
        )
        .scalars()
        .all()
    )


def refresh_product_aggregates(db: Session, product: Product) -> Product:
    """Recompute stock, purchase and value columns from the product's batches."""
    db.flush()
    aggregate = aggregate_batches(load_batches(db, product.id), fallback_cost=product.cost_per_item or 0)
    product.quantity = aggregate.quantity
    product.total_purchased = aggregate.total_purchased
    product.sales_qty = aggregate.sales_qty
    product.cost_per_item = aggregate.cost_per_item
    product.stock_value = aggregate.stock_value
    product.status = derive_product_status(aggregate.quantity, product.status)
    product.updated_at = datetime.now(timezone.utc)
    return product


def _add_batch(db, product, quantity, cost_per_item, purchase_date, batch_reference=None):
    batch = ProductBatch(
        product_id=product.id,
        user_id=product.user_id,
        quantity_purchased=quantity,
        quantity_available=quantity,
        cost_per_item=cost_per_item,
        purchase_date=purchase_date,
        batch_reference=batch_reference,
    )
    db.add(batch)
    return batch


def _validate_purchase(quantity, cost_per_item):
    if quantity is None or int(quantity) <= 0:
        raise ValueError("quantity must be a positive integer")
    if cost_per_item is None or float(cost_per_item) < 0:
        raise ValueError("cost_per_item must be non-negative")


def record_purchase(
    db: Session,
    product: Product,
    quantity: int,
    cost_per_item: float,
    *,
    purchase_date=None,
    batch_reference: str | None = None,
    commit: bool = True,
) -> ProductBatch:
    _validate_purchase(quantity, cost_per_item)
    purchase_date = normalize_date(purchase_date) or date.today()
    batch = _add_batch(db, product, int(quantity), float(cost_per_item), purchase_date, batch_reference)
    product.purchase_date = purchase_date
    refresh_product_aggregates(db, product)
    if commit:
        _commit(db)
        db.refresh(product)
    logger.info("Recorded purchase of %s x %s for user %s", quantity, product.sku, product.user_id)
    return batch


def create_product(db: Session, user_id: str, values: dict, *, commit: bool = True) -> tuple[Product, str]:
    """Create a product with its first batch, or add a batch to an existing SKU.

    Returns the product and ``"inserted"`` or ``"updated"``.
    """
    sku = (values.get("sku") or "").strip()
    if not sku:
        raise ValueError("sku is required")
    quantity = values.get("quantity") or 0
    cost_per_item = values.get("cost_per_item") or 0
    if int(quantity) < 0:
        raise ValueError("quantity must be non-negative")
    if float(cost_per_item) < 0:
        raise ValueError("cost_per_item must be non-negative")

    product = find_product(db, user_id, sku)
    action = "updated"
    if product is None:
        name = (values.get("name") or "").strip()
        if not name:
            raise ValueError("name is required")
        product = Product(
            user_id=user_id,
            sku=sku,
            name=name,
            quantity=0,
            total_purchased=0,
            sales_qty=0,
            cost_per_item=float(cost_per_item),
            stock_value=0,
            status="active",
        )
        db.add(product)
        action = "inserted"

    for key in _EDITABLE_FIELDS:
        value = values.get(key)
        if value is not None and key != "status":
            setattr(product, key, value)
    db.flush()

    if int(quantity) > 0:
        record_purchase(
            db,
            product,
            int(quantity),
            float(cost_per_item),
            purchase_date=values.get("purchase_date"),
            batch_reference=values.get("batch_reference"),
            commit=False,
        )
    else:
        refresh_product_aggregates(db, product)

    if commit:
        _commit(db)
        db.refresh(product)
    return product, action


def update_product(db: Session, user_id: str, sku: str, values: dict) -> Product:
    product = get_product(db, user_id, sku)
    for key, value in values.items():
        if key not in _EDITABLE_FIELDS:
            raise ValueError("Field cannot be edited: {}".format(key))
        if value is None:
            continue
        if key == "status":
            if value not in ("active", "inactive"):
                raise ValueError("status can only be set to active or inactive")
            product.status = value
            if value == "active":
                product.status = derive_product_status(product.quantity or 0)
            continue
        setattr(product, key, value)
    product.updated_at = datetime.now(timezone.utc)
    _commit(db)
    db.refresh(product)
    return product


def deactivate_product(db: Session, user_id: str, sku: str) -> Product:
    """Soft delete: historical sales keep pointing at the row."""
    product = get_product(db, user_id, sku)
    product.status = "inactive"
    product.updated_at = datetime.now(timezone.utc)
    _commit(db)
    db.refresh(product)
    return product


def consume_inventory_fifo(db: Session, product: Product, quantity: int, *, sale_date=None) -> float:
    """Take ``quantity`` units from the oldest batches and return their cost.

    A shortfall is covered by a synthetic batch at the current average cost so
    sales recorded ahead of purchases still get a cost basis.
    """
    if quantity <= 0:
        raise ValueError("quantity must be positive")
    batches = load_batches(db, product.id)
    available = sum(batch.quantity_available for batch in batches)
    if available < quantity:
        shortfall = quantity - available
        logger.warning(
            "Stock shortfall of %s for %s; creating adjustment batch", shortfall, product.sku
        )
        batches.append(
            _add_batch(
                db,
                product,
                shortfall,
                float(product.cost_per_item or 0),
                normalize_date(sale_date) or date.today(),
                "auto-adjustment",
            )
        )
        db.flush()

    plan = plan_fifo_consumption(batches, quantity)
    for batch, taken in plan.allocations:
        batch.quantity_available -= taken
    refresh_product_aggregates(db, product)
    return plan.total_cost

