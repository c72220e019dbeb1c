from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from seller_ops.core.constants import LOW_STOCK_THRESHOLD
from seller_ops.core.dates import normalize_date
from seller_ops.core.records import get_field, number_field


@dataclass(frozen=True)
class BatchAggregate:
    quantity: int
    total_purchased: int
    sales_qty: int
    cost_per_item: float
    stock_value: float


@dataclass(frozen=True)
class FifoPlan:
    allocations: list
    total_cost: float

    @property
    def average_cost(self) -> float:
        quantity = sum(qty for _, qty in self.allocations)
        return self.total_cost / quantity if quantity else 0.0


def weighted_average_cost(
    existing_quantity: float,
    existing_cost: float,
    added_quantity: float,
    added_cost: float,
) -> float:
    existing_quantity = max(float(existing_quantity or 0), 0.0)
    added_quantity = float(added_quantity or 0)
    combined = existing_quantity + added_quantity
    if combined <= 0:
        return float(existing_cost or 0)
    return (existing_quantity * float(existing_cost or 0) + added_quantity * float(added_cost or 0)) / combined


def aggregate_batches(batches: Iterable, fallback_cost: float = 0.0) -> BatchAggregate:
    purchased = 0
    available = 0
    cost_per_item = float(fallback_cost or 0)
    for batch in batches:
        batch_available = int(number_field(batch, "quantity_available"))
        purchased += int(number_field(batch, "quantity_purchased"))
        cost_per_item = weighted_average_cost(
            available, cost_per_item, batch_available, number_field(batch, "cost_per_item")
        )
        available += batch_available

    return BatchAggregate(
        quantity=available,
        total_purchased=purchased,
        sales_qty=purchased - available,
        cost_per_item=cost_per_item,
        stock_value=available * cost_per_item,
    )


def _batch_order(batch):
    return (
        normalize_date(get_field(batch, "purchase_date")) or date.min,
        get_field(batch, "id", 0),
    )


def plan_fifo_consumption(batches: Iterable, quantity: int) -> FifoPlan:
    """Allocate ``quantity`` units from the oldest batches first."""
    if quantity <= 0:
        raise ValueError("quantity must be positive")

    remaining = quantity
    allocations = []
    total_cost = 0.0
    for batch in sorted(batches, key=_batch_order):
        if remaining <= 0:
            break
        available = int(number_field(batch, "quantity_available"))
        if available <= 0:
            continue
        take = min(available, remaining)
        allocations.append((batch, take))
        total_cost += take * number_field(batch, "cost_per_item")
        remaining -= take

    if remaining > 0:
        raise ValueError("Insufficient stock: {} unit(s) short".format(remaining))
    return FifoPlan(allocations=allocations, total_cost=total_cost)


def derive_product_status(quantity: float, current_status: str | None = None) -> str:
    if current_status == "inactive":
        return "inactive"
    if quantity <= 0:
        return "out_of_stock"
    if quantity < LOW_STOCK_THRESHOLD:
        return "low_stock"
    return "active"
