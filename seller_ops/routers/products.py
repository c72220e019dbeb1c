from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.dependencies import get_db, require_user
from seller_ops.schemas.product import BatchCreate, BatchRead, ProductCreate, ProductRead, ProductUpdate
from seller_ops.services.inventory_service import (
    create_product,
    deactivate_product,
    get_product,
    list_products,
    load_batches,
    record_purchase,
    update_product,
)

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=List[ProductRead])
def read_products(
    status: Optional[str] = Query(None, description="Filter by status"),
    include_inactive: bool = Query(True),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    return list_products(db, user_id, status=status, include_inactive=include_inactive)


@router.post("", response_model=ProductRead, status_code=201)
def add_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        product, _ = create_product(db, user_id, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to save product.") from exc
    return product


@router.get("/{sku}", response_model=ProductRead)
def read_product(sku: str, db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    try:
        return get_product(db, user_id, sku)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.patch("/{sku}", response_model=ProductRead)
def edit_product(
    sku: str,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        return update_product(db, user_id, sku, payload.model_dump(exclude_unset=True))
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/{sku}", response_model=ProductRead)
def remove_product(sku: str, db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    try:
        return deactivate_product(db, user_id, sku)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{sku}/batches", response_model=List[BatchRead])
def read_batches(sku: str, db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    try:
        product = get_product(db, user_id, sku)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return load_batches(db, product.id)


@router.post("/{sku}/batches", response_model=BatchRead, status_code=201)
def add_batch(
    sku: str,
    payload: BatchCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        product = get_product(db, user_id, sku)
        return record_purchase(
            db,
            product,
            payload.quantity,
            payload.cost_per_item,
            purchase_date=payload.purchase_date,
            batch_reference=payload.batch_reference,
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


__all__ = ["router"]
