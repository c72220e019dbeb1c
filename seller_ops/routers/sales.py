from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.dependencies import get_db, require_user
from seller_ops.schemas.sale import CancelSaleRequest, CanceledOrderRead, SaleCreate, SaleRead
from seller_ops.services.sales_service import cancel_sale, cancellation_summary, list_sales, record_sale

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get("", response_model=List[SaleRead])
def read_sales(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status: Optional[str] = Query(None),
    sku: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    return list_sales(db, user_id, start_date=start_date, end_date=end_date, status=status, sku=sku)


@router.post("", response_model=SaleRead, status_code=201)
def add_sale(payload: SaleCreate, db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    try:
        return record_sale(db, user_id, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to save sale.") from exc


@router.get("/cancellations/summary")
def read_cancellation_summary(db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    return cancellation_summary(db, user_id)


@router.post("/{sale_id}/cancel", response_model=CanceledOrderRead, status_code=201)
def cancel(
    sale_id: int,
    payload: CancelSaleRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        return cancel_sale(db, user_id, sale_id, **payload.model_dump())
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
