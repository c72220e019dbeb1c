from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from seller_ops.dependencies import get_db, require_user
from seller_ops.services import analytics_service

router = APIRouter(prefix="/analytics", tags=["Analytics"])

TimeRange = Literal["week", "month", "quarter", "year"]


@router.get("/profit-breakdown")
def read_profit_breakdown(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    return analytics_service.profit_breakdown(db, user_id, start_date=start_date, end_date=end_date)


@router.get("/reports")
def read_sales_report(
    timeframe: Literal["daily", "monthly", "monthly_from_daily"] = Query("daily"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        return analytics_service.sales_report(
            db,
            user_id,
            timeframe=timeframe,
            start_date=start_date,
            end_date=end_date,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/product-trends")
def read_product_trends(
    time_range: TimeRange = Query("month"),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    return analytics_service.product_trends(db, user_id, time_range=time_range)


@router.get("/summary")
def read_period_summary(
    time_range: TimeRange = Query("month"),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    return analytics_service.period_summary(db, user_id, time_range=time_range)


@router.get("/products")
def read_product_analytics(db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    return analytics_service.product_analytics(db, user_id)


@router.get("/inventory-health")
def read_inventory_health(db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    return analytics_service.inventory_health(db, user_id)


@router.get("/reorder-recommendations")
def read_reorder_recommendations(db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    recommendations = analytics_service.reorder_recommendations(db, user_id)
    return {"recommendations": [item.as_dict() for item in recommendations]}
