from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.core.constants import RECOMMENDATION_TYPES
from seller_ops.dependencies import get_db, require_user
from seller_ops.schemas.ai import AIProductRequest, RecommendationRead
from seller_ops.services.ai_service import (
    generate_product_suggestions,
    generate_worst_product_plan,
    latest_recommendation,
)

router = APIRouter(prefix="/ai", tags=["AI"])


def _products(payload: AIProductRequest):
    if payload.products is None:
        return None
    return [item.model_dump() for item in payload.products]


@router.post("/product-suggestions")
def product_suggestions(
    payload: AIProductRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        return generate_product_suggestions(
            db,
            user_id,
            products=_products(payload),
            time_range=payload.time_range,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=502, detail="Failed to get AI suggestions: {}".format(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to store AI suggestion.") from exc


@router.post("/worst-product-plan")
def worst_product_plan(
    payload: AIProductRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        return generate_worst_product_plan(
            db,
            user_id,
            products=_products(payload),
            time_range=payload.time_range,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(
            status_code=502,
            detail="Failed to generate worst product plan: {}".format(exc),
        ) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to store worst product plan.") from exc


@router.get("/recommendations/latest", response_model=RecommendationRead)
def read_latest_recommendation(
    recommendation_type: str = Query("product_performance"),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    if recommendation_type not in RECOMMENDATION_TYPES:
        raise HTTPException(status_code=400, detail="Unknown recommendation type.")
    try:
        return latest_recommendation(db, user_id, recommendation_type)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
