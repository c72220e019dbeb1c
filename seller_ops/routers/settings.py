from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.dependencies import get_db, require_user
from seller_ops.schemas.settings import SettingsRead, SettingsUpdate
from seller_ops.services.settings_service import get_or_create_settings, update_settings

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsRead)
def read_settings(db: Session = Depends(get_db), user_id: str = Depends(require_user)):
    return get_or_create_settings(db, user_id)


@router.put("", response_model=SettingsRead)
def write_settings(
    payload: SettingsUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        return update_settings(db, user_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to save settings.") from exc
