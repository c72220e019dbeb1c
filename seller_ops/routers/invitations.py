from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.dependencies import get_db, require_user
from seller_ops.schemas.invitation import InvitationCodeRequest, SetupUserRequest
from seller_ops.schemas.settings import SettingsRead
from seller_ops.services.invitation_service import is_invitation_valid, use_invitation
from seller_ops.services.settings_service import setup_new_user

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/validate-invitation")
def validate_invitation(payload: InvitationCodeRequest, db: Session = Depends(get_db)):
    try:
        valid = is_invitation_valid(db, payload.code)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to validate invitation code") from exc
    return {"valid": valid}


@router.post("/use-invitation")
def redeem_invitation(
    payload: InvitationCodeRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        success = use_invitation(db, payload.code, user_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to use invitation code") from exc
    return {"success": success}


@router.post("/setup-new-user")
def setup_user(
    payload: Optional[SetupUserRequest] = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    payload = payload or SetupUserRequest()
    try:
        result = setup_new_user(db, user_id, **payload.model_dump())
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to set up user") from exc
    return {
        "success": True,
        "created": result["created"],
        "settings": SettingsRead.model_validate(result["settings"]),
    }
