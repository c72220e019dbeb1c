from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.dependencies import get_db, require_admin
from seller_ops.schemas.admin import MigrationRequest
from seller_ops.schemas.invitation import InvitationCreate, InvitationRead, ProfileRead
from seller_ops.services.invitation_service import (
    create_invitation,
    list_invitations,
    list_profiles,
    revoke_invitation,
)
from seller_ops.services.migration_service import apply_migration, list_migrations
from seller_ops.services.reorder_service import run_auto_reorder

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=List[ProfileRead])
def read_users(db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    return list_profiles(db)


@router.get("/invitations", response_model=List[InvitationRead])
def read_invitations(db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    return list_invitations(db)


@router.post("/invitations", response_model=InvitationRead, status_code=201)
def add_invitation(
    payload: InvitationCreate,
    db: Session = Depends(get_db),
    admin_id: str = Depends(require_admin),
):
    try:
        return create_invitation(db, admin_id, **payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/invitations/{invitation_id}/revoke", response_model=InvitationRead)
def revoke(invitation_id: int, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    try:
        return revoke_invitation(db, invitation_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/migrations")
def read_migrations(_admin: str = Depends(require_admin)):
    return {"migrations": list_migrations()}


@router.post("/migrations/apply")
def apply(payload: MigrationRequest, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    if not payload.migration_file:
        raise HTTPException(status_code=400, detail="Migration file path is required")
    try:
        result = apply_migration(db, payload.migration_file)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (OSError, SQLAlchemyError) as exc:
        raise HTTPException(status_code=500, detail="Failed to apply migration: {}".format(exc)) from exc
    return {
        "success": True,
        "message": "Successfully applied migration: {}".format(result["migration"]),
        "statements": result["statements"],
    }


@router.post("/auto-reorder/run")
def run_reorder(db: Session = Depends(get_db), admin_id: str = Depends(require_admin)):
    try:
        stats = run_auto_reorder(db, admin_id)
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"status": "completed", "stats": stats}
