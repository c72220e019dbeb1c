from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from seller_ops.core.security import authenticate_request
from seller_ops.database.session import get_db
from seller_ops.services.invitation_service import is_admin


def require_user(authorization: Optional[str] = Header(None)) -> str:
    payload = authenticate_request(authorization)
    return str(payload["sub"])


def require_admin(
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
) -> str:
    if not is_admin(db, user_id):
        raise HTTPException(status_code=403, detail="Admin access required.")
    return user_id


__all__ = ["get_db", "require_admin", "require_user"]
