from fastapi import APIRouter, Depends, HTTPException
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.dependencies import get_db, require_user
from seller_ops.schemas.admin import ExcelIngestRequest
from seller_ops.services.ingestion_service import import_workbook

router = APIRouter(prefix="/ingest", tags=["Ingest"])


@router.post("/excel")
def ingest_excel(
    payload: ExcelIngestRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user),
):
    try:
        results = import_workbook(
            payload.path,
            user_id,
            sheets=payload.sheets,
            dry_run=payload.dry_run,
            db=db,
        )
    except (OSError, ValueError, SQLAlchemyError, InvalidFileException) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"results": results}
