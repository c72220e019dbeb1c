from typing import List, Optional

from pydantic import BaseModel


class MigrationRequest(BaseModel):
    migration_file: Optional[str] = None


class ExcelIngestRequest(BaseModel):
    path: str
    sheets: Optional[List[str]] = None
    dry_run: bool = False
