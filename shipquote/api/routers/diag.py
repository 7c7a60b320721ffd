# shipquote/api/routers/diag.py
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shipquote.db.session import get_db

router = APIRouter(prefix="/diag", tags=["diag"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {"ok": True, "db": "up"}
    except SQLAlchemyError:
        return {"ok": False, "db": "down"}
