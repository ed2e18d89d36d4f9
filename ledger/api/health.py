"""Health endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.database import get_db

router = APIRouter()


@router.get("/health")
async def health(db: Annotated[AsyncSession, Depends(get_db)]):
    """Liveness plus a database round trip."""
    await db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}
