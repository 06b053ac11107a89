"""
POST /import-leads — bulk upsert of exported ad leads.

All-or-nothing: a single bad row fails the batch with 500 and nothing is
written.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from leadbridge.config import settings
from leadbridge.db.session import get_session
from leadbridge.errors import ImportRowError, StoreError
from leadbridge.schemas.imports import ImportSummary
from leadbridge.services.importer import import_leads

router = APIRouter(tags=["import"])
logger = structlog.get_logger(__name__)


@router.post("/import-leads", response_model=ImportSummary, status_code=201)
async def import_leads_api(request: Request, session: AsyncSession = Depends(get_session)):
    """
    Import a JSON array of leads.

    - Rows without an ``id`` are skipped.
    - Existing leads are overwritten column by column (no merge).
    """
    # ── 0. Size guard ────────────────────────────────────────────────────────
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > settings.max_payload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Payload too large. Maximum size is {settings.max_payload_bytes} bytes.",
        )

    # ── 1. Parse body ────────────────────────────────────────────────────────
    try:
        rows = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body.")

    if not isinstance(rows, list):
        raise HTTPException(status_code=400, detail="Payload must be a JSON array.")

    # ── 2. Upsert in one transaction ─────────────────────────────────────────
    try:
        return await import_leads(session, rows)
    except ImportRowError as e:
        logger.error("import.row_failed", row=e.index, lead_id=e.lead_id, error=str(e))
        raise HTTPException(status_code=500, detail=f"Import rolled back: {e}") from e
    except StoreError as e:
        logger.error("import.store_failed", error=str(e.__cause__ or e))
        raise HTTPException(status_code=500, detail="Import rolled back: store error.") from e
