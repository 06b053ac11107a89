"""
Bulk lead import.

The whole batch is one transaction: any bad row rolls everything back, and a
clean re-run is safe because rows are upserted by lead id.
"""

import re
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from leadbridge.db.repository import STORE_EXCEPTIONS, upsert_lead
from leadbridge.errors import ImportRowError, StoreError
from leadbridge.schemas.imports import ImportSummary, LeadImportRow
from leadbridge.services.normalize import digits_only

logger = structlog.get_logger(__name__)

_NUMERIC = re.compile(r"-?\d+(\.\d+)?")
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def to_unix_seconds(value: str | None) -> int | None:
    """
    Parse an export timestamp into Unix seconds.

    Accepts ISO-8601 (``Z``, ``+HH:MM`` or the ``+HHMM`` offsets the ads
    platform exports) and plain epoch numbers. Naive times are taken as UTC.
    Raises ValueError for anything else.
    """
    if value is None or not value.strip():
        return None
    raw = value.strip()
    if _NUMERIC.fullmatch(raw):
        return int(float(raw))

    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    elif "T" in raw or ":" in raw:
        raw = _COMPACT_OFFSET.sub(r"\1:\2", raw)

    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def lead_values_from_row(row: LeadImportRow) -> dict:
    """Map an export row onto lead columns."""
    return {
        "external_lead_id": row.id,
        "created_time": to_unix_seconds(row.created_time),
        "email": row.email,
        "phone": digits_only(row.phone_number) or None,
        "first_name": row.nome,
        "last_name": row.sobrenome,
        "date_of_birth": row.data_de_nascimento,
        "city": row.city,
        "region": row.state,
        "postal_code": row.cep,
        "ad_id": row.ad_id,
        "ad_name": row.ad_name,
        "adset_id": row.adset_id,
        "adset_name": row.adset_name,
        "campaign_id": row.campaign_id,
        "campaign_name": row.campaign_name,
        "form_id": row.form_id,
        "form_name": row.form_name,
        "platform": row.platform,
        "is_organic": row.is_organic,
        "lead_status": row.lead_status,
    }


async def import_leads(session: AsyncSession, rows: list) -> ImportSummary:
    """
    Upsert every row that carries an ``id``; skip the rest.

    Raises ImportRowError for an unconvertible row and StoreError when a
    write fails. In both cases nothing from the batch is committed.
    """
    imported = 0
    skipped = 0

    try:
        async with session.begin():
            for index, raw in enumerate(rows):
                if not isinstance(raw, dict) or not raw.get("id"):
                    skipped += 1
                    continue

                try:
                    values = lead_values_from_row(LeadImportRow.model_validate(raw))
                except ValueError as e:
                    raise ImportRowError(str(e), index=index, lead_id=str(raw["id"])) from e

                await upsert_lead(session, values)
                imported += 1
    except STORE_EXCEPTIONS as e:
        raise StoreError(f"import failed after {imported} rows") from e

    logger.info("import.completed", imported=imported, skipped=skipped)
    return ImportSummary(imported=imported, skipped=skipped)
