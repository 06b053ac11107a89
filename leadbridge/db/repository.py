import asyncio

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leadbridge.db.models import LEAD_COLUMNS, Lead

# What a store call can raise: driver connect failures (refused, DNS,
# connect timeout) reach callers unwrapped by SQLAlchemy.
STORE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    SQLAlchemyError,
    OSError,
    asyncio.TimeoutError,
)


# ======================================================
# LOOKUP
# ======================================================

async def find_leads_by_contact(
    session: AsyncSession,
    email: str | None,
    phone: str | None,
    limit: int = 2,
) -> list[Lead]:
    """
    Return leads whose email (trimmed, case-insensitive) OR phone matches.

    Ordering is the tie-break policy: rows matching both keys first, then the
    most recently created lead, then lead id so the result is stable.
    Callers pass already-normalized keys.
    """
    email_match = func.lower(func.trim(Lead.email)) == email
    phone_match = Lead.phone == phone

    if email and phone:
        where = or_(email_match, phone_match)
        ordering = [case((and_(email_match, phone_match), 0), else_=1)]
    elif email:
        where, ordering = email_match, []
    elif phone:
        where, ordering = phone_match, []
    else:
        raise ValueError("email or phone is required")

    stmt = (
        select(Lead)
        .where(where)
        .order_by(
            *ordering,
            Lead.created_time.desc().nulls_last(),
            Lead.external_lead_id,
        )
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


# ======================================================
# UPSERT
# ======================================================

def _dialect_insert(session: AsyncSession):
    # PostgreSQL in production, SQLite in tests; both speak ON CONFLICT.
    if session.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


async def upsert_lead(session: AsyncSession, values: dict) -> None:
    """
    Insert a lead or overwrite every column of the existing row.

    Columns missing from ``values`` are written as NULL, never kept.
    """
    row = {column: values.get(column) for column in LEAD_COLUMNS}
    insert = _dialect_insert(session)
    stmt = insert(Lead).values(**row)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Lead.external_lead_id],
        set_={
            column: stmt.excluded[column]
            for column in LEAD_COLUMNS
            if column != "external_lead_id"
        },
    )
    await session.execute(stmt)
