"""
Declarative column maintenance for the leads table.

Deployments that created ``leads`` before a column existed get it added on
startup. Adding a column to the model means adding one entry here.
"""

from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection


@dataclass(frozen=True)
class ColumnMigration:
    column: str
    sql_type: str


LEADS_TABLE = "leads"

LEAD_COLUMN_MIGRATIONS: tuple[ColumnMigration, ...] = (
    ColumnMigration("created_time", "BIGINT"),
    ColumnMigration("email", "TEXT"),
    ColumnMigration("phone", "TEXT"),
    ColumnMigration("first_name", "TEXT"),
    ColumnMigration("last_name", "TEXT"),
    ColumnMigration("date_of_birth", "TEXT"),
    ColumnMigration("city", "TEXT"),
    ColumnMigration("region", "TEXT"),
    ColumnMigration("postal_code", "TEXT"),
    ColumnMigration("ad_id", "TEXT"),
    ColumnMigration("ad_name", "TEXT"),
    ColumnMigration("adset_id", "TEXT"),
    ColumnMigration("adset_name", "TEXT"),
    ColumnMigration("campaign_id", "TEXT"),
    ColumnMigration("campaign_name", "TEXT"),
    ColumnMigration("form_id", "TEXT"),
    ColumnMigration("form_name", "TEXT"),
    ColumnMigration("platform", "TEXT"),
    ColumnMigration("is_organic", "BOOLEAN"),
    ColumnMigration("lead_status", "TEXT"),
)


def column_statements(
    migrations: tuple[ColumnMigration, ...] = LEAD_COLUMN_MIGRATIONS,
    table: str = LEADS_TABLE,
) -> list[str]:
    """Render one idempotent ALTER TABLE statement per column (PostgreSQL)."""
    return [
        f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {m.column} {m.sql_type}"
        for m in migrations
    ]


async def apply_column_migrations(conn: AsyncConnection) -> None:
    """Apply the column list; a no-op on engines without ADD COLUMN IF NOT EXISTS."""
    if conn.dialect.name != "postgresql":
        return
    for statement in column_statements():
        await conn.execute(text(statement))
