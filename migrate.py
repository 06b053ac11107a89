"""
Migration: Add missing columns to the leads table.

Run this against an existing database created by an older deployment:
    python migrate.py

It is safe to run multiple times: every statement uses ADD COLUMN IF NOT EXISTS.
The server applies the same list on startup; this script is for doing it
ahead of a deploy.
"""

import asyncio
import os

import asyncpg
from dotenv import load_dotenv

from leadbridge.db.migrations import LEAD_COLUMN_MIGRATIONS, column_statements

load_dotenv()  # reads your .env file


async def connect() -> asyncpg.Connection:
    dsn = os.environ.get("DATABASE_URL")
    if dsn:
        return await asyncpg.connect(dsn.replace("postgresql+asyncpg://", "postgresql://"))
    return await asyncpg.connect(
        host=os.environ["DB_HOST"],
        port=int(os.environ.get("DB_PORT", 5432)),
        database=os.environ["DB_NAME"],
        user=os.environ["DB_USER"],
        password=os.environ["DB_PASSWORD"],
    )


async def migrate():
    conn = await connect()
    print("Connected to database. Running migration...")

    try:
        for migration, statement in zip(LEAD_COLUMN_MIGRATIONS, column_statements()):
            await conn.execute(statement)
            print(f"  ✓ Column '{migration.column}' ensured.")
    finally:
        await conn.close()

    print("\nMigration complete.")


if __name__ == "__main__":
    asyncio.run(migrate())
