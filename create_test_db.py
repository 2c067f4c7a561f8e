"""
Script to create the PostgreSQL test database used by the test suite.
Run this once before running tests.
"""
import asyncio
import os
import asyncpg
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("SECRET_KEY", "campushub-test-secret")

from campushub.db.session import Base  # noqa: E402
from campushub.db import models  # noqa: E402,F401

DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_NAME = os.getenv("TEST_DB_NAME", "campushub_test")


async def create_database() -> bool:
    """Create the test database if it doesn't exist."""
    try:
        conn = await asyncpg.connect(
            user=DB_USER,
            password=DB_PASSWORD,
            host=DB_HOST,
            port=DB_PORT,
            database='postgres'
        )
        try:
            exists = await conn.fetchval(
                "SELECT 1 FROM pg_database WHERE datname = $1",
                DB_NAME
            )
            if not exists:
                await conn.execute(f'CREATE DATABASE "{DB_NAME}"')
                print(f"Database '{DB_NAME}' created")
            else:
                print(f"Database '{DB_NAME}' already exists")
        finally:
            await conn.close()
    except (OSError, asyncpg.PostgresError) as e:
        print(f"Error creating database: {e}")
        return False
    return True


async def create_tables() -> bool:
    """Create all tables in the test database."""
    engine = create_async_engine(
        f"postgresql+asyncpg://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
        echo=False
    )
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        print("Tables created")
    except (OSError, asyncpg.PostgresError) as e:
        print(f"Error creating tables: {e}")
        return False
    finally:
        await engine.dispose()
    return True


async def main():
    print("Setting up test database...")

    if not await create_database():
        return
    if not await create_tables():
        return

    print(f"Test database ready: {DB_NAME} on {DB_HOST}:{DB_PORT} as {DB_USER}")
    print(f"Run tests with: TEST_DATABASE_URL=postgresql+asyncpg://{DB_USER}:***@{DB_HOST}:{DB_PORT}/{DB_NAME} pytest")


if __name__ == "__main__":
    asyncio.run(main())
