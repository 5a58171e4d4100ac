# tests/conftest.py
import logging

import aiosqlite
import pytest
import pytest_asyncio

from sql_query_builder import SQLQueryBuilder

from tests.create_sqlite_tables import create_test_schema

# Show library debug output in failing test reports
logging.getLogger("sql_query_builder").propagate = True
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


@pytest.fixture
def sql() -> SQLQueryBuilder:
    return SQLQueryBuilder()


@pytest.fixture
def person_ids() -> SQLQueryBuilder:
    """SELECT id FROM Person"""
    return SQLQueryBuilder().field("id").table("Person")


@pytest.fixture
def family_ids() -> SQLQueryBuilder:
    """SELECT id FROM Family"""
    return SQLQueryBuilder().field("id").table("Family")


@pytest_asyncio.fixture
async def sqlite_db():
    """In-memory SQLite database with the Person/Family/Car test tables."""
    async with aiosqlite.connect(":memory:") as db:
        await create_test_schema(db)
        yield db


async def fetch_all(db: aiosqlite.Connection, query: str, params=()) -> list:
    logging.getLogger(__name__).debug(f"SQLite Query: {query} Params: {params}")
    async with db.execute(query, params) as cursor:
        return [tuple(row) for row in await cursor.fetchall()]
