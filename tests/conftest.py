import asyncio
from datetime import datetime

import pytest
import pytest_asyncio
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.core.auth import create_access_token
from app.db.mongo import MongoDatabase, create_indexes
from app.main import create_app
from app.models.boarder import Boarder
from app.models.expense import Expense
from app.models.meal import MealEntry
from app.models.payment import Payment
from app.repositories.boarder_repo import BoarderRepository
from app.repositories.expense_repo import ExpenseRepository
from app.repositories.meal_repo import MealRepository
from app.repositories.payment_repo import PaymentRepository
from app.utils.month_locks import MonthLockRegistry

TEST_DATABASE_NAME = "mealbook_test"


@pytest_asyncio.fixture
async def test_db():
    """In-memory Motor-compatible database with the production indexes."""
    client = AsyncMongoMockClient()
    db = client[TEST_DATABASE_NAME]
    await create_indexes(db)
    yield db


@pytest.fixture
def hostel_id():
    return ObjectId()


@pytest.fixture
def admin_id():
    return ObjectId()


@pytest.fixture
def month_locks():
    return MonthLockRegistry()


class LedgerSeeder:
    """Writes boarders and facts straight through the repositories."""

    def __init__(self, db, hostel_id):
        self.db = db
        self.hostel_id = hostel_id

    async def boarder(self, full_name="Rahim Uddin", **fields) -> Boarder:
        boarder = Boarder(hostel_id=self.hostel_id, full_name=full_name, **fields)
        return await BoarderRepository(self.db).create_boarder(boarder)

    async def meals(self, boarder, day: datetime, breakfast=1, lunch=1, dinner=1, **fields) -> MealEntry:
        entry = MealEntry(
            hostel_id=self.hostel_id,
            boarder_id=boarder.id,
            date=day,
            breakfast=breakfast,
            lunch=lunch,
            dinner=dinner,
            **fields
        )
        return await MealRepository(self.db).insert_meal(entry)

    async def full_month(self, boarder, year: int, month: int, days: int, per_day: int = 3):
        """One entry per day for ``days`` days, ``per_day`` meals each."""
        for day in range(1, days + 1):
            await self.meals(boarder, datetime(year, month, day), breakfast=per_day, lunch=0, dinner=0)

    async def expense(self, amount, day: datetime, category="bazar", **fields) -> Expense:
        expense = Expense(hostel_id=self.hostel_id, date=day, amount=amount, category=category, **fields)
        return await ExpenseRepository(self.db).insert_expense(expense)

    async def payment(self, boarder, amount, day: datetime, **fields) -> Payment:
        payment = Payment(hostel_id=self.hostel_id, boarder_id=boarder.id, date=day, amount=amount, **fields)
        return await PaymentRepository(self.db).insert_payment(payment)


@pytest.fixture
def seeder(test_db, hostel_id):
    return LedgerSeeder(test_db, hostel_id)


# --- HTTP fixtures -------------------------------------------------------

@pytest.fixture
def mongo_client():
    return AsyncMongoMockClient()


@pytest.fixture
def api_db(mongo_client):
    """Same database the app under test talks to."""
    return mongo_client[TEST_DATABASE_NAME]


@pytest.fixture
def api_seeder(api_db, hostel_id):
    return LedgerSeeder(api_db, hostel_id)


@pytest.fixture
def run():
    """Run a coroutine to completion from a synchronous test."""
    return asyncio.run


@pytest.fixture
def client(mongo_client):
    app = create_app(MongoDatabase(client=mongo_client, name=TEST_DATABASE_NAME))
    # Context manager runs the lifespan (connect, indexes, month locks)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(hostel_id, admin_id):
    """Build bearer headers for a role within the test hostel."""

    def _headers(role="admin", user_id=None, boarder_id=None):
        token = create_access_token(
            str(user_id or admin_id),
            str(hostel_id),
            role,
            boarder_id=str(boarder_id) if boarder_id else None
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
