"""Meal, expense and payment writes and their interaction with month locks."""

import asyncio
from datetime import date, datetime

import pytest
from bson import ObjectId

from app.core.exceptions import BillingValidationError, ConflictError, ForbiddenError, MonthLockedError, NotFoundError
from app.repositories.expense_repo import ExpenseRepository
from app.schemas.auth import CurrentUser
from app.schemas.expense import ExpenseCreate, ExpenseUpdate
from app.schemas.meal import BulkMealItem, BulkMealRequest, MealCreate, MealUpdate
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.services.calculation_service import CalculationService
from app.services.closing_service import ClosingService
from app.services.expense_service import ExpenseService
from app.services.meal_service import MealService
from app.services.payment_service import PaymentService
from app.utils.billing import utc_today
from app.utils.month_locks import MonthLockRegistry


def _user(hostel_id, role="admin"):
    return CurrentUser(id=str(ObjectId()), hostel_id=str(hostel_id), role=role)


async def _wait_for_waiter(month_locks: MonthLockRegistry, hostel_id, month, year):
    """Yield until a second task queues on a month lock the test holds."""
    key = MonthLockRegistry.key(hostel_id, month, year)
    for _ in range(1000):
        if month_locks._waiters.get(key, 0) >= 2:
            return
        await asyncio.sleep(0)
    raise AssertionError("writer never queued on the month lock")


# --- Meals ---------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_meal_derives_total(test_db, month_locks, seeder, hostel_id, admin_id):
    boarder = await seeder.boarder()
    service = MealService(test_db, month_locks)

    meal = await service.add_meal(
        hostel_id,
        MealCreate(boarder_id=str(boarder.id), date=date(2025, 6, 3), breakfast=1, lunch=1, dinner=0.5,
                   custom_meals=[{"name": "Feast", "value": 2}]),
        admin_id
    )

    assert meal.total_meals == 4.5
    assert meal.date == datetime(2025, 6, 3)


@pytest.mark.asyncio
async def test_off_day_counts_zero(test_db, month_locks, seeder, hostel_id, admin_id):
    boarder = await seeder.boarder()

    meal = await MealService(test_db, month_locks).add_meal(
        hostel_id,
        MealCreate(boarder_id=str(boarder.id), date=date(2025, 6, 3), breakfast=1, lunch=1,
                   custom_meals=[{"name": "guest", "value": 2}], is_off=True),
        admin_id
    )

    assert meal.total_meals == 0
    assert meal.breakfast == 0
    assert [(m.name, m.value) for m in meal.custom_meals] == [("guest", 0)]


@pytest.mark.asyncio
async def test_add_meal_twice_same_day_conflicts(test_db, month_locks, seeder, hostel_id, admin_id):
    boarder = await seeder.boarder()
    service = MealService(test_db, month_locks)
    data = MealCreate(boarder_id=str(boarder.id), date=date(2025, 6, 3), lunch=1)
    await service.add_meal(hostel_id, data, admin_id)

    with pytest.raises(ConflictError):
        await service.add_meal(hostel_id, data, admin_id)


@pytest.mark.asyncio
async def test_add_meal_unknown_boarder(test_db, month_locks, hostel_id, admin_id):
    with pytest.raises(NotFoundError):
        await MealService(test_db, month_locks).add_meal(
            hostel_id, MealCreate(boarder_id=str(ObjectId()), date=date(2025, 6, 3)), admin_id
        )


@pytest.mark.asyncio
async def test_add_meal_malformed_boarder_id(test_db, month_locks, hostel_id, admin_id):
    with pytest.raises(BillingValidationError) as exc:
        await MealService(test_db, month_locks).add_meal(
            hostel_id, MealCreate(boarder_id="not-an-id", date=date(2025, 6, 3)), admin_id
        )
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_add_payment_malformed_boarder_id(test_db, month_locks, hostel_id, admin_id):
    data = PaymentCreate(boarder_id="not-an-id", date=date(2025, 6, 10), amount=1000)
    with pytest.raises(BillingValidationError):
        await PaymentService(test_db, month_locks).add_payment(hostel_id, data, admin_id)


@pytest.mark.asyncio
async def test_meal_write_refused_while_locked(test_db, month_locks, seeder, hostel_id, admin_id):
    boarder = await seeder.boarder()
    closings = ClosingService(test_db, month_locks)
    meals = MealService(test_db, month_locks)
    data = MealCreate(boarder_id=str(boarder.id), date=date(2025, 6, 3), lunch=1)

    await closings.lock_month(hostel_id, 6, 2025, admin_id)
    with pytest.raises(MonthLockedError):
        await meals.add_meal(hostel_id, data, admin_id)

    await closings.unlock_month(hostel_id, 6, 2025)
    meal = await meals.add_meal(hostel_id, data, admin_id)
    assert meal.total_meals == 1


@pytest.mark.asyncio
async def test_bulk_upsert_creates_and_overwrites(test_db, month_locks, seeder, hostel_id, admin_id):
    first = await seeder.boarder("First")
    second = await seeder.boarder("Second")
    await seeder.meals(first, datetime(2025, 6, 3), breakfast=1, lunch=1, dinner=1)
    service = MealService(test_db, month_locks)

    results, errors = await service.bulk_upsert(
        hostel_id,
        BulkMealRequest(date=date(2025, 6, 3), entries=[
            BulkMealItem(boarder_id=str(first.id), lunch=1),
            BulkMealItem(boarder_id=str(second.id), breakfast=1, dinner=1),
            BulkMealItem(boarder_id=str(ObjectId()), lunch=1),
        ]),
        admin_id
    )

    assert [m.total_meals for m in results] == [1, 2]
    assert len(errors) == 1
    assert errors[0].error == "Boarder not found"

    report = await CalculationService(test_db).calculate_meal_rate(hostel_id, 6, 2025)
    assert report.total_meals == 3


@pytest.mark.asyncio
async def test_bulk_upsert_refused_while_locked(test_db, month_locks, seeder, hostel_id, admin_id):
    boarder = await seeder.boarder()
    await ClosingService(test_db, month_locks).lock_month(hostel_id, 6, 2025, admin_id)

    with pytest.raises(MonthLockedError):
        await MealService(test_db, month_locks).bulk_upsert(
            hostel_id,
            BulkMealRequest(date=date(2025, 6, 3), entries=[BulkMealItem(boarder_id=str(boarder.id), lunch=1)]),
            admin_id
        )


@pytest.mark.asyncio
async def test_update_meal_recomputes_total(test_db, month_locks, seeder, hostel_id):
    boarder = await seeder.boarder()
    meal = await seeder.meals(boarder, datetime(2025, 6, 3), breakfast=1, lunch=1, dinner=1)

    updated = await MealService(test_db, month_locks).update_meal(
        meal.id, hostel_id, MealUpdate(dinner=0), _user(hostel_id)
    )

    assert updated.total_meals == 2
    assert updated.breakfast == 1


@pytest.mark.asyncio
async def test_manager_cannot_edit_past_day(test_db, month_locks, seeder, hostel_id):
    boarder = await seeder.boarder()
    meal = await seeder.meals(boarder, datetime(2020, 1, 3))

    with pytest.raises(ForbiddenError) as exc:
        await MealService(test_db, month_locks).update_meal(
            meal.id, hostel_id, MealUpdate(lunch=0), _user(hostel_id, role="manager")
        )
    assert exc.value.message == "Managers can only edit same day entries"


@pytest.mark.asyncio
async def test_manager_can_edit_today(test_db, month_locks, seeder, hostel_id):
    boarder = await seeder.boarder()
    meal = await seeder.meals(boarder, utc_today())

    updated = await MealService(test_db, month_locks).update_meal(
        meal.id, hostel_id, MealUpdate(is_off=True), _user(hostel_id, role="manager")
    )
    assert updated.total_meals == 0


@pytest.mark.asyncio
async def test_update_missing_meal(test_db, month_locks, hostel_id):
    with pytest.raises(NotFoundError):
        await MealService(test_db, month_locks).update_meal(
            ObjectId(), hostel_id, MealUpdate(lunch=1), _user(hostel_id)
        )


# --- Expenses ------------------------------------------------------------

@pytest.mark.asyncio
async def test_expense_lifecycle(test_db, month_locks, hostel_id, admin_id):
    service = ExpenseService(test_db, month_locks)
    expense = await service.add_expense(
        hostel_id, ExpenseCreate(date=date(2025, 6, 2), category="bazar", amount=1500), admin_id
    )

    updated = await service.update_expense(expense.id, hostel_id, ExpenseUpdate(amount=1750, description="Rice"))
    assert updated.amount == 1750
    assert updated.description == "Rice"

    assert await service.delete_expense(expense.id, hostel_id) is True
    start, end = datetime(2025, 6, 1), datetime(2025, 6, 30, 23, 59, 59)
    assert await ExpenseRepository(test_db).sum_expenses(hostel_id, start, end) == 0

    with pytest.raises(NotFoundError):
        await service.delete_expense(expense.id, hostel_id)


@pytest.mark.asyncio
async def test_expense_move_into_locked_month_refused(test_db, month_locks, hostel_id, admin_id):
    service = ExpenseService(test_db, month_locks)
    expense = await service.add_expense(
        hostel_id, ExpenseCreate(date=date(2025, 7, 2), category="gas", amount=300), admin_id
    )
    await ClosingService(test_db, month_locks).lock_month(hostel_id, 6, 2025, admin_id)

    with pytest.raises(MonthLockedError):
        await service.update_expense(expense.id, hostel_id, ExpenseUpdate(date=date(2025, 6, 30)))


@pytest.mark.asyncio
async def test_expense_delete_refused_while_locked(test_db, month_locks, seeder, hostel_id, admin_id):
    expense = await seeder.expense(500, datetime(2025, 6, 5))
    await ClosingService(test_db, month_locks).lock_month(hostel_id, 6, 2025, admin_id)

    with pytest.raises(MonthLockedError):
        await ExpenseService(test_db, month_locks).delete_expense(expense.id, hostel_id)


@pytest.mark.asyncio
async def test_expense_update_does_not_follow_a_move_into_locked_month(
    test_db, month_locks, hostel_id, admin_id, seeder
):
    expense = await seeder.expense(100, datetime(2025, 6, 5))
    service = ExpenseService(test_db, month_locks)

    async with month_locks.hold(hostel_id, 6, 2025):
        pending = asyncio.create_task(
            service.update_expense(expense.id, hostel_id, ExpenseUpdate(amount=9999))
        )
        await _wait_for_waiter(month_locks, hostel_id, 6, 2025)
        await test_db["expenses"].update_one({"_id": expense.id}, {"$set": {"date": datetime(2025, 7, 5)}})
        closing = await ClosingService(test_db, month_locks).lock_month(hostel_id, 7, 2025, admin_id)

    with pytest.raises(ConflictError):
        await pending

    stored = await test_db["expenses"].find_one({"_id": expense.id})
    assert stored["amount"] == 100
    assert closing.total_expense == 100


@pytest.mark.asyncio
async def test_expense_delete_of_a_deleted_row(test_db, month_locks, seeder, hostel_id):
    expense = await seeder.expense(100, datetime(2025, 6, 5))
    service = ExpenseService(test_db, month_locks)

    assert await service.delete_expense(expense.id, hostel_id) is True
    with pytest.raises(NotFoundError):
        await service.delete_expense(expense.id, hostel_id)


# --- Payments ------------------------------------------------------------

@pytest.mark.asyncio
async def test_payment_refused_while_locked(test_db, month_locks, seeder, hostel_id, admin_id):
    boarder = await seeder.boarder()
    closings = ClosingService(test_db, month_locks)
    payments = PaymentService(test_db, month_locks)
    data = PaymentCreate(boarder_id=str(boarder.id), date=date(2025, 6, 10), amount=1000, method="bkash")

    await closings.lock_month(hostel_id, 6, 2025, admin_id)
    with pytest.raises(MonthLockedError):
        await payments.add_payment(hostel_id, data, admin_id)

    await closings.unlock_month(hostel_id, 6, 2025)
    payment = await payments.add_payment(hostel_id, data, admin_id)
    assert payment.method == "bkash"


@pytest.mark.asyncio
async def test_payment_update_moves_month(test_db, month_locks, seeder, hostel_id, admin_id):
    boarder = await seeder.boarder()
    payment = await seeder.payment(boarder, 800, datetime(2025, 6, 10))

    updated = await PaymentService(test_db, month_locks).update_payment(
        payment.id, hostel_id, PaymentUpdate(date=date(2025, 7, 1), method="nagad")
    )

    assert updated.date == datetime(2025, 7, 1)
    assert updated.method == "nagad"


@pytest.mark.asyncio
async def test_payment_for_unknown_boarder(test_db, month_locks, hostel_id, admin_id):
    with pytest.raises(NotFoundError):
        await PaymentService(test_db, month_locks).add_payment(
            hostel_id, PaymentCreate(boarder_id=str(ObjectId()), date=date(2025, 6, 1), amount=10), admin_id
        )


@pytest.mark.asyncio
async def test_payment_update_does_not_follow_a_move_into_locked_month(
    test_db, month_locks, seeder, hostel_id, admin_id
):
    boarder = await seeder.boarder()
    payment = await seeder.payment(boarder, 800, datetime(2025, 6, 10))
    service = PaymentService(test_db, month_locks)

    async with month_locks.hold(hostel_id, 6, 2025):
        pending = asyncio.create_task(
            service.update_payment(payment.id, hostel_id, PaymentUpdate(amount=1))
        )
        await _wait_for_waiter(month_locks, hostel_id, 6, 2025)
        await test_db["payments"].update_one({"_id": payment.id}, {"$set": {"date": datetime(2025, 7, 2)}})
        await ClosingService(test_db, month_locks).lock_month(hostel_id, 7, 2025, admin_id)

    with pytest.raises(ConflictError):
        await pending

    stored = await test_db["payments"].find_one({"_id": payment.id})
    assert stored["amount"] == 800
