"""Model -> response schema conversions shared by the endpoint modules."""

from app.models.expense import Expense
from app.models.meal import MealEntry
from app.models.monthly_closing import MonthlyClosing
from app.models.payment import Payment
from app.schemas.closing import BoarderStatementSnapshotResponse, MonthlyClosingResponse
from app.schemas.expense import ExpenseResponse
from app.schemas.meal import MealResponse
from app.schemas.payment import PaymentResponse


def to_meal_response(meal: MealEntry) -> MealResponse:
    return MealResponse(
        id=str(meal.id),
        hostel_id=str(meal.hostel_id),
        boarder_id=str(meal.boarder_id),
        date=meal.date,
        breakfast=meal.breakfast,
        lunch=meal.lunch,
        dinner=meal.dinner,
        custom_meals=meal.custom_meals,
        is_off=meal.is_off,
        total_meals=meal.total_meals,
        updated_at=meal.updated_at
    )


def to_expense_response(expense: Expense) -> ExpenseResponse:
    return ExpenseResponse(
        id=str(expense.id),
        hostel_id=str(expense.hostel_id),
        date=expense.date,
        category=expense.category,
        description=expense.description,
        amount=expense.amount,
        attachment=expense.attachment,
        is_deleted=expense.is_deleted,
        updated_at=expense.updated_at
    )


def to_payment_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=str(payment.id),
        hostel_id=str(payment.hostel_id),
        boarder_id=str(payment.boarder_id),
        date=payment.date,
        amount=payment.amount,
        method=payment.method,
        reference=payment.reference,
        notes=payment.notes,
        updated_at=payment.updated_at
    )


def to_closing_response(closing: MonthlyClosing) -> MonthlyClosingResponse:
    return MonthlyClosingResponse(
        id=str(closing.id),
        hostel_id=str(closing.hostel_id),
        month=closing.month,
        year=closing.year,
        total_meals=closing.total_meals,
        total_expense=closing.total_expense,
        meal_rate=closing.meal_rate,
        is_locked=closing.is_locked,
        locked_by=str(closing.locked_by) if closing.locked_by else None,
        locked_at=closing.locked_at,
        boarder_statements=[
            BoarderStatementSnapshotResponse(
                boarder_id=str(s.boarder_id),
                boarder_name=s.boarder_name,
                total_meals=s.total_meals,
                meal_cost=s.meal_cost,
                seat_rent=s.seat_rent,
                total_payment=s.total_payment,
                opening_balance=s.opening_balance,
                due=s.due,
                advance=s.advance
            )
            for s in closing.boarder_statements
        ],
        version=closing.version,
        updated_at=closing.updated_at
    )
