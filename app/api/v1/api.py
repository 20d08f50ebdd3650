from fastapi import APIRouter
from app.api.v1.endpoints import calculations, closings, meals, expenses, payments, reports

api_router = APIRouter()

api_router.include_router(calculations.router, prefix="/calculations", tags=["calculations"])
api_router.include_router(closings.router, prefix="/closings", tags=["closings"])
api_router.include_router(meals.router, prefix="/meals", tags=["meals"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
