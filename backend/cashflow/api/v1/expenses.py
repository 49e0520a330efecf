"""Expense write routes. Each write re-evaluates the user's thresholds."""

from fastapi import APIRouter, Depends

from cashflow.api.deps import get_expense_service
from cashflow.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseUpdate
from cashflow.services.expense_service import ExpenseService

router = APIRouter()


@router.post("", response_model=ExpenseResponse, status_code=201)
async def create_expense(
    data: ExpenseCreate,
    service: ExpenseService = Depends(get_expense_service),
):
    return await service.create_expense(data)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    data: ExpenseUpdate,
    service: ExpenseService = Depends(get_expense_service),
):
    return await service.update_expense(expense_id, data)


@router.delete("/{expense_id}", status_code=204)
async def delete_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    await service.delete_expense(expense_id)
