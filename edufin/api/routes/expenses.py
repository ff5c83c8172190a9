"""
Expense Routes

Date bounds arrive as the query parameters ``from`` and ``to`` and are
parsed by the orchestrator, so a malformed bound is a 400 rather than a
silently ignored filter.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from edufin.api.dependencies import current_user_id, get_expenses
from edufin.models import Expense, ExpenseCreate, ExpensePatch, ExpenseSummary
from edufin.orchestrator import ExpenseFlow


router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("/summary", response_model=ExpenseSummary)
async def expense_summary(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    user_id: str = Depends(current_user_id),
    expenses: ExpenseFlow = Depends(get_expenses),
):
    return await expenses.summary(user_id, date_from, date_to)


@router.get("", response_model=list[Expense])
async def list_expenses(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    user_id: str = Depends(current_user_id),
    expenses: ExpenseFlow = Depends(get_expenses),
):
    return await expenses.list_expenses(user_id, date_from, date_to, page=page, limit=limit)


@router.post("", response_model=Expense, status_code=status.HTTP_201_CREATED)
async def create_expense(
    body: ExpenseCreate,
    user_id: str = Depends(current_user_id),
    expenses: ExpenseFlow = Depends(get_expenses),
):
    return await expenses.create(user_id, body)


@router.patch("/{expense_id}", response_model=Expense)
async def update_expense(
    expense_id: str,
    body: ExpensePatch,
    user_id: str = Depends(current_user_id),
    expenses: ExpenseFlow = Depends(get_expenses),
):
    return await expenses.update(user_id, expense_id, body)


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: str,
    user_id: str = Depends(current_user_id),
    expenses: ExpenseFlow = Depends(get_expenses),
):
    await expenses.delete(user_id, expense_id)
    return {"ok": True}
