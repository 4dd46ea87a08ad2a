from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from sqlalchemy import extract, func, or_
from database import get_db, utcnow, Expense, User
from schemas import (
    Analytics,
    CategoryTrend,
    ExpenseIn,
    ExpenseList,
    ExpenseMessage,
    Message,
)
from auth import get_current_user
from datetime import date, datetime, time, timedelta
from dateutil.relativedelta import relativedelta
from typing import Optional
from uuid import UUID
import csv
import logging
from io import StringIO

logger = logging.getLogger("expenso.expenses")

router = APIRouter()

INCOME = "income"
EXPENSE = "expense"


def day_bounds(day: date):
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def get_owned_expense(db: Session, user: User, expense_id: UUID) -> Expense:
    expense = (
        db.query(Expense)
        .filter(Expense.id == str(expense_id), Expense.user_id == user.id)
        .first()
    )
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found.")
    return expense


@router.get("/expenses", response_model=ExpenseList)
async def get_expenses(
    q: Optional[str] = None,
    on: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Expense).filter(Expense.user_id == current_user.id)

    if q:
        needle = q.lower()
        query = query.filter(
            or_(
                func.lower(Expense.title).contains(needle, autoescape=True),
                func.lower(Expense.description).contains(needle, autoescape=True),
                func.lower(Expense.category).contains(needle, autoescape=True),
            )
        )
    if on:
        start, end = day_bounds(on)
        query = query.filter(Expense.created_at >= start, Expense.created_at < end)

    expenses = query.order_by(Expense.created_at.desc()).all()
    return {"message": "Expenses fetched successfully.", "expenses": expenses}


@router.get("/expenses/{expense_id}", response_model=ExpenseMessage)
async def get_expense(
    expense_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    expense = get_owned_expense(db, current_user, expense_id)
    return {"message": "Expense fetched successfully.", "expense": expense}


@router.post(
    "/expenses", response_model=ExpenseMessage, status_code=status.HTTP_201_CREATED
)
async def create_expense(
    expense: ExpenseIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    db_expense = Expense(
        title=expense.title,
        description=expense.description,
        amount=expense.amount,
        category=expense.category,
        user_id=current_user.id,
    )
    db.add(db_expense)
    db.commit()
    db.refresh(db_expense)

    logger.info("User %s added expense %s", current_user.id, db_expense.id)
    return {"message": "Expense added successfully.", "expense": db_expense}


@router.put("/expenses/{expense_id}", response_model=ExpenseMessage)
async def edit_expense(
    expense_id: UUID,
    expense: ExpenseIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    db_expense = get_owned_expense(db, current_user, expense_id)

    db_expense.title = expense.title
    db_expense.description = expense.description
    db_expense.amount = expense.amount
    db_expense.category = expense.category
    db_expense.updated_at = utcnow()
    db.commit()
    db.refresh(db_expense)

    logger.info("User %s edited expense %s", current_user.id, db_expense.id)
    return {"message": "Expense updated successfully.", "expense": db_expense}


@router.delete("/expenses/{expense_id}", response_model=Message)
async def delete_expense(
    expense_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    expense = get_owned_expense(db, current_user, expense_id)
    db.delete(expense)
    db.commit()

    logger.info("User %s removed expense %s", current_user.id, expense_id)
    return {"message": "Expense removed successfully."}


@router.get("/analytics", response_model=Analytics)
async def get_analytics(
    months: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Income and expense totals, optionally over the last ``months`` months."""
    query = db.query(Expense.category, func.sum(Expense.amount)).filter(
        Expense.user_id == current_user.id,
        Expense.category.in_([INCOME, EXPENSE]),
    )
    if months:
        query = query.filter(Expense.created_at >= utcnow() - relativedelta(months=months))

    totals = dict(query.group_by(Expense.category).all())
    income = totals.get(INCOME) or 0.0
    spent = totals.get(EXPENSE) or 0.0
    return {"expense_total": spent, "income_total": income, "balance": income - spent}


@router.get("/analytics/category-trends", response_model=list[CategoryTrend])
async def get_category_trends(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    year = extract("year", Expense.created_at)
    month = extract("month", Expense.created_at)
    query = db.query(
        Expense.category,
        year.label("year"),
        month.label("month"),
        func.sum(Expense.amount).label("total"),
    ).filter(Expense.user_id == current_user.id)

    if start:
        query = query.filter(Expense.created_at >= day_bounds(start)[0])
    if end:
        query = query.filter(Expense.created_at < day_bounds(end)[1])

    trends = (
        query.group_by(Expense.category, year, month)
        .order_by(year, month, Expense.category)
        .all()
    )

    return [
        {
            "category": row.category,
            "month": f"{int(row.year):04d}-{int(row.month):02d}",
            "total": row.total or 0.0,
        }
        for row in trends
    ]


@router.get("/export-report")
async def export_financial_report(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Exports the user's transactions as CSV, followed by the total per
    category.
    """
    expenses = (
        db.query(Expense)
        .filter(Expense.user_id == current_user.id)
        .order_by(Expense.created_at)
        .all()
    )

    csv_data = StringIO()
    writer = csv.writer(csv_data)

    writer.writerow(["Date", "Title", "Description", "Category", "Amount"])
    for e in expenses:
        writer.writerow(
            [e.created_at.date().isoformat(), e.title, e.description or "", e.category, e.amount]
        )

    writer.writerow([])
    writer.writerow(["Category", "Total"])

    category_totals = (
        db.query(Expense.category, func.sum(Expense.amount).label("total"))
        .filter(Expense.user_id == current_user.id)
        .group_by(Expense.category)
        .order_by(Expense.category)
        .all()
    )
    for category, total in category_totals:
        writer.writerow([category, total])

    return StreamingResponse(
        iter([csv_data.getvalue()]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename=expenso_report_{current_user.id}.csv"
        },
    )
