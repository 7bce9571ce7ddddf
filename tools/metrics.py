"""Derived metrics over transactions and budgets.

All money is Decimal. Percentages are floats. Zero denominators are handled by
explicit conventions documented on each function rather than by exceptions.
"""

import math
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from models.budget import Budget
from models.filters import DateRange
from models.transaction import Transaction
from tools.query import split_by_date_range

WARNING_THRESHOLD = 80.0
OVER_THRESHOLD = 100.0

_ZERO = Decimal("0")


@dataclass
class Totals:
    income: Decimal
    expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


@dataclass
class BudgetStatus:
    """Current-month utilization of one budget."""

    budget: Budget
    spent: Decimal
    percent: float
    remaining: Decimal  # negative when over budget

    @property
    def status(self) -> str:
        if self.percent >= OVER_THRESHOLD:
            return "danger"
        if self.percent >= WARNING_THRESHOLD:
            return "warning"
        return "good"


@dataclass
class HealthScore:
    score: int
    savings_rate: float
    budget_adherence: float
    expense_consistency: float


def totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum income and expense amounts. Balance is income minus expense."""
    income = _ZERO
    expense = _ZERO
    for t in transactions:
        if t.type == "income":
            income += t.amount
        elif t.type == "expense":
            expense += t.amount
    return Totals(income=income, expense=expense)


def percentage_change(current, previous) -> float:
    """Percentage change from previous to current.

    When previous is zero the result is 100 if current is positive and 0
    otherwise. This is a fixed convention, not a ratio.
    """
    current = float(current)
    previous = float(previous)
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / abs(previous) * 100


def savings_rate(income, balance) -> float:
    """Balance as a percentage of income, 0 when there is no income."""
    income = float(income)
    if income <= 0:
        return 0.0
    return float(balance) / income * 100


def _in_month(t: Transaction, year: int, month: int) -> bool:
    return t.date.year == year and t.date.month == month


def monthly_spent(
    transactions: Iterable[Transaction], category: str, today: Optional[date] = None
) -> Decimal:
    """Expense total for category in today's calendar month."""
    today = today or date.today()
    return sum(
        (
            t.amount
            for t in transactions
            if t.type == "expense"
            and t.category == category
            and _in_month(t, today.year, today.month)
        ),
        _ZERO,
    )


def budget_utilization(
    budget: Budget, transactions: Iterable[Transaction], today: Optional[date] = None
) -> BudgetStatus:
    """Compute spent, percent used and remaining for a budget this month."""
    spent = monthly_spent(transactions, budget.category, today)
    percent = float(spent / budget.amount * 100) if budget.amount > 0 else 0.0
    return BudgetStatus(
        budget=budget,
        spent=spent,
        percent=percent,
        remaining=budget.amount - spent,
    )


def budget_statuses(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> List[BudgetStatus]:
    transactions = list(transactions)
    return [budget_utilization(b, transactions, today) for b in budgets]


def budget_summary(statuses: Iterable[BudgetStatus]) -> Dict[str, Decimal]:
    """Totals across all budgets: total_budget, total_spent, total_remaining."""
    total_budget = _ZERO
    total_spent = _ZERO
    for s in statuses:
        total_budget += s.budget.amount
        total_spent += s.spent
    return {
        "total_budget": total_budget,
        "total_spent": total_spent,
        "total_remaining": total_budget - total_spent,
    }


def budget_adherence(
    budgets: List[Budget],
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> float:
    """Mean of max(0, 100 - utilization%) over budgets. 100 with no budgets."""
    if not budgets:
        return 100.0
    statuses = budget_statuses(budgets, transactions, today)
    return sum(max(0.0, 100.0 - s.percent) for s in statuses) / len(statuses)


def monthly_expense_totals(
    transactions: Iterable[Transaction],
) -> "OrderedDict[Tuple[int, int], Decimal]":
    """Expense sums keyed by (year, month), in first-seen order."""
    result: "OrderedDict[Tuple[int, int], Decimal]" = OrderedDict()
    for t in transactions:
        if t.type != "expense":
            continue
        key = (t.date.year, t.date.month)
        result[key] = result.get(key, _ZERO) + t.amount
    return result


def expense_consistency(transactions: Iterable[Transaction]) -> float:
    """100 minus the coefficient of variation (%) of monthly expense totals.

    Uses population variance. With fewer than two months of expenses the
    result is 100; a zero mean gives a coefficient of 0.
    """
    amounts = [float(v) for v in monthly_expense_totals(transactions).values()]
    if len(amounts) < 2:
        return 100.0

    mean = sum(amounts) / len(amounts)
    variance = sum((a - mean) ** 2 for a in amounts) / len(amounts)
    coefficient = math.sqrt(variance) / mean * 100 if mean > 0 else 0.0
    return max(0.0, 100.0 - coefficient)


def financial_health_score(
    transactions: Iterable[Transaction],
    budgets: List[Budget],
    today: Optional[date] = None,
    all_transactions: Optional[Iterable[Transaction]] = None,
) -> HealthScore:
    """Composite 0-100 score from savings rate, budget adherence and consistency.

    Args:
        transactions: The transactions being analysed (e.g. the current window).
        budgets: All budgets.
        today: Reference date for current-month budget spending.
        all_transactions: Transactions used for budget spending, defaults to
            transactions. Budget adherence always looks at the whole current
            month, not just the analysed window.
    """
    transactions = list(transactions)
    t = totals(transactions)
    rate = savings_rate(t.income, t.balance)
    adherence = budget_adherence(
        budgets,
        transactions if all_transactions is None else all_transactions,
        today,
    )
    consistency = expense_consistency(transactions)

    score = round(max(0.0, rate) * 0.4 + adherence * 0.4 + consistency * 0.2)
    return HealthScore(
        score=min(100, max(0, score)),
        savings_rate=rate,
        budget_adherence=adherence,
        expense_consistency=consistency,
    )


def category_breakdown(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Expense totals by category."""
    result: Dict[str, Decimal] = {}
    for t in transactions:
        if t.type == "expense":
            result[t.category] = result.get(t.category, _ZERO) + t.amount
    return result


def top_categories(
    transactions: Iterable[Transaction], limit: int = 5
) -> List[Tuple[str, Decimal]]:
    """Largest expense categories, biggest first."""
    breakdown = category_breakdown(transactions)
    return sorted(breakdown.items(), key=lambda item: item[1], reverse=True)[:limit]


def daily_trend(transactions: Iterable[Transaction]) -> List[Dict]:
    """Per-date income and expense totals, oldest date first."""
    days: Dict[date, Dict] = {}
    for t in transactions:
        day = days.setdefault(t.date, {"date": t.date, "income": _ZERO, "expense": _ZERO})
        if t.type in ("income", "expense"):
            day[t.type] += t.amount
    return [days[d] for d in sorted(days)]


def dashboard_summary(
    transactions: Iterable[Transaction],
    date_range: DateRange,
    today: Optional[date] = None,
) -> Dict:
    """Dashboard figures for the current window and their change vs the previous one.

    Returns:
        Dictionary with:
        - "income", "expenses", "balance": current-window totals (Decimal)
        - "savings_rate": current-window savings rate (float)
        - "income_change", "expense_change", "balance_change",
          "savings_change": percentage changes vs the previous window (float)
        - "current": the current-window transactions
    """
    windows = split_by_date_range(transactions, date_range, today)
    current = totals(windows.current)
    previous = totals(windows.previous)

    rate = savings_rate(current.income, current.balance)
    previous_rate = savings_rate(previous.income, previous.balance)

    return {
        "income": current.income,
        "expenses": current.expense,
        "balance": current.balance,
        "savings_rate": rate,
        "income_change": percentage_change(current.income, previous.income),
        "expense_change": percentage_change(current.expense, previous.expense),
        "balance_change": percentage_change(current.balance, previous.balance),
        "savings_change": percentage_change(rate, previous_rate),
        "current": windows.current,
    }


def month_summary(transactions: Iterable[Transaction], year: int, month: int) -> Dict:
    """Income, expenses and balance for one calendar month."""
    t = totals(x for x in transactions if _in_month(x, year, month))
    return {
        "year": year,
        "month": month,
        "income": t.income,
        "expenses": t.expense,
        "balance": t.balance,
    }


def previous_month(today: Optional[date] = None) -> date:
    """First day of the month before today's."""
    today = today or date.today()
    return today.replace(day=1) - relativedelta(months=1)
