"""
FinNova - Personal Income Tax Calculator
==========================================
Deterministic tax breakdown for a monthly salary under a single,
hard-coded progressive schedule.

Algorithm
---------
1. ``annual_income = monthly_salary × 12``
2. ``deductible_expense = min(annual_income × 50%, 100,000)``
3. ``personal_deduction = 60,000``
4. ``net_income = annual_income − deductible_expense − personal_deduction``
5. ``net_income ≤ 0`` → no tax.
6. Otherwise walk ``TAX_BRACKETS`` in order.  Each entry is a *marginal
   width* (not a cumulative threshold): the bracket consumes
   ``min(remaining, width)`` of the net income at its rate, and the walk
   stops as soon as nothing remains.

Usage:
    from finnova.src.core.tax_calculator import compute_tax, format_tax_answer
    breakdown = compute_tax(50_000)
    print(format_tax_answer(breakdown))
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from finnova.config.prompt_templates import NO_TAX_LINE, TAX_ANSWER_TEMPLATE, TAX_OWED_LINE
from finnova.src.utils.text_utils import format_amount

# ── Schedule constants ────────────────────────────────────────────────
EXPENSE_RATE = 0.5
EXPENSE_CAP = 100_000
PERSONAL_DEDUCTION = 60_000

# (marginal width, rate)
TAX_BRACKETS: tuple[tuple[float, float], ...] = (
    (150_000, 0.0),
    (150_000, 0.05),
    (200_000, 0.10),
    (250_000, 0.15),
    (250_000, 0.20),
    (1_000_000, 0.25),
    (3_000_000, 0.30),
    (math.inf, 0.35),
)


@dataclass(frozen=True, slots=True)
class TaxBreakdown:
    """Result of one tax computation, in currency units."""

    annual_income: float
    deductible_expense: float
    personal_deduction: float
    net_income: float
    tax_owed: float


def compute_tax(monthly_salary: float) -> TaxBreakdown:
    """
    Compute the yearly tax owed for a monthly salary.

    Raises
    ------
    ValueError
        If ``monthly_salary`` is negative, NaN or infinite.
    """
    if not math.isfinite(monthly_salary) or monthly_salary < 0:
        raise ValueError(f"monthly_salary must be a finite, non-negative number, got {monthly_salary!r}")

    annual = monthly_salary * 12
    expense = min(annual * EXPENSE_RATE, EXPENSE_CAP)
    net = annual - expense - PERSONAL_DEDUCTION

    if net <= 0:
        return TaxBreakdown(annual, expense, PERSONAL_DEDUCTION, net, 0)

    return TaxBreakdown(annual, expense, PERSONAL_DEDUCTION, net, bracket_tax(net))


def bracket_tax(net_income: float) -> float:
    """Tax on *net_income* under ``TAX_BRACKETS``; zero for non-positive income."""
    tax = 0.0
    remaining = net_income
    for width, rate in TAX_BRACKETS:
        if remaining <= 0:
            break
        amount = min(remaining, width)
        tax += amount * rate
        remaining -= amount
    return tax


def format_tax_answer(breakdown: TaxBreakdown) -> str:
    """Render a breakdown with the fixed calculator answer template."""
    if breakdown.tax_owed > 0:
        result = TAX_OWED_LINE.format(tax=format_amount(breakdown.tax_owed))
    else:
        result = NO_TAX_LINE

    return TAX_ANSWER_TEMPLATE.format(
        annual=format_amount(breakdown.annual_income),
        expense=format_amount(breakdown.deductible_expense),
        deduction=format_amount(breakdown.personal_deduction),
        net=format_amount(breakdown.net_income),
        result=result,
    )
