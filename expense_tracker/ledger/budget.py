"""
Budget Evaluator

Classifies this month's spend against the monthly budget:

    budget == 0            -> UNSET
    percentage >= 100      -> EXCEEDED
    warning <= pct < 100   -> WARNING   (warning defaults to 80)
    percentage < warning   -> SAFE

Evaluated fresh on every call; nothing about the status is stored.
Classification always uses the true percentage. Clamping to 100 is only
for drawing a progress bar.
"""

from decimal import Decimal
from typing import NamedTuple

from expense_tracker.ledger.statistics import format_money
from expense_tracker.models.expense import BudgetEvaluation, BudgetStatus


EXCEEDED_PERCENT = Decimal("100")
DEFAULT_WARNING_PERCENT = Decimal("80")


class BudgetMessage(NamedTuple):
    """User-facing wording for a budget evaluation."""
    headline: str
    detail: str


def evaluate_budget(
    monthly_budget: Decimal,
    this_month_spend: Decimal,
    warning_percent: Decimal = DEFAULT_WARNING_PERCENT,
) -> BudgetEvaluation:
    """
    Compare this month's spend with the monthly budget.

    Args:
        monthly_budget: Configured budget, 0 when unset
        this_month_spend: Sum of this calendar month's expenses
        warning_percent: Percentage at which SAFE turns into WARNING

    Returns:
        BudgetEvaluation with status, unclamped percentage and remaining
        (negative when over budget)
    """
    monthly_budget = Decimal(monthly_budget)
    this_month_spend = Decimal(this_month_spend)

    if monthly_budget == 0:
        return BudgetEvaluation(
            status=BudgetStatus.UNSET,
            monthly_budget=monthly_budget,
            spent=this_month_spend,
        )

    percentage = this_month_spend / monthly_budget * 100
    remaining = monthly_budget - this_month_spend

    if percentage >= EXCEEDED_PERCENT:
        status = BudgetStatus.EXCEEDED
    elif percentage >= warning_percent:
        status = BudgetStatus.WARNING
    else:
        status = BudgetStatus.SAFE

    return BudgetEvaluation(
        status=status,
        percentage=percentage,
        remaining=remaining,
        monthly_budget=monthly_budget,
        spent=this_month_spend,
    )


def budget_message(
    evaluation: BudgetEvaluation,
    currency_symbol: str = "K",
) -> BudgetMessage:
    """
    Headline and detail line for the budget panel.

    When exceeded the detail shows how far over; otherwise what is left.
    """
    if evaluation.status == BudgetStatus.UNSET:
        return BudgetMessage("No budget set", "Set a monthly budget to track your spending")

    if evaluation.status == BudgetStatus.EXCEEDED:
        return BudgetMessage(
            "Budget Exceeded!",
            f"Over by {format_money(evaluation.display_remaining, currency_symbol)}",
        )

    remaining = f"{format_money(evaluation.display_remaining, currency_symbol)} remaining"
    if evaluation.status == BudgetStatus.WARNING:
        return BudgetMessage("Approaching Limit", remaining)
    return BudgetMessage("You're within budget!", remaining)


def format_percentage(evaluation: BudgetEvaluation) -> str:
    """'79.9% Used'"""
    return f"{evaluation.percentage:.1f}% Used"
