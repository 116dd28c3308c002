"""Budget analysis result model."""

from dataclasses import dataclass
from decimal import Decimal

_HUNDRED = Decimal("100")


def progress_percent(spent: Decimal, target: Decimal) -> Decimal:
    """Percent of a target that has been spent, capped at 100.

    A zero (or negative) target reports 0 rather than dividing by zero, so a
    progress bar can be drawn directly from the result.
    """
    if target <= 0:
        return Decimal("0")
    return min(_HUNDRED, spent * _HUNDRED / target)


@dataclass(frozen=True)
class BudgetAnalysis:
    """Totals and 50/30/20 breakdown derived from a ledger snapshot.

    Never stored; recompute from the current snapshot whenever it changes.
    """

    total_income: Decimal
    total_expenses: Decimal
    total_savings: Decimal
    remaining: Decimal
    budget_healthy: bool
    needs_target: Decimal
    wants_target: Decimal
    savings_target: Decimal
    needs_spent: Decimal
    wants_spent: Decimal
    savings_spent: Decimal
    unclassified_spent: Decimal
    entry_count: int

    @property
    def needs_progress(self) -> Decimal:
        return progress_percent(self.needs_spent, self.needs_target)

    @property
    def wants_progress(self) -> Decimal:
        return progress_percent(self.wants_spent, self.wants_target)

    @property
    def savings_progress(self) -> Decimal:
        return progress_percent(self.savings_spent, self.savings_target)

    def to_dict(self) -> dict:
        """Convert analysis to a plain dictionary (amounts as Decimal)."""
        return {
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "total_savings": self.total_savings,
            "remaining": self.remaining,
            "budget_healthy": self.budget_healthy,
            "needs_target": self.needs_target,
            "wants_target": self.wants_target,
            "savings_target": self.savings_target,
            "needs_spent": self.needs_spent,
            "wants_spent": self.wants_spent,
            "savings_spent": self.savings_spent,
            "unclassified_spent": self.unclassified_spent,
            "entry_count": self.entry_count,
        }
