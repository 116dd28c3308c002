"""Budget analysis tools.

Pure functions over a ledger snapshot: no side effects, no I/O. Amounts are
Decimal and are summed left to right. Decimal addition of finite values is
exact, so the result does not depend on the order of entries in the snapshot.
"""

from decimal import Decimal
from typing import Dict, Iterable, Optional
from models.analysis import BudgetAnalysis
from models.budget_entry import BudgetEntry, INCOME, EXPENSE, SAVINGS
from models.category_map import CategoryMap
from taxonomy.loader import get_category_map
from tools.currency import format_currency

# 50/30/20 rule
NEEDS_SHARE = Decimal("0.5")
WANTS_SHARE = Decimal("0.3")
SAVINGS_SHARE = Decimal("0.2")


def analyze(
    snapshot: Iterable[BudgetEntry], category_map: Optional[CategoryMap] = None
) -> BudgetAnalysis:
    """Compute totals and the 50/30/20 allocation for a ledger snapshot.

    Args:
        snapshot: Budget entries for one user at one point in time. Entries are
                  trusted to be validated already (non-negative amounts).
        category_map: Needs/Wants bucket mapping. Defaults to the packaged
                      taxonomy.

    Returns:
        BudgetAnalysis with:
        - total_income / total_expenses / total_savings: sums by entry type
        - remaining: income - expenses - savings (may be negative)
        - needs/wants/savings targets: 50% / 30% / 20% of income
        - needs_spent / wants_spent: expenses in the Needs / Wants categories
        - savings_spent: savings entries, plus expenses in the legacy savings
          category
        - unclassified_spent: expenses in no bucket (still in total_expenses)

    Example:
        Income 3500, Housing 1200, Food 400, Lifestyle 200 ->
        total_expenses=1800, remaining=1700, needs_spent=1600,
        wants_spent=200, needs_target=1750, wants_target=1050,
        savings_target=700
    """
    if category_map is None:
        category_map = get_category_map()

    totals: Dict[str, Decimal] = {
        INCOME: Decimal("0"),
        EXPENSE: Decimal("0"),
        SAVINGS: Decimal("0"),
    }
    spent: Dict[Optional[str], Decimal] = {
        "needs": Decimal("0"),
        "wants": Decimal("0"),
        "savings": Decimal("0"),
        None: Decimal("0"),
    }
    entry_count = 0

    for entry in snapshot:
        entry_count += 1
        if entry.type not in totals:
            continue
        totals[entry.type] += entry.amount

        if entry.type == EXPENSE:
            spent[category_map.bucket_for(entry.category)] += entry.amount
        elif entry.type == SAVINGS:
            spent["savings"] += entry.amount

    total_income = totals[INCOME]
    remaining = total_income - totals[EXPENSE] - totals[SAVINGS]

    return BudgetAnalysis(
        total_income=total_income,
        total_expenses=totals[EXPENSE],
        total_savings=totals[SAVINGS],
        remaining=remaining,
        budget_healthy=remaining >= 0,
        needs_target=total_income * NEEDS_SHARE,
        wants_target=total_income * WANTS_SHARE,
        savings_target=total_income * SAVINGS_SHARE,
        needs_spent=spent["needs"],
        wants_spent=spent["wants"],
        savings_spent=spent["savings"],
        unclassified_spent=spent[None],
        entry_count=entry_count,
    )


def summarize(analysis: BudgetAnalysis, currency_code: str = "USD") -> Dict[str, str]:
    """Render an analysis as display strings.

    Args:
        analysis: Result of analyze().
        currency_code: Currency code for formatting.

    Returns:
        Dictionary of label -> formatted value. Remaining is prefixed with "-"
        when the budget is over-spent.
    """

    def fmt(amount: Decimal) -> str:
        return format_currency(amount, currency_code)

    return {
        "income": fmt(analysis.total_income),
        "expenses": fmt(analysis.total_expenses),
        "savings": fmt(analysis.total_savings),
        "remaining": ("" if analysis.budget_healthy else "-")
        + fmt(analysis.remaining),
        "needs": f"{fmt(analysis.needs_spent)} / {fmt(analysis.needs_target)} "
        f"({analysis.needs_progress:.0f}%)",
        "wants": f"{fmt(analysis.wants_spent)} / {fmt(analysis.wants_target)} "
        f"({analysis.wants_progress:.0f}%)",
        "savings_goal": f"{fmt(analysis.savings_spent)} / {fmt(analysis.savings_target)} "
        f"({analysis.savings_progress:.0f}%)",
        "unclassified": fmt(analysis.unclassified_spent),
    }
