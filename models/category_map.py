"""Category-to-bucket mapping for the 50/30/20 rule."""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional


@dataclass(frozen=True)
class CategoryMap:
    """Which expense categories count as Needs and which as Wants.

    Attributes:
        needs: Category names counted toward the Needs bucket.
        wants: Category names counted toward the Wants bucket.
        savings_category: Expense category that is treated as savings
            (legacy representation). None disables it.
    """

    needs: FrozenSet[str]
    wants: FrozenSet[str]
    savings_category: Optional[str] = "Savings"

    def __post_init__(self):
        # An expense must land in at most one bucket
        overlap = self.needs & self.wants
        if self.savings_category in self.needs | self.wants:
            overlap = overlap | {self.savings_category}
        if overlap:
            raise ValueError(
                f"Categories assigned to more than one bucket: {sorted(overlap)}"
            )

    @classmethod
    def from_lists(
        cls,
        needs: Iterable[str],
        wants: Iterable[str],
        savings_category: Optional[str] = "Savings",
    ) -> "CategoryMap":
        return cls(
            needs=frozenset(needs),
            wants=frozenset(wants),
            savings_category=savings_category,
        )

    def bucket_for(self, category: str) -> Optional[str]:
        """Return 'needs', 'wants', 'savings', or None for an expense category."""
        if category in self.needs:
            return "needs"
        if category in self.wants:
            return "wants"
        if self.savings_category is not None and category == self.savings_category:
            return "savings"
        return None
