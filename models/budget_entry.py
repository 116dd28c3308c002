"""Budget entry model: one recorded income, expense, or savings allocation."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import uuid

from errors import ValidationError

INCOME = "income"
EXPENSE = "expense"
SAVINGS = "savings"

ENTRY_TYPES = (INCOME, EXPENSE, SAVINGS)

# Fields a caller may change through an update. id, user_id and created_at are immutable.
MUTABLE_FIELDS = frozenset({"name", "amount", "category", "type", "is_recurring"})


def new_entry_id() -> str:
    """Generate a new unique entry id."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BudgetEntryInput:
    """User-supplied fields of a budget entry, before an id is assigned."""

    name: str
    amount: Any
    type: str
    category: str = ""
    is_recurring: bool = False


@dataclass(frozen=True)
class BudgetEntry:
    """Represents one budget entry owned by a single user.

    Attributes:
        id: Unique identifier, assigned at creation.
        user_id: Owning user identity.
        name: Free-text label (non-empty).
        amount: Non-negative amount in the user's base currency unit.
        category: Free-text category used for Needs/Wants classification.
        type: 'income', 'expense', or 'savings'.
        is_recurring: Informational only, does not affect totals.
        created_at: Creation timestamp (UTC).
    """

    id: str
    user_id: str
    name: str
    amount: Decimal
    category: str
    type: str
    is_recurring: bool = False
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def create(cls, user_id: str, data: BudgetEntryInput) -> "BudgetEntry":
        """Validate input and create an entry with a fresh id.

        Raises:
            ValidationError: If any field is invalid.
        """
        name, amount, entry_type = validate_entry_fields(
            data.name, data.amount, data.type
        )
        return cls(
            id=new_entry_id(),
            user_id=user_id,
            name=name,
            amount=amount,
            category=data.category or "",
            type=entry_type,
            is_recurring=bool(data.is_recurring),
        )

    def to_dict(self) -> dict:
        """Convert entry to a flat record for storage and the change feed."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "amount": str(self.amount),
            "category": self.category,
            "type": self.type,
            "is_recurring": self.is_recurring,
            "created_at": self.created_at.isoformat(),
        }


def parse_amount(value: Any) -> Decimal:
    """Convert a user-supplied amount to a finite, non-negative Decimal.

    Raises:
        ValidationError: If the value is not a number, not finite, or negative.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Amount must be a number, got {value!r}")

    try:
        # Floats go through str() so 0.1 becomes Decimal("0.1")
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Amount must be a number, got {value!r}")

    if not amount.is_finite():
        raise ValidationError(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise ValidationError(f"Amount cannot be negative, got {value!r}")
    return amount


def validate_entry_fields(
    name: Optional[str], amount: Any, entry_type: Optional[str]
) -> tuple:
    """Validate the constrained fields of an entry.

    Returns:
        Tuple of (stripped name, Decimal amount, type).

    Raises:
        ValidationError: On an empty name, bad amount, or unknown type.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name cannot be empty")
    if entry_type not in ENTRY_TYPES:
        raise ValidationError(
            f"Invalid entry type {entry_type!r}. Must be one of: {', '.join(ENTRY_TYPES)}"
        )
    return name.strip(), parse_amount(amount), entry_type
