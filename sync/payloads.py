"""Wire decoding for change feed records."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from models.budget_entry import BudgetEntry


class EntryRecord(BaseModel):
    """A budget entry row as exchanged with the persistence collaborator.

    Amounts arrive as decimal numbers or strings, timestamps as ISO-8601.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    user_id: str
    name: str
    amount: Decimal = Field(ge=0, allow_inf_nan=False)
    category: Optional[str] = ""
    type: Literal["income", "expense", "savings"]
    is_recurring: bool = False
    created_at: Optional[datetime] = None

    def to_entry(self) -> BudgetEntry:
        created_at = self.created_at or datetime.now(timezone.utc)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return BudgetEntry(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            amount=self.amount,
            category=self.category or "",
            type=self.type,
            is_recurring=self.is_recurring,
            created_at=created_at,
        )


class DeletedRecord(BaseModel):
    """The 'old' side of a delete event; only the id is guaranteed."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
