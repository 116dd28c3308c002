from dataclasses import dataclass


@dataclass
class Profile:
    user_id: str
    email: str
    currency: str = "USD"  # ISO 4217 code, e.g. "USD", "EUR"

    def to_dict(self) -> dict:
        """Convert profile to dictionary for database storage."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "currency": self.currency,
        }
