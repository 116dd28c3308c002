"""Profile service: the currency/locale collaborator."""

from typing import Optional
from models.profile import Profile


class ProfileService:
    """Service for reading and updating user profiles."""

    def __init__(self, db_manager, default_currency: str = "USD"):
        """Initialize the profile service.

        Args:
            db_manager: Database manager instance for database operations.
            default_currency: Currency used for users without a stored profile.
        """
        self.db_manager = db_manager
        self.default_currency = default_currency

    def find(self, user_id: str) -> Optional[Profile]:
        """Get a profile by user ID.

        Returns:
            Profile object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "SELECT user_id, email, currency FROM profiles WHERE user_id = ?",
                (user_id,),
            )
            row = cursor.fetchone()

            if row:
                return Profile(user_id=row[0], email=row[1], currency=row[2])
            return None

    def get_currency(self, user_id: str) -> str:
        """Get the user's preferred currency code, falling back to the default."""
        profile = self.find(user_id)
        if profile is None or not profile.currency:
            return self.default_currency
        return profile.currency

    def save(self, user_id: str, email: str = "", currency: Optional[str] = None) -> Profile:
        """Create or update a profile.

        Args:
            user_id: The user ID.
            email: The user's email address.
            currency: Currency code (upper-cased); defaults to the configured currency.

        Returns:
            The stored Profile.
        """
        profile = Profile(
            user_id=user_id,
            email=email,
            currency=(currency or self.default_currency).upper(),
        )
        with self.db_manager.connect() as conn:
            conn.execute(
                """
                INSERT INTO profiles (user_id, email, currency)
                VALUES (:user_id, :email, :currency)
                ON CONFLICT(user_id) DO UPDATE SET
                    email = excluded.email, currency = excluded.currency
                """,
                profile.to_dict(),
            )
            conn.commit()

        return profile
