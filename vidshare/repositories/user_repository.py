"""User repository for data access operations."""

from typing import Any
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from vidshare.models.user import User


class UserRepository:
    """Repository for user data access."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    def create(self, user_data: dict) -> User:
        """Create a new user. Model validators run on every field."""
        user = User(**user_data)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> User | None:
        """Get user by username (case-insensitive)."""
        return (
            self.db.query(User)
            .filter(User.username == username.strip().lower())
            .first()
        )

    def find_by_username_or_email(
        self,
        username: str | None = None,
        email: str | None = None,
    ) -> User | None:
        """
        Get the first user whose username or email matches.

        Either argument may be omitted; both are compared lower-cased.
        When the two match different accounts, the oldest account wins.
        """
        conditions = []
        if username:
            conditions.append(User.username == username.strip().lower())
        if email:
            conditions.append(User.email == email.strip().lower())
        if not conditions:
            return None
        return (
            self.db.query(User)
            .filter(or_(*conditions))
            .order_by(User.created_at, User.id)
            .first()
        )

    def update_fields(
        self,
        user_id: UUID,
        patch: dict[str, Any],
        skip_validation: bool = False,
    ) -> bool:
        """
        Update a subset of a user's fields.

        With skip_validation the patch is written as a single column-level
        UPDATE and the model validators are not run, so constraints on
        unrelated fields cannot block it. Otherwise the record is loaded
        and each attribute is set through the ORM.

        Returns:
            True if the user exists and was updated, False otherwise.
        """
        if skip_validation:
            result = self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(**patch)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            return result.rowcount > 0

        user = self.get_by_id(user_id)
        if user is None:
            return False
        for key, value in patch.items():
            setattr(user, key, value)
        self.db.commit()
        self.db.refresh(user)
        return True
