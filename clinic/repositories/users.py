from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from ..core.security import UserRole
from ..models.user import User

class UserRepository:
    """Identity store. Performs no authorization of its own."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def insert(self, user: User) -> User:
        """Add a user. Raises IntegrityError, after rolling back, on a duplicate email."""
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def update_hash(self, user: User, password_hash: str) -> User:
        user.password_hash = password_hash
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.commit()

    def list_all(self, role: Optional[UserRole] = None) -> List[User]:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        return query.order_by(User.id).all()

    def count_by_role(self) -> Dict[UserRole, int]:
        """Return user totals grouped by role; roles with no users map to 0."""
        counts = {role: 0 for role in UserRole}
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        for role, total in rows:
            counts[UserRole(role)] = total
        return counts
