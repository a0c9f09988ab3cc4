from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.features.problems.models import Problem
from app.features.submissions.models import Submission
from app.features.users.models import User, UserRole

logger = logging.getLogger("users.repository")


class DuplicateEmailError(ValueError):
    pass


class UserRepository:
    def get(self, db: Session, user_id: int) -> Optional[User]:
        return db.get(User, user_id)

    def get_by_email(self, db: Session, email_id: str) -> Optional[User]:
        email_id = (email_id or "").strip().lower()
        return db.execute(select(User).where(User.email_id == email_id)).scalar_one_or_none()

    def create(
        self,
        db: Session,
        *,
        name: str,
        email_id: str,
        password_hash: str,
        role: UserRole = UserRole.user,
        age: Optional[int] = None,
    ) -> User:
        user = User(
            name=name,
            email_id=email_id.strip().lower(),
            password=password_hash,
            role=role,
            age=age,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise DuplicateEmailError("A user with this email already exists.") from exc
        db.refresh(user)
        return user

    def delete_with_submissions(self, db: Session, user: User) -> None:
        db.execute(delete(Submission).where(Submission.user_id == user.id))
        db.delete(user)
        db.commit()

    def mark_problem_solved(self, db: Session, user: User, problem: Problem) -> bool:
        """Add ``problem`` to the user's solved list. Returns False if it was already there."""
        if any(p.id == problem.id for p in user.problems_solved):
            return False
        user.problems_solved.append(problem)
        try:
            db.commit()
        except IntegrityError:
            # a concurrent submit recorded it first
            db.rollback()
            logger.info("solved_list.duplicate user_id=%s problem_id=%s", user.id, problem.id)
            return False
        return True

    def list_solved(self, db: Session, user: User) -> List[Problem]:
        db.refresh(user)
        return list(user.problems_solved)


user_repository = UserRepository()

__all__ = ["user_repository", "UserRepository", "DuplicateEmailError"]
