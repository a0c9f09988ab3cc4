from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Table, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from app.db.base import Base


class UserRole(enum.Enum):
    user = "user"
    admin = "admin"


# The solved list. The composite key keeps each (user, problem) pair unique.
user_solved_problems = Table(
    "user_solved_problems",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("problem_id", Integer, ForeignKey("problems.id", ondelete="CASCADE"), primary_key=True),
    Column("solved_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(20), nullable=False)
    email_id = Column(String(255), unique=True, nullable=False, index=True)
    age = Column(Integer, nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.user)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    problems_solved = relationship(
        "Problem",
        secondary=user_solved_problems,
        order_by="Problem.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email_id={self.email_id} role={self.role}>"
