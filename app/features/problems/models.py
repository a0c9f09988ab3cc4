from sqlalchemy import Column, String, Text, Integer, DateTime, Boolean, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from app.db.base import Base


class Difficulty(enum.Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class Problem(Base):
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    difficulty = Column(Enum(Difficulty), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    test_cases = relationship(
        "ProblemTestCase",
        back_populates="problem",
        cascade="all, delete-orphan",
        order_by="ProblemTestCase.position",
        lazy="selectin",
    )
    start_code = relationship(
        "ProblemStartCode",
        cascade="all, delete-orphan",
        order_by="ProblemStartCode.id",
        lazy="selectin",
    )
    reference_solutions = relationship(
        "ProblemReferenceSolution",
        cascade="all, delete-orphan",
        order_by="ProblemReferenceSolution.id",
        lazy="selectin",
    )

    @property
    def visible_test_cases(self):
        return [tc for tc in self.test_cases if not tc.is_hidden]

    @property
    def hidden_test_cases(self):
        return [tc for tc in self.test_cases if tc.is_hidden]

    def __repr__(self) -> str:
        return f"<Problem id={self.id} title={self.title!r}>"


class ProblemTestCase(Base):
    """An (input, expected output) pair. Hidden cases are only used by submit."""
    __tablename__ = "problem_test_cases"

    id = Column(Integer, primary_key=True)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True)
    input = Column(Text, nullable=False)
    output = Column(Text, nullable=False)
    explanation = Column(Text, nullable=True)
    is_hidden = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)

    problem = relationship("Problem", back_populates="test_cases")


class ProblemStartCode(Base):
    __tablename__ = "problem_start_code"

    id = Column(Integer, primary_key=True)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True)
    language = Column(String(20), nullable=False)
    initial_code = Column(Text, nullable=False)


class ProblemReferenceSolution(Base):
    __tablename__ = "problem_reference_solutions"

    id = Column(Integer, primary_key=True)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True)
    language = Column(String(20), nullable=False)
    solution = Column(Text, nullable=False)
