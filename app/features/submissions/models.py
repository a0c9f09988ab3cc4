from sqlalchemy import Column, String, Text, Integer, Float, DateTime, ForeignKey, Enum, Index
from sqlalchemy.sql import func
import enum

from app.db.base import Base


class SubmissionStatus(enum.Enum):
    pending = "pending"
    accepted = "accepted"
    wrong = "wrong"
    error = "error"


class Submission(Base):
    """A graded submit. Created pending, then written once with its verdict."""
    __tablename__ = "submissions"
    __table_args__ = (Index("ix_submissions_user_problem", "user_id", "problem_id"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False)
    code = Column(Text, nullable=False)
    language = Column(String(20), nullable=False)
    status = Column(Enum(SubmissionStatus), nullable=False, default=SubmissionStatus.pending)
    runtime = Column(Float, nullable=False, default=0.0)  # seconds, summed over passed cases
    memory = Column(Integer, nullable=False, default=0)  # KB, max over passed cases
    error_message = Column(Text, nullable=False, default="")
    test_cases_passed = Column(Integer, nullable=False, default=0)
    test_cases_total = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Submission(id={self.id}, status={self.status})>"
