from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.features.submissions.grading import SubmissionOutcome
from app.features.submissions.models import Submission, SubmissionStatus


class SubmissionsRepository:
    """Persistence for graded submits."""

    def create_pending(
        self,
        db: Session,
        *,
        user_id: int,
        problem_id: int,
        code: str,
        language: str,
        test_cases_total: int,
    ) -> Submission:
        submission = Submission(
            user_id=user_id,
            problem_id=problem_id,
            code=code,
            language=language,
            status=SubmissionStatus.pending,
            test_cases_total=test_cases_total,
        )
        db.add(submission)
        db.commit()
        db.refresh(submission)
        return submission

    def record_outcome(self, db: Session, submission: Submission, outcome: SubmissionOutcome) -> Submission:
        submission.status = outcome.status
        submission.test_cases_passed = outcome.passed
        submission.runtime = outcome.runtime
        submission.memory = outcome.memory
        submission.error_message = outcome.error_message
        db.commit()
        db.refresh(submission)
        return submission

    def list_for_problem(self, db: Session, *, user_id: int, problem_id: int) -> List[Submission]:
        stmt = (
            select(Submission)
            .where(Submission.user_id == user_id, Submission.problem_id == problem_id)
            .order_by(Submission.id)
        )
        return list(db.execute(stmt).scalars())


submissions_repository = SubmissionsRepository()

__all__ = ["submissions_repository", "SubmissionsRepository"]
