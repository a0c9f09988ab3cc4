from __future__ import annotations

import logging
from typing import List, Sequence

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.features.judge0.languages import Language
from app.features.judge0.schemas import ExecutionVerdict
from app.features.judge0.service import Judge0Client, Judge0Error
from app.features.problems.models import Problem
from app.features.problems.schemas import HiddenTestCaseSchema
from app.features.submissions.grading import SubmissionOutcome, aggregate_verdicts, all_accepted
from app.features.submissions.models import Submission
from app.features.submissions.repository import submissions_repository
from app.features.users.models import User
from app.features.users.repository import user_repository

logger = logging.getLogger("submissions")


class ReferenceSolutionError(ValueError):
    def __init__(self, language: Language) -> None:
        lang = Language(language).value
        super().__init__(f"Reference solution for {lang} failed to pass visible test cases")
        self.language = lang


class SubmissionsService:
    """Run and submit flows on top of a Judge0 client."""

    async def run_code(
        self,
        judge0: Judge0Client,
        *,
        problem: Problem,
        code: str,
        language: Language,
    ) -> List[ExecutionVerdict]:
        """Execute against the visible cases and hand back the raw verdicts."""
        verdicts = await judge0.evaluate(code, language, problem.visible_test_cases)
        logger.info(
            "run problem_id=%s language=%s cases=%d accepted=%d",
            problem.id,
            Language(language).value,
            len(verdicts),
            sum(1 for v in verdicts if v.is_accepted),
        )
        return verdicts

    async def submit_code(
        self,
        db: Session,
        judge0: Judge0Client,
        *,
        user: User,
        problem: Problem,
        code: str,
        language: Language,
    ) -> Submission:
        """Grade ``code`` against the hidden cases and persist the result.

        The submission row is written as pending before Judge0 is called. If
        dispatch or polling fails it stays pending and the error propagates.
        """
        # snapshot before the first commit expires the ORM rows
        user_id, problem_id = user.id, problem.id
        hidden = [HiddenTestCaseSchema.model_validate(tc) for tc in problem.hidden_test_cases]
        submission = await run_in_threadpool(
            submissions_repository.create_pending,
            db,
            user_id=user_id,
            problem_id=problem_id,
            code=code,
            language=Language(language).value,
            test_cases_total=len(hidden),
        )
        submission_id = submission.id
        try:
            verdicts = await judge0.evaluate(code, language, hidden)
        except Judge0Error:
            logger.exception("submit.judge0_failed submission_id=%s left pending", submission_id)
            raise

        outcome: SubmissionOutcome = aggregate_verdicts(verdicts)
        submission = await run_in_threadpool(submissions_repository.record_outcome, db, submission, outcome)
        logger.info(
            "submit submission_id=%s user_id=%s problem_id=%s status=%s passed=%d/%d",
            submission_id,
            user_id,
            problem_id,
            outcome.status.value,
            outcome.passed,
            outcome.total,
        )

        if await run_in_threadpool(user_repository.mark_problem_solved, db, user, problem):
            logger.info("solved_list.added user_id=%s problem_id=%s", user_id, problem_id)
        return submission

    async def validate_reference_solutions(
        self,
        judge0: Judge0Client,
        *,
        visible_cases: Sequence,
        solutions: Sequence,
    ) -> None:
        """Every reference solution must be accepted on every visible case."""
        for ref in solutions:
            verdicts = await judge0.evaluate(ref.solution, ref.language, visible_cases)
            if not all_accepted(verdicts):
                raise ReferenceSolutionError(ref.language)

    def history(self, db: Session, *, user: User, problem_id: int) -> List[Submission]:
        return submissions_repository.list_for_problem(db, user_id=user.id, problem_id=problem_id)


submissions_service = SubmissionsService()

__all__ = ["submissions_service", "SubmissionsService", "ReferenceSolutionError"]
