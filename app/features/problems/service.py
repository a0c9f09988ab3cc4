from __future__ import annotations

import logging
from typing import List

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.features.judge0.service import Judge0Client
from app.features.problems.models import Problem
from app.features.problems.repository import problem_repository
from app.features.problems.schemas import (
    ProblemCreate,
    ProblemOut,
    ProblemSummary,
    ReferenceSolutionSchema,
    StartCodeSchema,
    VisibleTestCaseSchema,
)
from app.features.submissions.service import submissions_service
from app.features.users.models import User
from app.features.users.repository import user_repository

logger = logging.getLogger("problems")


class ProblemNotFoundError(LookupError):
    pass


def to_summary(problem: Problem) -> ProblemSummary:
    return ProblemSummary(
        id=problem.id,
        title=problem.title,
        difficulty=problem.difficulty,
        tags=list(problem.tags or []),
    )


def to_public(problem: Problem) -> ProblemOut:
    return ProblemOut(
        id=problem.id,
        title=problem.title,
        description=problem.description,
        difficulty=problem.difficulty,
        tags=list(problem.tags or []),
        visible_test_cases=[
            VisibleTestCaseSchema(input=tc.input, output=tc.output, explanation=tc.explanation)
            for tc in problem.visible_test_cases
        ],
        start_code=[
            StartCodeSchema(language=sc.language, initial_code=sc.initial_code)
            for sc in problem.start_code
        ],
        reference_solution=[
            ReferenceSolutionSchema(language=rs.language, solution=rs.solution)
            for rs in problem.reference_solutions
        ],
    )


class ProblemsService:
    def get(self, db: Session, problem_id: int) -> Problem:
        problem = problem_repository.get(db, problem_id)
        if problem is None:
            raise ProblemNotFoundError("Problem not found")
        return problem

    def list_summaries(self, db: Session) -> List[ProblemSummary]:
        return [to_summary(p) for p in problem_repository.list_all(db)]

    def solved_by(self, db: Session, user: User) -> List[ProblemSummary]:
        return [to_summary(p) for p in user_repository.list_solved(db, user)]

    async def create(self, db: Session, judge0: Judge0Client, *, payload: ProblemCreate, creator: User) -> Problem:
        # Nothing is stored unless every reference solution passes the visible cases.
        await submissions_service.validate_reference_solutions(
            judge0,
            visible_cases=payload.visible_test_cases,
            solutions=payload.reference_solution,
        )
        problem = await run_in_threadpool(problem_repository.create, db, payload, creator_id=creator.id)
        logger.info("problem.created id=%s creator_id=%s", problem.id, creator.id)
        return problem

    async def update(
        self,
        db: Session,
        judge0: Judge0Client,
        *,
        problem_id: int,
        payload: ProblemCreate,
        editor: User,
    ) -> Problem:
        problem = await run_in_threadpool(self.get, db, problem_id)
        await submissions_service.validate_reference_solutions(
            judge0,
            visible_cases=payload.visible_test_cases,
            solutions=payload.reference_solution,
        )
        problem = await run_in_threadpool(problem_repository.update, db, problem, payload, creator_id=editor.id)
        logger.info("problem.updated id=%s editor_id=%s", problem.id, editor.id)
        return problem

    def delete(self, db: Session, problem_id: int) -> None:
        problem = self.get(db, problem_id)
        problem_repository.delete(db, problem)
        logger.info("problem.deleted id=%s", problem_id)


problems_service = ProblemsService()

__all__ = ["problems_service", "ProblemsService", "ProblemNotFoundError", "to_public", "to_summary"]
