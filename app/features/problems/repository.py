from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.features.problems.models import (
    Problem,
    ProblemReferenceSolution,
    ProblemStartCode,
    ProblemTestCase,
)
from app.features.problems.schemas import ProblemCreate
from app.features.users.models import user_solved_problems


class ProblemRepository:
    """Data access helpers for problems and their test cases."""

    def get(self, db: Session, problem_id: int) -> Optional[Problem]:
        return db.get(Problem, problem_id)

    def list_all(self, db: Session) -> List[Problem]:
        return list(db.execute(select(Problem).order_by(Problem.id)).scalars())

    @staticmethod
    def _apply(problem: Problem, payload: ProblemCreate) -> None:
        problem.title = payload.title
        problem.description = payload.description
        problem.difficulty = payload.difficulty
        problem.tags = [t.value for t in payload.tags]
        cases = [
            ProblemTestCase(input=tc.input, output=tc.output, explanation=tc.explanation, is_hidden=False)
            for tc in payload.visible_test_cases
        ] + [
            ProblemTestCase(input=tc.input, output=tc.output, is_hidden=True)
            for tc in payload.hidden_test_cases
        ]
        for position, case in enumerate(cases):
            case.position = position
        problem.test_cases = cases
        problem.start_code = [
            ProblemStartCode(language=sc.language.value, initial_code=sc.initial_code)
            for sc in payload.start_code
        ]
        problem.reference_solutions = [
            ProblemReferenceSolution(language=rs.language.value, solution=rs.solution)
            for rs in payload.reference_solution
        ]

    def create(self, db: Session, payload: ProblemCreate, *, creator_id: int) -> Problem:
        problem = Problem(creator_id=creator_id)
        self._apply(problem, payload)
        db.add(problem)
        db.commit()
        db.refresh(problem)
        return problem

    def update(self, db: Session, problem: Problem, payload: ProblemCreate, *, creator_id: int) -> Problem:
        self._apply(problem, payload)
        problem.creator_id = creator_id
        db.commit()
        db.refresh(problem)
        return problem

    def delete(self, db: Session, problem: Problem) -> None:
        db.execute(delete(user_solved_problems).where(user_solved_problems.c.problem_id == problem.id))
        db.delete(problem)
        db.commit()


problem_repository = ProblemRepository()

__all__ = ["problem_repository", "ProblemRepository"]
