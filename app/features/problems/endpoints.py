from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.common.deps import get_current_user, get_db, get_judge0_client, require_admin
from app.common.quota import QuotaError, enforce_case_inputs, enforce_source_size
from app.features.judge0.languages import UnknownLanguageError
from app.features.judge0.service import Judge0Client, Judge0Error
from app.features.problems.schemas import (
    MessageResponse,
    ProblemCreate,
    ProblemCreatedResponse,
    ProblemOut,
    ProblemSummary,
    SolvedProblemsResponse,
)
from app.features.problems.service import ProblemNotFoundError, problems_service, to_public
from app.features.submissions.service import ReferenceSolutionError
from app.features.users.models import User

logger = logging.getLogger("problems")

router = APIRouter(prefix="/problem", tags=["problems"])


def _check_quota(payload: ProblemCreate) -> None:
    try:
        enforce_case_inputs([*payload.visible_test_cases, *payload.hidden_test_cases])
        for ref in payload.reference_solution:
            enforce_source_size(ref.solution)
    except QuotaError as exc:
        raise HTTPException(status_code=413, detail=str(exc))


def _authoring_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ProblemNotFoundError):
        return HTTPException(status_code=404, detail="Problem not found")
    if isinstance(exc, ReferenceSolutionError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, UnknownLanguageError):
        return HTTPException(status_code=500, detail="Internal server error")
    return HTTPException(status_code=502, detail=f"Code execution service error: {exc}")


@router.post(
    "/create",
    response_model=ProblemCreatedResponse,
    summary="Create a problem after checking its reference solutions",
)
async def create_problem(
    payload: ProblemCreate,
    db: Session = Depends(get_db),
    judge0: Judge0Client = Depends(get_judge0_client),
    admin: User = Depends(require_admin),
):
    _check_quota(payload)
    try:
        problem = await problems_service.create(db, judge0, payload=payload, creator=admin)
    except (ReferenceSolutionError, UnknownLanguageError, Judge0Error) as exc:
        raise _authoring_error(exc)
    return ProblemCreatedResponse(message="Problem created successfully", problem_id=problem.id)


@router.get("/getAllProblem", response_model=List[ProblemSummary])
def get_all_problems(db: Session = Depends(get_db)):
    problems = problems_service.list_summaries(db)
    if not problems:
        raise HTTPException(status_code=404, detail="No problems found")
    return problems


@router.get("/problemById/{problem_id}", response_model=ProblemOut)
def get_problem_by_id(problem_id: int, db: Session = Depends(get_db)):
    try:
        return to_public(problems_service.get(db, problem_id))
    except ProblemNotFoundError as exc:
        raise _authoring_error(exc)


@router.get("/user", response_model=SolvedProblemsResponse)
def get_problems_solved_by_user(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return SolvedProblemsResponse(problem_solved=problems_service.solved_by(db, user))


@router.put("/{problem_id}", response_model=ProblemCreatedResponse)
async def update_problem(
    problem_id: int,
    payload: ProblemCreate,
    db: Session = Depends(get_db),
    judge0: Judge0Client = Depends(get_judge0_client),
    admin: User = Depends(require_admin),
):
    _check_quota(payload)
    try:
        problem = await problems_service.update(db, judge0, problem_id=problem_id, payload=payload, editor=admin)
    except (ProblemNotFoundError, ReferenceSolutionError, UnknownLanguageError, Judge0Error) as exc:
        raise _authoring_error(exc)
    return ProblemCreatedResponse(message="Problem updated successfully", problem_id=problem.id)


@router.delete("/delete/{problem_id}", response_model=MessageResponse)
def delete_problem(
    problem_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        problems_service.delete(db, problem_id)
    except ProblemNotFoundError as exc:
        raise _authoring_error(exc)
    return MessageResponse(message="Problem deleted successfully")
