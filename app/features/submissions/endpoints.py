# app/features/submissions/endpoints.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.common.deps import enforce_submit_cooldown, get_current_user, get_db, get_judge0_client
from app.common.quota import QuotaError, enforce_source_size
from app.features.judge0.languages import UnknownLanguageError
from app.features.judge0.service import Judge0Client, Judge0Error, Judge0TimeoutError
from app.features.problems.service import ProblemNotFoundError, problems_service
from app.features.submissions.schemas import (
    CodeRequest,
    RunResponse,
    SubmissionHistoryResponse,
    SubmissionOut,
    SubmitResponse,
)
from app.features.submissions.service import submissions_service
from app.features.users.models import User

logger = logging.getLogger("submissions")

router = APIRouter(prefix="/submission", tags=["submissions"])


def _load_problem(db: Session, problem_id: int):
    try:
        return problems_service.get(db, problem_id)
    except ProblemNotFoundError:
        raise HTTPException(status_code=404, detail="Problem not found")


def _check_quota(payload: CodeRequest) -> None:
    try:
        enforce_source_size(payload.code)
    except QuotaError as exc:
        raise HTTPException(status_code=413, detail=str(exc))


def _execution_error(exc: Exception) -> HTTPException:
    if isinstance(exc, UnknownLanguageError):
        logger.error("language mapping missing: %s", exc)
        return HTTPException(status_code=500, detail="Internal server error")
    if isinstance(exc, Judge0TimeoutError):
        return HTTPException(status_code=504, detail="Code execution timed out")
    return HTTPException(status_code=502, detail="Code execution service unavailable")


@router.post(
    "/run/{problem_id}",
    response_model=RunResponse,
    summary="Run code against the problem's visible test cases",
    description="Returns one Judge0 verdict per visible test case. Nothing is persisted.",
)
async def run_code(
    problem_id: int,
    payload: CodeRequest,
    db: Session = Depends(get_db),
    judge0: Judge0Client = Depends(get_judge0_client),
    user: User = Depends(enforce_submit_cooldown),
):
    _check_quota(payload)
    problem = await run_in_threadpool(_load_problem, db, problem_id)
    try:
        verdicts = await submissions_service.run_code(
            judge0, problem=problem, code=payload.code, language=payload.language
        )
    except (UnknownLanguageError, Judge0Error) as exc:
        logger.warning("run failed user_id=%s problem_id=%s: %s", user.id, problem_id, exc)
        raise _execution_error(exc)
    return RunResponse(test_result=verdicts)


@router.post(
    "/submit/{problem_id}",
    response_model=SubmitResponse,
    summary="Submit code for grading against the hidden test cases",
    description=(
        "Grades the code, stores the submission and adds the problem to the caller's solved list. "
        "The verdict is read back through /submission/submittedProblem/{id}."
    ),
)
async def submit_code(
    problem_id: int,
    payload: CodeRequest,
    db: Session = Depends(get_db),
    judge0: Judge0Client = Depends(get_judge0_client),
    user: User = Depends(enforce_submit_cooldown),
):
    _check_quota(payload)
    problem = await run_in_threadpool(_load_problem, db, problem_id)
    try:
        await submissions_service.submit_code(
            db, judge0, user=user, problem=problem, code=payload.code, language=payload.language
        )
    except (UnknownLanguageError, Judge0Error) as exc:
        raise _execution_error(exc)
    return SubmitResponse()


@router.get("/submittedProblem/{problem_id}", response_model=SubmissionHistoryResponse)
def submitted_problem(
    problem_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = submissions_service.history(db, user=user, problem_id=problem_id)
    if not rows:
        raise HTTPException(status_code=404, detail="No submission found for this problem")
    return SubmissionHistoryResponse(ans=[SubmissionOut.model_validate(r) for r in rows])
