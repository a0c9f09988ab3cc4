from __future__ import annotations

"""
Reduction of per-test-case Judge0 verdicts into one submission result.

Rules, applied in test-case order:
    - Accepted (3): counts as passed, adds its time to the runtime total and
      raises the peak memory.
    - Status 4: marks the submission "error".
    - Any other terminal status: marks the submission "wrong".
    - Every failing case overwrites the error message with its stderr.

Status and message are last-wins: a "wrong" case after an "error" case leaves
the submission "wrong". Runtime and memory only cover passed cases.
"""

from dataclasses import dataclass
from typing import Iterable

from app.features.judge0.schemas import ExecutionVerdict
from app.features.submissions.models import SubmissionStatus


@dataclass
class SubmissionOutcome:
    status: SubmissionStatus
    passed: int
    total: int
    runtime: float
    memory: int
    error_message: str


def aggregate_verdicts(verdicts: Iterable[ExecutionVerdict]) -> SubmissionOutcome:
    status = SubmissionStatus.accepted
    passed = 0
    total = 0
    runtime = 0.0
    memory = 0
    error_message = ""

    for verdict in verdicts:
        if not verdict.is_terminal:
            raise ValueError(f"verdict {verdict.token} is not terminal (status_id={verdict.status_id})")
        total += 1
        if verdict.is_accepted:
            passed += 1
            runtime += verdict.elapsed_seconds
            memory = max(memory, verdict.memory or 0)
            continue
        status = SubmissionStatus.error if verdict.counts_as_error else SubmissionStatus.wrong
        error_message = verdict.stderr or ""

    return SubmissionOutcome(
        status=status,
        passed=passed,
        total=total,
        runtime=runtime,
        memory=memory,
        error_message=error_message,
    )


def all_accepted(verdicts: Iterable[ExecutionVerdict]) -> bool:
    return all(v.is_accepted for v in verdicts)


__all__ = ["SubmissionOutcome", "aggregate_verdicts", "all_accepted"]
