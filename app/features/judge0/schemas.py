from __future__ import annotations

import enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class JudgeStatus(enum.IntEnum):
    """Judge0 status taxonomy."""

    in_queue = 1
    processing = 2
    accepted = 3
    wrong_answer = 4
    time_limit_exceeded = 5
    compilation_error = 6
    runtime_error_sigsegv = 7
    runtime_error_sigxfsz = 8
    runtime_error_sigfpe = 9
    runtime_error_sigabrt = 10
    runtime_error_nzec = 11
    runtime_error_other = 12
    internal_error = 13
    exec_format_error = 14


# status ids <= this value are still queued or running
LAST_PENDING_STATUS = JudgeStatus.processing


class ExecutionRequest(BaseModel):
    language_id: int
    source_code: str
    stdin: Optional[str] = None
    expected_output: Optional[str] = None


class ExecutionToken(BaseModel):
    token: str


class ExecutionVerdict(BaseModel):
    """One test case's result as reported by Judge0."""

    model_config = ConfigDict(extra="ignore")

    token: Optional[str] = None
    status_id: int
    status: Optional[Dict[str, Any]] = None
    time: Optional[float] = None
    memory: Optional[int] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    message: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _status_id_from_status(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("status_id") is None:
            status = data.get("status")
            if isinstance(status, dict) and status.get("id") is not None:
                data = dict(data)
                data["status_id"] = status["id"]
        return data

    @property
    def is_terminal(self) -> bool:
        return self.status_id > LAST_PENDING_STATUS

    @property
    def is_accepted(self) -> bool:
        return self.status_id == JudgeStatus.accepted

    @property
    def counts_as_error(self) -> bool:
        # id 4 maps to the "error" submission status, other failures to "wrong"
        return self.status_id == JudgeStatus.wrong_answer

    @property
    def elapsed_seconds(self) -> float:
        return self.time or 0.0


__all__ = [
    "JudgeStatus",
    "LAST_PENDING_STATUS",
    "ExecutionRequest",
    "ExecutionToken",
    "ExecutionVerdict",
]
