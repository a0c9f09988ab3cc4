from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.features.judge0.languages import Language
from app.features.judge0.schemas import ExecutionVerdict
from app.features.submissions.models import SubmissionStatus


class CodeRequest(BaseModel):
	code: str
	language: Language

	@model_validator(mode="after")
	def ensure_payload(self) -> "CodeRequest":
		if not self.code or not self.code.strip():
			raise ValueError("code is required")
		return self


class RunResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	test_result: List[ExecutionVerdict] = Field(alias="testResult")


class SubmitResponse(BaseModel):
	message: str = "Code submitted successfully"


class SubmissionOut(BaseModel):
	model_config = ConfigDict(from_attributes=True, populate_by_name=True)

	id: int
	user_id: int = Field(alias="userId")
	problem_id: int = Field(alias="problemId")
	code: str
	language: str
	status: SubmissionStatus
	runtime: float
	memory: int
	error_message: str = Field(alias="errorMessage")
	test_cases_passed: int = Field(alias="testCasesPassed")
	test_cases_total: int = Field(alias="testCasesTotal")
	created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class SubmissionHistoryResponse(BaseModel):
	ans: List[SubmissionOut]
