from __future__ import annotations

import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.features.judge0.languages import Language
from app.features.problems.models import Difficulty


class ProblemTag(str, enum.Enum):
	array = "array"
	string = "string"
	tree = "tree"
	graph = "graph"
	dynamic_programming = "dynamic programming"
	greedy = "greedy"
	backtracking = "backtracking"
	stack = "stack"
	queue = "queue"
	heap = "heap"
	linked_list = "linked list"
	math = "math"
	bit_manipulation = "bit manipulation"
	recursion = "recursion"
	hash_table = "hash table"
	sliding_window = "sliding window"
	two_pointers = "two pointers"
	binary_search = "binary search"
	sorting = "sorting"
	divide_and_conquer = "divide and conquer"


class _CamelModel(BaseModel):
	model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class HiddenTestCaseSchema(_CamelModel):
	input: str = Field(min_length=1)
	output: str = Field(min_length=1)


class VisibleTestCaseSchema(HiddenTestCaseSchema):
	explanation: str = Field(min_length=1)


class StartCodeSchema(_CamelModel):
	language: Language
	initial_code: str = Field(alias="initialCode", min_length=1)


class ReferenceSolutionSchema(_CamelModel):
	language: Language
	solution: str = Field(min_length=1)


class ProblemCreate(_CamelModel):
	title: str = Field(min_length=1, max_length=255)
	description: str = Field(min_length=1)
	difficulty: Difficulty
	tags: List[ProblemTag] = Field(min_length=1, max_length=5)
	visible_test_cases: List[VisibleTestCaseSchema] = Field(alias="visibleTestCases", min_length=1)
	hidden_test_cases: List[HiddenTestCaseSchema] = Field(alias="HiddenTestCases", min_length=1)
	start_code: List[StartCodeSchema] = Field(alias="startCode", default_factory=list)
	reference_solution: List[ReferenceSolutionSchema] = Field(alias="referenceSolution", min_length=1)

	@field_validator("title", "description")
	@classmethod
	def _not_blank(cls, value: str) -> str:
		if not value.strip():
			raise ValueError("must not be blank")
		return value.strip()

	@model_validator(mode="after")
	def _one_entry_per_language(self) -> "ProblemCreate":
		for label, entries in (("startCode", self.start_code), ("referenceSolution", self.reference_solution)):
			langs = [e.language for e in entries]
			if len(langs) != len(set(langs)):
				raise ValueError(f"{label} has more than one entry for the same language")
		return self


class ProblemSummary(_CamelModel):
	id: int
	title: str
	difficulty: Difficulty
	tags: List[str]


class ProblemOut(_CamelModel):
	"""Problem as shown to users: hidden test cases and creator are left out."""
	id: int
	title: str
	description: str
	difficulty: Difficulty
	tags: List[str]
	visible_test_cases: List[VisibleTestCaseSchema] = Field(alias="visibleTestCases")
	start_code: List[StartCodeSchema] = Field(alias="startCode")
	reference_solution: List[ReferenceSolutionSchema] = Field(alias="referenceSolution")


class ProblemCreatedResponse(_CamelModel):
	message: str
	problem_id: int = Field(alias="problemId")


class SolvedProblemsResponse(_CamelModel):
	problem_solved: List[ProblemSummary] = Field(alias="problemSolved")


class MessageResponse(BaseModel):
	message: str
	detail: Optional[str] = None
