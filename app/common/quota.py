from __future__ import annotations

from typing import Iterable

SOURCE_MAX_BYTES = 128 * 1024
# every test-case input is sent to Judge0 as stdin
STDIN_MAX_BYTES = 32 * 1024


class QuotaError(ValueError):
    pass


def _size(text: str) -> int:
    return len(text.encode())


def enforce_source_size(source: str):
    if _size(source) > SOURCE_MAX_BYTES:
        raise QuotaError("payload_too_large: code exceeds 128KiB limit")


def enforce_case_inputs(cases: Iterable) -> None:
    for index, case in enumerate(cases):
        if _size(case.input) > STDIN_MAX_BYTES:
            raise QuotaError(f"payload_too_large: test case {index} input exceeds 32KiB limit")


__all__ = ["enforce_source_size", "enforce_case_inputs", "QuotaError", "SOURCE_MAX_BYTES", "STDIN_MAX_BYTES"]
