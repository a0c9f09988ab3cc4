"""Language name -> Judge0 language id."""

from __future__ import annotations

import enum
from typing import Dict, Union


class Language(str, enum.Enum):
    c = "c"
    cpp = "c++"
    java = "java"
    javascript = "javascript"
    python = "python"


# Judge0 CE registry ids
LANGUAGE_IDS: Dict[Language, int] = {
    Language.c: 50,
    Language.cpp: 54,
    Language.java: 62,
    Language.javascript: 63,
    Language.python: 71,
}


class UnknownLanguageError(LookupError):
    """Raised when a language has no Judge0 id; signals a schema/mapping mismatch."""

    def __init__(self, language: object) -> None:
        super().__init__(f"no Judge0 language id configured for {language!r}")
        self.language = language


def resolve_language_id(language: Union[Language, str]) -> int:
    try:
        key = Language(language)
    except ValueError:
        raise UnknownLanguageError(language) from None
    try:
        return LANGUAGE_IDS[key]
    except KeyError:
        raise UnknownLanguageError(language) from None


__all__ = ["Language", "LANGUAGE_IDS", "UnknownLanguageError", "resolve_language_id"]
