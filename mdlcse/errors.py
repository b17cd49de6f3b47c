# mdlcse/errors.py
"""
mdlcse Error Types

Exception hierarchy and structured error codes for the MDL
common-subexpression reducer.

Error Hierarchy:
────────────────
    MdlReduceError (base)
    ├── InputUnreadableError   - input file cannot be opened/decoded
    ├── OutputUnwritableError  - export destination cannot be written
    ├── RuleFileError          - malformed S-expression rule table
    └── GrammarRuleError       - unknown grammar rule requested

Error Codes:
────────────
Each error has a code following the pattern MDLR-NNNN:
  - 0001-0999: I/O errors
  - 1000-1999: Configuration / rule-table errors
  - 2000-2999: Grammar errors

A repeated call whose type cannot be inferred is *not* an error; it is a
report outcome (``UNKNOWN``) and never raised.
"""

from __future__ import annotations

from enum import Enum, unique
from pathlib import Path
from typing import Optional, Union


# ═══════════════════════════════════════════════════════════════════════════════
# SEVERITY
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorSeverity(Enum):
    """Severity levels for reducer errors."""

    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorCode:
    """Structured error code ``MDLR-NNNN``."""

    __slots__ = ("number", "name", "default_severity")

    PREFIX = "MDLR"

    def __init__(
        self,
        number: int,
        name: str,
        default_severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> None:
        self.number = number
        self.name = name
        self.default_severity = default_severity

    @property
    def code(self) -> str:
        return f"{self.PREFIX}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.name})"

    def __hash__(self) -> int:
        return hash(self.number)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ErrorCodes:
    """Predefined error codes."""

    INPUT_UNREADABLE = ErrorCode(1, "INPUT_UNREADABLE", ErrorSeverity.FATAL)
    OUTPUT_UNWRITABLE = ErrorCode(2, "OUTPUT_UNWRITABLE")

    RULE_FILE_SYNTAX = ErrorCode(1000, "RULE_FILE_SYNTAX")
    RULE_FILE_FORM = ErrorCode(1001, "RULE_FILE_FORM")
    RULE_FILE_REGEX = ErrorCode(1002, "RULE_FILE_REGEX")

    UNKNOWN_GRAMMAR_RULE = ErrorCode(2000, "UNKNOWN_GRAMMAR_RULE")

    INTERNAL_ERROR = ErrorCode(9000, "INTERNAL_ERROR", ErrorSeverity.FATAL)


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class MdlReduceError(Exception):
    """
    Base exception for all reducer errors.

    Carries a structured :class:`ErrorCode` and, where relevant, the path
    of the file involved.
    """

    default_code: ErrorCode = ErrorCodes.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        path: Optional[Union[str, Path]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.path = str(path) if path is not None else None
        self.cause = cause

    @property
    def severity(self) -> ErrorSeverity:
        return self.code.default_severity

    def __str__(self) -> str:
        where = f"{self.path}: " if self.path else ""
        return f"{where}{self.severity.value}: {self.message} [{self.code}]"


# ───────────────────────────────────────────────────────────────────────────────
# I/O ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class InputUnreadableError(MdlReduceError):
    """The input source file could not be opened or decoded."""

    default_code = ErrorCodes.INPUT_UNREADABLE


class OutputUnwritableError(MdlReduceError):
    """The export destination could not be opened for writing."""

    default_code = ErrorCodes.OUTPUT_UNWRITABLE


# ───────────────────────────────────────────────────────────────────────────────
# CONFIGURATION ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class RuleFileError(MdlReduceError):
    """A rule-table file is malformed."""

    default_code = ErrorCodes.RULE_FILE_FORM


# ───────────────────────────────────────────────────────────────────────────────
# GRAMMAR ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class GrammarRuleError(MdlReduceError):
    """A scan was requested for a rule the grammar does not define."""

    default_code = ErrorCodes.UNKNOWN_GRAMMAR_RULE

    def __init__(self, rule: str, **kwargs) -> None:
        super().__init__(f"Unknown grammar rule '{rule}'", **kwargs)
        self.rule = rule
