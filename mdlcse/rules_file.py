"""mdlcse/rules_file.py – S-expression rule tables.

Lets users replace or extend the built-in type/ignore tables without
touching code.  A rule file holds a single ``(rules ...)`` form::

    (rules
      (type   "(::)?mylib::noise[(].*[)]"  "float")
      (type   "(::)?mylib::tint[(].*[)]"   "color")
      (ignore "debug"  "debug_[a-z_]+[(].*[)]")
      (inherit-defaults))

* ``(type <regex> <type-name>)`` – appended to the type table in order.
* ``(ignore <name> <regex>)`` – appended to the ignore list.
* ``(inherit-defaults)`` – the built-in tables are appended after the
  file's own rules, so file rules take priority.

Patterns are whole-string regexes.  Strings go through sexpdata's
unescaping, so backslashes must be doubled; ``[(]`` / ``[)]`` avoid the
issue for parentheses.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

import sexpdata
from sexpdata import Symbol

from .errors import ErrorCodes, RuleFileError
from .inference import (
    DEFAULT_IGNORE_RULES,
    DEFAULT_TYPE_RULES,
    IgnoreRule,
    TypeInferenceEngine,
    TypeRule,
)

logger = logging.getLogger(__name__)

Sexp = Any  # Union[list, Symbol, str, int, float, bool]


@dataclass
class RuleTables:
    type_rules: List[TypeRule] = field(default_factory=list)
    ignore_rules: List[IgnoreRule] = field(default_factory=list)
    inherit_defaults: bool = False

    def build_engine(self) -> TypeInferenceEngine:
        type_rules = list(self.type_rules)
        ignore_rules = list(self.ignore_rules)
        if self.inherit_defaults:
            type_rules.extend(DEFAULT_TYPE_RULES)
            ignore_rules.extend(DEFAULT_IGNORE_RULES)
        return TypeInferenceEngine(type_rules, ignore_rules)


# ═══════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════

def _sym_name(s: Sexp) -> str:
    if isinstance(s, Symbol):
        return s.value() if callable(getattr(s, "value", None)) else str(s)
    raise RuleFileError(f"Expected symbol, got {type(s).__name__}: {s!r}")


def _head(s: list) -> str:
    if not s:
        raise RuleFileError("Unexpected empty form ()")
    return _sym_name(s[0])


def _as_str(s: Sexp) -> str:
    """Accept a string literal or a bare symbol."""
    if isinstance(s, Symbol):
        return _sym_name(s)
    if isinstance(s, str):
        return s
    raise RuleFileError(f"Expected string, got {type(s).__name__}: {s!r}")


def _arity(s: list, n: int) -> None:
    if len(s) != n + 1:
        raise RuleFileError(
            f"({_head(s)} ...) takes {n} argument(s), got {len(s) - 1}: {s!r}"
        )


def _compiled(factory: Callable[[], Any], form: list) -> Any:
    try:
        return factory()
    except re.error as exc:
        raise RuleFileError(
            f"Invalid regex in ({_head(form)} ...): {exc}",
            code=ErrorCodes.RULE_FILE_REGEX,
        ) from exc


# ═══════════════════════════════════════════════════════════════════════
#  Dispatch
# ═══════════════════════════════════════════════════════════════════════

_FORM_DISPATCH: Dict[str, Callable[[list, RuleTables], None]] = {}


def _register(tag: str):
    def deco(fn):
        _FORM_DISPATCH[tag] = fn
        return fn
    return deco


@_register("type")
def _parse_type(s: list, tables: RuleTables) -> None:
    _arity(s, 2)
    pattern, type_name = _as_str(s[1]), _as_str(s[2])
    tables.type_rules.append(_compiled(lambda: TypeRule(pattern, type_name), s))


@_register("ignore")
def _parse_ignore(s: list, tables: RuleTables) -> None:
    _arity(s, 2)
    name, pattern = _as_str(s[1]), _as_str(s[2])
    tables.ignore_rules.append(_compiled(lambda: IgnoreRule(name, pattern), s))


@_register("inherit-defaults")
def _parse_inherit(s: list, tables: RuleTables) -> None:
    _arity(s, 0)
    tables.inherit_defaults = True


# ═══════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════

def parse_rules(text: str) -> RuleTables:
    """Parse the text of a rule file."""
    try:
        top = sexpdata.loads(text)
    except Exception as exc:
        raise RuleFileError(
            f"Not a valid S-expression: {exc}", code=ErrorCodes.RULE_FILE_SYNTAX
        ) from exc

    if not isinstance(top, list) or not top or _head(top) != "rules":
        raise RuleFileError(f"Expected (rules ...), got {top!r}")

    tables = RuleTables()
    for form in top[1:]:
        if not isinstance(form, list):
            raise RuleFileError(f"Expected a rule form (tag ...), got {form!r}")
        tag = _head(form)
        handler = _FORM_DISPATCH.get(tag)
        if handler is None:
            raise RuleFileError(f"Unknown rule form: ({tag} ...)")
        handler(form, tables)

    logger.debug(
        "Parsed %d type rule(s), %d ignore rule(s)%s",
        len(tables.type_rules),
        len(tables.ignore_rules),
        " + defaults" if tables.inherit_defaults else "",
    )
    return tables


def load_rules(path: Union[str, Path]) -> RuleTables:
    """Read and parse a rule file from disk."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuleFileError(f"Cannot read rule file: {exc}", path=p, cause=exc) from exc
    try:
        return parse_rules(text)
    except RuleFileError as exc:
        exc.path = str(p)
        raise
