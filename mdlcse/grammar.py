"""
grammar.py — MDL expression grammar and seek scanner
=====================================================

A PEG grammar (parsimonious) for the slice of the NVIDIA Material
Definition Language that the reducer cares about: namespaced identifiers,
literals, signed arithmetic chains, ternaries and function calls.

The grammar is never used to parse a whole file.  Instead :func:`scan`
walks the text left to right, trying one rule *anchored* at each position
and skipping characters that do not start a match.  Each hit is returned
as the exact source substring, so its identity is textual and a later
substitution by span is always valid.

Usage::

    from mdlcse.grammar import find_all, scan

    find_all("a = math::cos(x) + 1;", "function_call")
    # ['math::cos(x)']

    for m in scan(body, "cond_expression"):
        print(m.start, m.end, m.text)

Function-call arguments are plain expressions (no nested calls), so the
scanner reports the innermost calls of a nest.  Once those are reduced to
variables the enclosing call becomes a leaf and is picked up by the next
pass.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from parsimonious.exceptions import ParseError
from parsimonious.expressions import Expression
from parsimonious.grammar import Grammar

from .errors import GrammarRuleError

logger = logging.getLogger(__name__)

__all__ = [
    "FUNCTION_CALL",
    "COND_EXPRESSION",
    "Match",
    "build_grammar",
    "scan",
    "find_all",
    "split_spans",
]

FUNCTION_CALL = "function_call"
COND_EXPRESSION = "cond_expression"


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — MDL EXPRESSION GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

_ARITHMETIC_FIRST = "chain / ternary"
_TERNARY_FIRST = "ternary / chain"

MDL_GRAMMAR_TEMPLATE = r'''
    # ─────────────────────────────────────────────────────────────
    # Top-level scan targets
    # ─────────────────────────────────────────────────────────────

    function_call       = variable _ "(" _ arguments? _ ")"
    cond_expression     = ternary

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    arguments           = expression (_ "," _ expression)*
    expression          = %(expression)s
    chain               = signed_term (_ operator _ signed_term)*
    ternary             = signed_term _ "?" _ signed_term _ ":" _ signed_term
    signed_term         = (sign _)? term
    term                = s_expression / p_expression
    p_expression        = (sign _)? "(" _ s_expression _ ")"
    s_expression        = (sign _)? operand (_ operator _ operand)*
    operand             = (sign _)? (variable / constant)

    # ─────────────────────────────────────────────────────────────
    # Names
    # ─────────────────────────────────────────────────────────────

    variable            = namespace* identifier (_ "." _ identifier)*
    namespace           = ("::" _)? word _ "::" _
    identifier          = ~r"[A-Za-z_][A-Za-z0-9_]*"
    word                = ~r"[A-Za-z0-9_]+"

    # ─────────────────────────────────────────────────────────────
    # Literals
    # ─────────────────────────────────────────────────────────────

    constant            = string / number
    string              = ~r'"[^"]*"'
    number              = ~r"[0-9]+\.?[0-9]*f?"

    # ─────────────────────────────────────────────────────────────
    # Punctuation & whitespace
    # ─────────────────────────────────────────────────────────────

    sign                = ~r"[+-]"
    operator            = ~r"[*+/-]"
    _                   = ~r"\s*"
'''


@functools.lru_cache(maxsize=None)
def build_grammar(ternary_first: bool = True) -> Grammar:
    """Compile the MDL grammar.

    The two alternatives of ``expression`` overlap: an arithmetic chain
    is a prefix of a ternary.  Under PEG ordered choice the first
    alternative that succeeds wins, so with *ternary_first* ``False`` an
    argument such as ``c ? a : b`` stops after ``c`` and the enclosing
    call fails to match.
    """
    order = _TERNARY_FIRST if ternary_first else _ARITHMETIC_FIRST
    logger.debug("Compiling MDL grammar (expression = %s)", order)
    return Grammar(MDL_GRAMMAR_TEMPLATE % {"expression": order})


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — SEEK SCANNER
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Match:
    """One scanner hit: ``text == source[start:end]``."""

    start: int
    end: int
    text: str


def _rule(grammar: Grammar, rule: str) -> Expression:
    try:
        return grammar[rule]
    except KeyError:
        raise GrammarRuleError(rule) from None


def scan(
    text: str,
    rule: str = FUNCTION_CALL,
    grammar: Optional[Grammar] = None,
) -> Iterator[Match]:
    """Yield every non-overlapping match of *rule* in *text*, left to right.

    Each non-whitespace position is tried in turn; a match resumes the
    search at its end, a miss advances by one character.
    """
    expression = _rule(grammar if grammar is not None else build_grammar(), rule)
    pos = 0
    end = len(text)
    while pos < end:
        if text[pos].isspace():
            pos += 1
            continue
        try:
            node = expression.match(text, pos)
        except ParseError:
            pos += 1
            continue
        if node.end == node.start:
            pos += 1
            continue
        yield Match(node.start, node.end, node.text)
        pos = node.end


def find_all(
    text: str,
    rule: str = FUNCTION_CALL,
    grammar: Optional[Grammar] = None,
) -> List[str]:
    """Return the matched substrings of :func:`scan` in order."""
    return [m.text for m in scan(text, rule, grammar)]


def split_spans(text: str, matches: Iterable[Match]) -> List[Tuple[bool, str]]:
    """Cut *text* into ``(is_match, piece)`` runs.

    Joining the pieces gives back *text* exactly.
    """
    pieces: List[Tuple[bool, str]] = []
    cursor = 0
    for m in matches:
        if m.start > cursor:
            pieces.append((False, text[cursor:m.start]))
        pieces.append((True, text[m.start:m.end]))
        cursor = m.end
    if cursor < len(text):
        pieces.append((False, text[cursor:]))
    return pieces
