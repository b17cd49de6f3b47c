"""Region isolation and call collection.

The searchable region of an MDL source starts right after the first
``let {`` opener and, when earlier passes have left declarations behind,
after the *last* breadcrumb comment that follows it.  Everything before
that point is the untouched prefix.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from parsimonious.grammar import Grammar

from .grammar import COND_EXPRESSION, FUNCTION_CALL, Match, build_grammar, scan

logger = logging.getLogger(__name__)

START_MARKER = r"let\s*\{"
BREADCRUMB = "_RL_REDUCT_BREADCRUMB_"


class ExtractionMode(enum.Enum):
    """What the collector extracts from the region."""

    FUNCTION_CALLS = "function-calls"
    CONDITIONAL_EXPRESSIONS = "conditional-expressions"

    @property
    def rule(self) -> str:
        if self is ExtractionMode.CONDITIONAL_EXPRESSIONS:
            return COND_EXPRESSION
        return FUNCTION_CALL


@dataclass(frozen=True)
class Region:
    """``prefix + body`` is always the original text."""

    prefix: str
    body: str

    @property
    def start(self) -> int:
        return len(self.prefix)


def isolate_region(
    text: str,
    start_marker: str = START_MARKER,
    breadcrumb: str = BREADCRUMB,
) -> Region:
    """Split *text* into the untouched prefix and the searchable body."""
    start = 0
    opener = re.search(start_marker, text)
    if opener is not None:
        start = opener.end()
    else:
        logger.debug("No block opener matching %r; searching whole text", start_marker)

    last = text.rfind(breadcrumb, start)
    if last != -1:
        start = last + len(breadcrumb)
        logger.debug("Skipping reduced declarations up to offset %d", start)

    return Region(prefix=text[:start], body=text[start:])


def collect(
    body: str,
    mode: ExtractionMode = ExtractionMode.FUNCTION_CALLS,
    grammar: Optional[Grammar] = None,
) -> List[Match]:
    """Scan *body* for the top-level rule of *mode*."""
    matches = list(scan(body, mode.rule, grammar if grammar is not None else build_grammar()))
    logger.info("Collected %d %s match(es)", len(matches), mode.value)
    return matches


def collect_calls(
    text: str,
    mode: ExtractionMode = ExtractionMode.FUNCTION_CALLS,
    grammar: Optional[Grammar] = None,
) -> List[str]:
    """Isolate the region of *text* and return the matched strings."""
    region = isolate_region(text)
    return [m.text for m in collect(region.body, mode, grammar)]
