"""
rewriter.py — substitution, declaration insertion and report lines
===================================================================

Rewriting is a pure transformation of the region body:

1. every scanned occurrence of a bound call is replaced by the binding's
   name (edits are derived from the scanner's spans, so a call is never
   replaced inside a longer identifier or an unmatched construct);
2. one declaration per binding is prepended, most recent first, each
   followed by the breadcrumb comment so that the next run starts
   scanning after it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from .collector import BREADCRUMB
from .grammar import Match


@dataclass(frozen=True)
class Binding:
    """A generated name bound to a repeated call string."""

    name: str
    type_name: str
    call: str
    count: int


@dataclass(frozen=True)
class Edit:
    start: int
    end: int
    replacement: str


def apply_edits(body: str, edits: Iterable[Edit]) -> str:
    """Apply non-overlapping *edits* to *body* in a single pass."""
    out: List[str] = []
    cursor = 0
    for edit in sorted(edits, key=lambda e: (e.start, e.end)):
        if edit.start < cursor:
            raise ValueError(f"Overlapping edit at offset {edit.start}")
        out.append(body[cursor:edit.start])
        out.append(edit.replacement)
        cursor = edit.end
    out.append(body[cursor:])
    return "".join(out)


def declaration_line(binding: Binding) -> str:
    return f"{binding.type_name} {binding.name} = {binding.call};"


def breadcrumb_line(binding: Binding, breadcrumb: str = BREADCRUMB) -> str:
    return f"{declaration_line(binding)}  // {breadcrumb}\n"


def edits_for(matches: Sequence[Match], bindings: Iterable[Binding]) -> List[Edit]:
    """Replace every match whose text is a bound call by the binding name."""
    names: Dict[str, str] = {b.call: b.name for b in bindings}
    return [Edit(m.start, m.end, names[m.text]) for m in matches if m.text in names]


def rewrite_region(
    body: str,
    matches: Sequence[Match],
    bindings: Sequence[Binding],
    breadcrumb: str = BREADCRUMB,
) -> str:
    """Return *body* with calls substituted and declarations prepended."""
    rewritten = apply_edits(body, edits_for(matches, bindings))
    head = "".join(breadcrumb_line(b, breadcrumb) for b in reversed(bindings))
    return head + rewritten


# ───────────────────────────────────────────────────────────────────────
# Report lines
# ───────────────────────────────────────────────────────────────────────

def binding_report(binding: Binding) -> List[str]:
    return [
        declaration_line(binding),
        f"{binding.call} -> {binding.name} : {binding.count}",
        "",
    ]


def unknown_report(call: str, count: int) -> List[str]:
    return [f"{call} return type UNKNOWN! called {count} times.", ""]


def conditional_report(binding: Binding) -> List[str]:
    return [declaration_line(binding), ""]
