"""Tuning knobs for a reduction run."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from .collector import BREADCRUMB, START_MARKER, ExtractionMode


@dataclass
class ReductionConfig:
    """Configuration for :class:`mdlcse.engine.Reducer`."""

    mode: ExtractionMode = ExtractionMode.FUNCTION_CALLS
    # A call is extracted once it occurs at least this many times.
    min_repeats: int = 2
    # Try the ternary alternative of ``expression`` before the arithmetic chain.
    ternary_first: bool = True
    first_serial: int = 0
    # Type written for conditional-expression bindings, which are never inferred.
    placeholder_type: str = "auto"
    start_marker: str = START_MARKER
    breadcrumb: str = BREADCRUMB
    rules_file: Optional[str] = None

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if self.min_repeats < 2:
            warnings.append("min_repeats below 2 extracts calls that occur only once")
        if self.first_serial < 0:
            warnings.append("first_serial must be non-negative")
        if not self.breadcrumb:
            warnings.append("empty breadcrumb makes re-runs re-scan inserted declarations")
        try:
            re.compile(self.start_marker)
        except re.error as exc:
            warnings.append(f"start_marker is not a valid regex: {exc}")
        return warnings
