"""Region isolation → scan → count → classify → rewrite."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .collector import ExtractionMode, Region, collect, isolate_region
from .config import ReductionConfig
from .frequency import FrequencyTable
from .grammar import Match, build_grammar
from .inference import TypeInferenceEngine, VerdictKind
from .rewriter import (
    Binding,
    binding_report,
    conditional_report,
    rewrite_region,
    unknown_report,
)
from .rules_file import load_rules

logger = logging.getLogger(__name__)


@dataclass
class ReductionResult:
    region: Region
    matches: List[Match]
    table: FrequencyTable
    bindings: List[Binding] = field(default_factory=list)
    unknown: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    report_lines: List[str] = field(default_factory=list)
    # Full rewritten text; only set when exporting.
    output: Optional[str] = None

    @property
    def report(self) -> str:
        return "".join(line + "\n" for line in self.report_lines)


class Reducer:
    """One reduction pass over an MDL source text.

    All state is built per call to :meth:`reduce`; a reducer can be reused.
    """

    def __init__(
        self,
        config: Optional[ReductionConfig] = None,
        inference: Optional[TypeInferenceEngine] = None,
    ) -> None:
        self.config = config or ReductionConfig()
        if inference is None:
            if self.config.rules_file:
                inference = load_rules(self.config.rules_file).build_engine()
            else:
                inference = TypeInferenceEngine()
        self.inference = inference
        self.grammar = build_grammar(self.config.ternary_first)

    def reduce(self, text: str, prefix: str, export: bool = False) -> ReductionResult:
        cfg = self.config
        region = isolate_region(text, cfg.start_marker, cfg.breadcrumb)
        logger.debug("Region starts at offset %d (%d chars)", region.start, len(region.body))

        matches = collect(region.body, cfg.mode, self.grammar)
        table = FrequencyTable.from_matches(matches)
        result = ReductionResult(region=region, matches=matches, table=table)

        serial = cfg.first_serial
        if cfg.mode is ExtractionMode.CONDITIONAL_EXPRESSIONS:
            for expr, count in table.items():
                binding = Binding(f"{prefix}{serial}", cfg.placeholder_type, expr, count)
                serial += 1
                result.bindings.append(binding)
                result.report_lines.extend(conditional_report(binding))
            if export:
                # Ternaries carry no inferred type; the region is written back unchanged.
                logger.info("Conditional-expression mode: exporting without substitutions")
                result.output = region.prefix + "\n" + region.body
            return result

        for call, count in table.repeated(cfg.min_repeats):
            verdict = self.inference.infer(call)
            if verdict.kind is VerdictKind.IGNORED:
                result.ignored.append(call)
                continue
            if verdict.kind is VerdictKind.UNKNOWN:
                logger.info("No type rule for %s", call)
                result.unknown.append(call)
                result.report_lines.extend(unknown_report(call, count))
                continue
            binding = Binding(f"{prefix}{serial}", verdict.type_name, call, count)
            serial += 1
            result.bindings.append(binding)
            result.report_lines.extend(binding_report(binding))

        logger.info(
            "%d binding(s), %d unknown, %d ignored",
            len(result.bindings), len(result.unknown), len(result.ignored),
        )

        if export:
            body = rewrite_region(region.body, matches, result.bindings, cfg.breadcrumb)
            result.output = region.prefix + "\n" + body
        return result


def reduce_source(
    text: str,
    prefix: str,
    export: bool = False,
    config: Optional[ReductionConfig] = None,
    inference: Optional[TypeInferenceEngine] = None,
) -> ReductionResult:
    """Functional wrapper around :meth:`Reducer.reduce`."""
    return Reducer(config, inference).reduce(text, prefix, export)
