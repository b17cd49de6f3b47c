"""
inference.py — return-type inference for call strings
======================================================

A call string is classified by two ordered rule lists supplied at
construction:

* **ignore rules**: if any one fully matches, the call is ``IGNORED``
  and never extracted, whatever its frequency;
* **type rules**: tried in declared order, the first full match gives
  the call's type (``RESOLVED``).  Exact builtins and constructors come
  before the generic ``...edf(...)`` / ``...bsdf(...)`` suffix rules.

Anything else is ``UNKNOWN``.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Pattern, Sequence, Tuple

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Rules
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TypeRule:
    """``pattern`` fully matching a call string means it returns ``type_name``."""

    pattern: str
    type_name: str
    regex: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern))

    def matches(self, call: str) -> bool:
        return self.regex.fullmatch(call) is not None


@dataclass(frozen=True)
class IgnoreRule:
    """Vetoes extraction of any call string ``pattern`` fully matches."""

    name: str
    pattern: str
    regex: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern))

    def matches(self, call: str) -> bool:
        return self.regex.fullmatch(call) is not None


def _builtin(name: str) -> str:
    return rf"(::)?{name}\(.*\)"


def _constructor(name: str) -> str:
    return rf"{name}\(.*\)"


DEFAULT_TYPE_RULES: Tuple[TypeRule, ...] = (
    # Both math builtins accept the bare and the ``::``-rooted spelling.
    TypeRule(_builtin(r"math::(cos|sin)"), "float"),
    TypeRule(_builtin("state::texture_coordinate"), "float3"),
    TypeRule(_builtin("state::texture_tangent_u"), "float3"),
    TypeRule(_builtin("state::texture_tangent_v"), "float3"),
    TypeRule(_builtin("base::texture_coordinate_info"), "::base::texture_coordinate_info"),
    TypeRule(_builtin("base::anisotropy_conversion"), "::base::anisotropy_return"),
    TypeRule(_builtin("state::normal"), "float3"),
    TypeRule(_builtin("df::diffuse_edf"), "edf"),
    TypeRule(_builtin("math::luminance"), "float"),
    TypeRule(_builtin("base::gloss_to_rough"), "float"),
    TypeRule(_builtin("df::light_profile_maximum"), "float"),
    TypeRule(_builtin("texture_isvalid"), "bool"),
    TypeRule(_builtin("meters_per_scene_unit"), "float"),
    TypeRule(_builtin("base::transform_coordinate"), "::base::texture_coordinate_info"),
    TypeRule(_builtin("base::file_texture"), "::base::texture_return"),
    TypeRule(_builtin("nvidia::core_definitions::blend_colors"), "::base::texture_return"),
    TypeRule(_constructor("int"), "int"),
    TypeRule(_constructor("color"), "color"),
    TypeRule(_constructor("float"), "float"),
    TypeRule(_constructor("float2"), "float2"),
    TypeRule(_constructor("float3"), "float3"),
    TypeRule(_constructor("float4"), "float4"),
    TypeRule(_constructor("float3x3"), "float3x3"),
    TypeRule(_constructor("float4x4"), "float4x4"),
    TypeRule(_constructor("texture_2d"), "texture_2d"),
    # Generic catch-alls; must stay last.
    TypeRule(r".*edf\(.*\)", "edf"),
    TypeRule(r".*bsdf\(.*\)", "bsdf"),
)

DEFAULT_IGNORE_RULES: Tuple[IgnoreRule, ...] = (
    IgnoreRule("anno", r"(::)?anno::.*\(.*\)"),
    IgnoreRule("contribution", r"contribution\(.*\)"),
    IgnoreRule("annotations", r".*annotations.*\(.*\)"),
    IgnoreRule("ui_position", r"ui_position\(.*\)"),
    IgnoreRule("type_of_material", r"type_of_material\(.*\)"),
    IgnoreRule("typical_object_size", r"typical_object_size\(.*\)"),
    IgnoreRule("suitable_as_light", r"suitable_as_light\(.*\)"),
    IgnoreRule("abs", r"abs\(.*\)"),
    IgnoreRule("log", r"log\(.*\)"),
)


# ═══════════════════════════════════════════════════════════════════
#  Verdicts
# ═══════════════════════════════════════════════════════════════════

class VerdictKind(enum.Enum):
    IGNORED = "ignored"
    RESOLVED = "resolved"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Verdict:
    kind: VerdictKind
    type_name: Optional[str] = None
    type_rule: Optional[TypeRule] = None
    ignore_rule: Optional[IgnoreRule] = None

    @property
    def resolved(self) -> bool:
        return self.kind is VerdictKind.RESOLVED


class TypeInferenceEngine:
    """Classifies call strings against injected, ordered rule lists."""

    def __init__(
        self,
        type_rules: Sequence[TypeRule] = DEFAULT_TYPE_RULES,
        ignore_rules: Sequence[IgnoreRule] = DEFAULT_IGNORE_RULES,
    ) -> None:
        self.type_rules: Tuple[TypeRule, ...] = tuple(type_rules)
        self.ignore_rules: Tuple[IgnoreRule, ...] = tuple(ignore_rules)

    def ignored_by(self, call: str) -> Optional[IgnoreRule]:
        for rule in self.ignore_rules:
            if rule.matches(call):
                return rule
        return None

    def infer(self, call: str) -> Verdict:
        veto = self.ignored_by(call)
        if veto is not None:
            logger.debug("%s ignored by rule '%s'", call, veto.name)
            return Verdict(VerdictKind.IGNORED, ignore_rule=veto)

        for rule in self.type_rules:
            if rule.matches(call):
                return Verdict(VerdictKind.RESOLVED, type_name=rule.type_name, type_rule=rule)

        return Verdict(VerdictKind.UNKNOWN)
