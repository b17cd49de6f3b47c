# tests/test_engine.py
"""
End-to-end tests for the reduction pipeline.
"""

import pytest

from mdlcse.collector import BREADCRUMB, ExtractionMode
from mdlcse.config import ReductionConfig
from mdlcse.engine import Reducer, reduce_source
from mdlcse.errors import RuleFileError
from mdlcse.inference import TypeInferenceEngine, TypeRule
from tests.conftest import (
    COS_MDL,
    MATERIAL_MDL,
    MIXED_MDL,
    TERNARY_MDL,
    TWO_CALLS_MDL,
    UNKNOWN_MDL,
)


class TestFunctionCalls:

    def test_report(self):
        result = reduce_source(COS_MDL, "v_")
        assert result.report_lines == [
            "float v_0 = math::cos(x);",
            "math::cos(x) -> v_0 : 3",
            "",
        ]
        assert result.report == "float v_0 = math::cos(x);\nmath::cos(x) -> v_0 : 3\n\n"
        assert result.output is None

    def test_export(self):
        result = reduce_source(COS_MDL, "v_", export=True)
        assert result.output == (
            "let {\n"
            f"float v_0 = math::cos(x);  // {BREADCRUMB}\n"
            " a = v_0 + v_0; b = v_0 * 2; }"
        )

    def test_rerun_finds_nothing(self):
        first = reduce_source(COS_MDL, "v_", export=True)
        second = reduce_source(first.output, "w_", export=True)
        assert second.bindings == []
        assert second.report_lines == []
        assert second.output.count(BREADCRUMB) == 1
        assert "a = v_0 + v_0" in second.output

    def test_rerun_with_same_prefix_is_idempotent(self):
        first = reduce_source(COS_MDL, "v_", export=True)
        second = reduce_source(first.output, "v_", export=True)
        assert second.bindings == []
        assert second.report_lines == []
        assert second.output.count(BREADCRUMB) == 1
        assert second.output.count("float v_0 = math::cos(x);") == 1

    def test_deterministic(self):
        a = reduce_source(MATERIAL_MDL, "v_", export=True)
        b = reduce_source(MATERIAL_MDL, "v_", export=True)
        assert a.report == b.report
        assert a.output == b.output

    def test_bindings_in_key_order(self):
        result = reduce_source(TWO_CALLS_MDL, "v_", export=True)
        assert [(b.name, b.type_name, b.call) for b in result.bindings] == [
            ("v_0", "float", "math::sin(y)"),
            ("v_1", "float3", "state::normal()"),
        ]
        head = result.output.split("\n")
        assert head[1].startswith("float3 v_1 = state::normal();")
        assert head[2].startswith("float v_0 = math::sin(y);")

    def test_singletons_not_extracted(self):
        result = reduce_source("let { a = math::cos(x); }", "v_", export=True)
        assert result.bindings == []
        assert result.output == "let {\n a = math::cos(x); }"

    def test_counts_sum_to_matches(self):
        result = reduce_source(MATERIAL_MDL, "v_")
        assert sum(n for _, n in result.table.items()) == len(result.matches)

    def test_no_opener_searches_whole_text(self):
        result = reduce_source("math::cos(x) + math::cos(x)", "v_", export=True)
        assert result.region.prefix == ""
        assert result.output == (
            f"\nfloat v_0 = math::cos(x);  // {BREADCRUMB}\nv_0 + v_0"
        )


class TestClassification:

    def test_unknown_reported_not_substituted(self):
        result = reduce_source(UNKNOWN_MDL, "v_", export=True)
        assert result.report_lines == [
            "foo::bar(x) return type UNKNOWN! called 2 times.",
            "",
        ]
        assert result.unknown == ["foo::bar(x)"]
        assert result.bindings == []
        assert result.output == "let {\n p = foo::bar(x); q = foo::bar(x); }"

    def test_mixed(self):
        result = reduce_source(MIXED_MDL, "v_", export=True)
        assert result.ignored == ["abs(x)"]
        assert result.unknown == ["foo::bar(x)"]
        # Unknown and ignored calls consume no serial.
        assert [(b.name, b.call) for b in result.bindings] == [
            ("v_0", "float3(1.0)"),
            ("v_1", "math::cos(t)"),
        ]
        assert result.report_lines == [
            "float3 v_0 = float3(1.0);",
            "float3(1.0) -> v_0 : 2",
            "",
            "foo::bar(x) return type UNKNOWN! called 2 times.",
            "",
            "float v_1 = math::cos(t);",
            "math::cos(t) -> v_1 : 2",
            "",
        ]
        assert "abs(x) + abs(x)" in result.output
        assert "b = v_1 * v_1 + v_0 ; c = v_0;" in result.output

    def test_injected_inference(self):
        engine = TypeInferenceEngine([TypeRule(r"foo::bar\(.*\)", "int")], [])
        result = reduce_source(UNKNOWN_MDL, "t", export=True, inference=engine)
        assert result.report_lines[0] == "int t0 = foo::bar(x);"
        assert "p = t0; q = t0;" in result.output

    def test_rules_file_from_config(self, tmp_path):
        path = tmp_path / "foo.rules"
        path.write_text('(rules (type "foo::bar[(].*[)]" "color"))', encoding="utf-8")
        config = ReductionConfig(rules_file=str(path))
        result = Reducer(config).reduce(UNKNOWN_MDL, "v_")
        assert result.bindings[0].type_name == "color"

    def test_bad_rules_file(self, tmp_path):
        config = ReductionConfig(rules_file=str(tmp_path / "missing.rules"))
        with pytest.raises(RuleFileError):
            Reducer(config)


class TestConfig:

    def test_first_serial(self):
        result = reduce_source(COS_MDL, "v_", config=ReductionConfig(first_serial=5))
        assert result.bindings[0].name == "v_5"

    def test_min_repeats(self):
        config = ReductionConfig(min_repeats=3)
        assert reduce_source(COS_MDL, "v_", config=config).bindings[0].count == 3
        assert reduce_source(TWO_CALLS_MDL, "v_", config=config).bindings == []

    def test_custom_breadcrumb(self):
        config = ReductionConfig(breadcrumb="#done#")
        result = reduce_source(COS_MDL, "v_", export=True, config=config)
        assert "float v_0 = math::cos(x);  // #done#\n" in result.output
        assert BREADCRUMB not in result.output

    def test_validate(self):
        assert ReductionConfig().validate() == []
        warnings = ReductionConfig(min_repeats=1, first_serial=-1,
                                   breadcrumb="", start_marker="(").validate()
        assert len(warnings) == 4

    def test_reducer_is_reusable(self):
        reducer = Reducer()
        first = reducer.reduce(COS_MDL, "v_")
        second = reducer.reduce(COS_MDL, "v_")
        assert first.report == second.report


class TestConditionalExpressions:

    CONFIG = ReductionConfig(mode=ExtractionMode.CONDITIONAL_EXPRESSIONS)

    def test_report(self):
        result = reduce_source(TERNARY_MDL, "c_", config=self.CONFIG)
        assert result.report_lines == [
            "auto c_0 = c ? x : y;",
            "",
            "auto c_1 = e ? f : g;",
            "",
        ]
        assert [b.count for b in result.bindings] == [2, 1]

    def test_export_writes_region_unchanged(self):
        result = reduce_source(TERNARY_MDL, "c_", export=True, config=self.CONFIG)
        assert result.output == "let {\n a = c ? x : y; b = c ? x : y; d = e ? f : g; }"
        assert BREADCRUMB not in result.output

    def test_no_output_without_export(self):
        result = reduce_source(TERNARY_MDL, "c_", config=self.CONFIG)
        assert result.output is None


class TestMultiPass:
    """Nested calls are reduced from the inside out over successive runs."""

    def test_first_pass(self):
        result = reduce_source(MATERIAL_MDL, "v_", export=True)
        assert [(b.name, b.type_name, b.call, b.count) for b in result.bindings] == [
            ("v_0", "bsdf", "::df::diffuse_reflection_bsdf(tint, r)", 2),
            ("v_1", "float3", "::state::normal()", 3),
            ("v_2", "float3", "::state::texture_coordinate(0)", 2),
            ("v_3", "float3", "::state::texture_tangent_u(0)", 2),
            ("v_4", "float3", "::state::texture_tangent_v(0)", 2),
            ("v_5", "color", "color(0.0)", 2),
            ("v_6", "color", "color(1.0)", 2),
        ]
        assert result.output.count(BREADCRUMB) == 7
        # Nothing before the block is touched.
        assert result.output.startswith(result.region.prefix)
        assert '::anno::display_name("Albedo")' in result.output

    def test_three_passes(self):
        first = reduce_source(MATERIAL_MDL, "v_", export=True)
        second = reduce_source(first.output, "w_", export=True)
        assert [(b.name, b.type_name, b.call) for b in second.bindings] == [
            ("w_0", "::base::texture_coordinate_info",
             "::base::texture_coordinate_info(v_2, v_3, v_4)"),
        ]

        third = reduce_source(second.output, "x_", export=True)
        assert [(b.name, b.type_name, b.call) for b in third.bindings] == [
            ("x_0", "::base::texture_return",
             "::base::file_texture(tex, v_5, v_6, ::base::mono_alpha, w_0)"),
        ]
        assert "color tint = x_0.tint;" in third.output
        assert "color spec = x_0.tint;" in third.output
        assert third.output.count(BREADCRUMB) == 9
