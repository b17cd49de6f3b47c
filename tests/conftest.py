# tests/conftest.py
"""
Shared MDL sample sources and fixtures for the mdlcse test-suite.
"""

import pytest

from mdlcse.grammar import build_grammar


# ═══════════════════════════════════════════════════════════════════
#  Sample sources
# ═══════════════════════════════════════════════════════════════════

COS_MDL = "let { a = math::cos(x) + math::cos(x); b = math::cos(x) * 2; }"

UNKNOWN_MDL = "let { p = foo::bar(x); q = foo::bar(x); }"

TWO_CALLS_MDL = (
    "let { a = state::normal() + state::normal(); "
    "b = math::sin(y) * math::sin(y); }"
)

MIXED_MDL = (
    "let { a = foo::bar(x) + foo::bar(x) + abs(x) + abs(x); "
    "b = math::cos(t) * math::cos(t) + float3(1.0) ; c = float3(1.0); }"
)

TERNARY_MDL = "let { a = c ? x : y; b = c ? x : y; d = e ? f : g; }"

MATERIAL_MDL = '''mdl 1.6;

import ::base::*;
import ::df::*;
import ::state::*;
import ::tex::*;

export material Example(
    uniform texture_2d tex = texture_2d("./albedo.png", ::tex::gamma_srgb)
        [[ ::anno::display_name("Albedo") ]],
    float roughness = 0.5f
)
 = let {
    float3 n = ::state::normal();
    color tint = ::base::file_texture(tex, color(0.0), color(1.0), ::base::mono_alpha, ::base::texture_coordinate_info(::state::texture_coordinate(0), ::state::texture_tangent_u(0), ::state::texture_tangent_v(0))).tint;
    color spec = ::base::file_texture(tex, color(0.0), color(1.0), ::base::mono_alpha, ::base::texture_coordinate_info(::state::texture_coordinate(0), ::state::texture_tangent_u(0), ::state::texture_tangent_v(0))).tint;
    float r = roughness * roughness;
    bsdf base = ::df::diffuse_reflection_bsdf(tint, r);
    bsdf coat = ::df::diffuse_reflection_bsdf(tint, r);
 } in material(
    surface: material_surface(scattering: ::df::weighted_layer(0.5, coat, base, ::state::normal())),
    geometry: material_geometry(normal: ::state::normal())
 );
'''


@pytest.fixture(scope="module")
def grammar():
    """Ternary-first grammar, compiled once."""
    return build_grammar(True)


@pytest.fixture(scope="module")
def arithmetic_grammar():
    """Arithmetic-chain-first grammar, compiled once."""
    return build_grammar(False)
