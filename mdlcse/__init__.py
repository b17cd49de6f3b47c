"""mdlcse — common-subexpression elimination for MDL materials.

Finds function calls repeated inside a material's ``let { ... }`` block,
infers their return types from an ordered rule table and binds each one
to a generated variable, optionally rewriting the source.

Submodules
----------
grammar
    Parsimonious PEG grammar for MDL expressions and the seek scanner
    (``scan`` / ``find_all``).

collector
    Region isolation (``let {`` opener, breadcrumb markers) and call
    collection per ``ExtractionMode``.

frequency
    ``FrequencyTable``: exact-string occurrence counts in key order.

inference
    ``TypeInferenceEngine`` with the default MDL type and ignore tables.

rules_file
    S-expression loader for custom rule tables.

rewriter
    Pure substitution / declaration insertion and report lines.

engine
    ``Reducer`` / ``reduce_source``: the whole pass.

main
    CLI entry-point.

Usage
-----
Command-line::

    python -m mdlcse material.mdl v_ material.reduced.mdl

Programmatic::

    from mdlcse import reduce_source

    result = reduce_source(text, "v_", export=True)
    print(result.report)
    new_text = result.output
"""

from __future__ import annotations

__version__: str = "0.1.0"

from .engine import Reducer, ReductionResult, reduce_source  # noqa: E402

__all__: list[str] = [
    "__version__",
    "Reducer",
    "ReductionResult",
    "reduce_source",
]
