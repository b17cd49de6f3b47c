#!/usr/bin/env python3
"""mdlcse/main.py — CLI entry-point.

Usage examples
--------------
    # Report repeated calls in a material, no rewriting
    python -m mdlcse material.mdl v_

    # Reduce repeated calls and write the result
    python -m mdlcse material.mdl v_ material.reduced.mdl

    # Report ternary expressions instead of calls
    python -m mdlcse material.mdl c_ --mode conditional-expressions

    # Use a custom type/ignore table
    python -m mdlcse material.mdl v_ out.mdl --rules mylib.rules

Running the command again on its own output is safe: declarations left
by earlier passes end with a breadcrumb comment and are skipped.  Use a
fresh prefix (or ``--first-serial``) per pass to keep names unique.

Exit codes
----------
    0   Success.
    1   Usage error.
    2   Infrastructure failure (unreadable input, unwritable output,
        bad rules file).

The module doubles as ``python -m mdlcse`` via ``mdlcse/__main__.py``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .collector import ExtractionMode
from .config import ReductionConfig
from .engine import Reducer
from .errors import InputUnreadableError, MdlReduceError, OutputUnwritableError

_log = logging.getLogger("mdlcse")

EXIT_OK: int = 0
EXIT_USAGE: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``mdlcse`` logger: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("mdlcse")
    root.setLevel(level)
    # Repeated main() calls (tests, embedding) replace the previous handler.
    for old in [h for h in root.handlers if getattr(h, "_mdlcse_cli", False)]:
        root.removeHandler(old)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    handler._mdlcse_cli = True  # type: ignore[attr-defined]
    root.addHandler(handler)


def read_source(path: str) -> str:
    """Read *path* verbatim (line endings preserved)."""
    try:
        with open(path, encoding="utf-8", newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise InputUnreadableError(str(exc), path=path, cause=exc) from exc


def write_output(path: str, text: str) -> None:
    p = Path(path).expanduser()
    try:
        with open(p, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
    except OSError as exc:
        raise OutputUnwritableError(str(exc), path=path, cause=exc) from exc


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdlcse",
        description=(
            "Common-subexpression elimination for MDL materials: bind "
            "repeated calls in a 'let { ... }' block to generated variables."
        ),
    )
    parser.add_argument("input", metavar="INPUT", help="MDL source file.")
    parser.add_argument("prefix", metavar="PREFIX", help="Prefix for generated names.")
    parser.add_argument(
        "output",
        metavar="OUTPUT",
        nargs="?",
        default=None,
        help="Write the rewritten source here (enables rewriting).",
    )
    parser.add_argument(
        "-m", "--mode",
        choices=[m.value for m in ExtractionMode],
        default=ExtractionMode.FUNCTION_CALLS.value,
        help="What to extract (default: function-calls).",
    )
    parser.add_argument(
        "-r", "--rules",
        metavar="FILE",
        default=None,
        help="S-expression file with type/ignore rules.",
    )
    parser.add_argument(
        "--arithmetic-first",
        action="store_true",
        help="Try arithmetic chains before ternaries inside call arguments.",
    )
    parser.add_argument(
        "--first-serial",
        type=int,
        default=0,
        metavar="N",
        help="First serial number for generated names (default: 0).",
    )
    parser.add_argument(
        "--min-repeats",
        type=int,
        default=2,
        metavar="N",
        help="Minimum occurrences before a call is extracted (default: 2).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v INFO, -vv DEBUG).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the exit code."""
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code in (0, None):
            return EXIT_OK
        return EXIT_USAGE

    _configure_logging(args.verbose)

    config = ReductionConfig(
        mode=ExtractionMode(args.mode),
        min_repeats=args.min_repeats,
        ternary_first=not args.arithmetic_first,
        first_serial=args.first_serial,
        rules_file=args.rules,
    )
    for warning in config.validate():
        _log.warning("config: %s", warning)

    try:
        text = read_source(args.input)
    except InputUnreadableError as exc:
        _log.error("%s", exc)
        print("file not opened.")
        return EXIT_INFRA

    try:
        reducer = Reducer(config)
    except MdlReduceError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA

    export = args.output is not None
    result = reducer.reduce(text, args.prefix, export=export)
    sys.stdout.write(result.report)

    if result.output is not None:
        try:
            write_output(args.output, result.output)
        except OutputUnwritableError as exc:
            _log.error("%s", exc)
            print(f"failed to write {args.output}!")
            return EXIT_INFRA
        _log.info("Wrote %s", args.output)

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
