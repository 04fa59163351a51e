"""Command-line interface around :class:`rcalc.search.Calculator`.

Example::

    rcalc -s E24 -s E6 -s E24 \\
        -b "R1+R2+R3 <= 1e6" -b "R1+R2+R3 >= 1e4" \\
        -b "0.8 * (1 + R1/R3) ~ 6.0" -b "0.8 * (1 + (R1+R2)/R3) ~ 12.0"
"""
from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from rcalc.config import LOG_LEVELS, Settings, load_settings
from rcalc.constraints import ConstraintBuilder
from rcalc.display import format_matches
from rcalc.errors import RCalcError
from rcalc.models import SearchRequest
from rcalc.report import build_report, calculator_for, export_csv, export_json

__all__ = ["main"]

NO_SOLUTION = "Error: No values satisfy requirements"


def _parse_cli(argv: list[str] | None, settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rcalc",
        description="Find standard resistor values that satisfy a set of bounds",
    )
    parser.add_argument(
        "-s",
        "--series",
        action="append",
        default=[],
        metavar="SERIES",
        help="Series for the next slot (E3, E6, E12, E24, E48, E96); repeat once per slot, R1 first",
    )
    parser.add_argument(
        "-b",
        "--bound",
        action="append",
        default=[],
        metavar="BOUND",
        help="Bound of the form 'expr op target' with op one of <, <=, >, >=, ==, != or ~",
    )
    listing = parser.add_mutually_exclusive_group()
    listing.add_argument("--all", action="store_true", help="List every accepted combination, not just the best")
    listing.add_argument("--limit", type=int, help="List at most N combinations in order of error")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Print the report as JSON")
    output.add_argument("--csv", action="store_true", help="Print the matches as CSV")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=settings.strict,
        help="Abort when an expression cannot be evaluated instead of rejecting the combination",
    )
    parser.add_argument(
        "--count-only",
        action="store_true",
        help="Print the number of combinations and exit without searching",
    )
    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default=settings.log_level,
        help="Logging level for rcalc",
    )
    ns = parser.parse_args(argv)
    if ns.limit is not None and ns.limit < 1:
        parser.error("--limit must be at least 1")
    return ns


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name)
    pkg_logger = logging.getLogger("rcalc")
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(logging.BASIC_FORMAT))
    handler.setLevel(level)
    pkg_logger.addHandler(handler)
    pkg_logger.propagate = False
    pkg_logger.setLevel(level)


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(2)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    try:
        settings = load_settings()
    except ValidationError as exc:
        _fail(f"invalid RCALC_* environment settings: {exc}")

    ns = _parse_cli(argv, settings)
    _configure_logging(ns.log_level)

    limit = ns.limit
    if limit is None and ns.all:
        limit = settings.max_results

    try:
        request = SearchRequest(
            slots=ns.series,
            constraints=ns.bound,
            strict=ns.strict,
            limit=limit,
            best_only=not (ns.all or ns.limit is not None),
        )
    except ValidationError as exc:
        _fail(str(exc))

    try:
        calc = calculator_for(request)
        if not (ns.json or ns.csv):
            print(f"Number of combinations: {calc.combinations()}")
        if ns.count_only:
            return

        score = (
            ConstraintBuilder()
            .extend(request.constraints)
            .finish(slot_count=len(calc), strict=request.strict)
        )
        results = calc.search(score)
    except RCalcError as exc:
        _fail(str(exc))

    if results is None:
        sys.exit(NO_SOLUTION)

    if ns.json or ns.csv:
        report = build_report(request, calc, results)
        print(export_json(report) if ns.json else export_csv(report), end="" if ns.csv else "\n")
        return

    entries = results.best() if request.best_only else list(results)
    if request.limit is not None:
        entries = entries[:request.limit]
    print(format_matches(entries))


if __name__ == "__main__":  # pragma: no cover
    main()
