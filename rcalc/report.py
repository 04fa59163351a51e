"""
Run searches from requests and export their results.

Reports are produced in multiple formats (model, CSV, JSON) from a
ResultSet, listing the ranked matches with their errors and values.
"""

import csv
import io
import logging
from typing import Optional

from rcalc.candidate import slot_name
from rcalc.constraints import ConstraintBuilder
from rcalc.display import format_candidate
from rcalc.models import MatchRecord, SearchReport, SearchRequest
from rcalc.results import ResultSet
from rcalc.search import ERROR_SCALE, Calculator
from rcalc.series import get_series

logger = logging.getLogger(__name__)


def calculator_for(request: SearchRequest) -> Calculator:
    return Calculator([get_series(name) for name in request.slots])


def build_report(request: SearchRequest, calc: Calculator, results: ResultSet) -> SearchReport:
    """
    Convert a ResultSet into a SearchReport.

    ``request.best_only`` keeps only the tied best matches; ``request.limit``
    caps the number of matches listed. ``accepted`` always counts every
    accepted candidate.
    """
    entries = results.best() if request.best_only else list(results)
    if request.limit is not None:
        entries = entries[:request.limit]

    matches = [
        MatchRecord(
            rank=rank,
            error=err / ERROR_SCALE,
            error_ppb=err,
            values=list(candidate.values),
            display=format_candidate(candidate),
        )
        for rank, (err, candidate) in enumerate(entries, start=1)
    ]

    return SearchReport(
        slots=list(request.slots),
        constraints=list(request.constraints),
        combinations=calc.combinations(),
        accepted=len(results),
        best_error=results.best_error / ERROR_SCALE,
        matches=matches,
    )


def run_request(request: SearchRequest) -> Optional[SearchReport]:
    """
    Compile the request's bounds, run the search and build a report.

    Returns None when no combination satisfies the bounds. Parse and
    unbound-variable errors propagate to the caller.
    """
    calc = calculator_for(request)
    score = (
        ConstraintBuilder()
        .extend(request.constraints)
        .finish(slot_count=len(calc), strict=request.strict)
    )
    results = calc.search(score)
    if results is None:
        logger.info('No values satisfy %d constraints', len(request.constraints))
        return None
    return build_report(request, calc, results)


def export_csv(report: SearchReport) -> str:
    """Export a report's matches as a CSV string."""
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(['Rank', 'Error'] + [slot_name(i) for i in range(1, len(report.slots) + 1)])
    for match in report.matches:
        writer.writerow([match.rank, f'{match.error:.9f}'] + [repr(v) for v in match.values])

    return output.getvalue()


def export_json(report: SearchReport) -> str:
    """Export a report as a JSON string."""
    return report.model_dump_json(indent=2)
