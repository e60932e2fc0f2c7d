"""CSV export of survey results.

The header comes from the report's question labels; data rows need the raw
responses, so callers pass the same response collection the report was built
from.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from typing import Any

from app.analytics.schemas import AggregationReport
from app.responses.schemas import ResponseRecord

BASE_COLUMNS = ("Response ID", "Submitted At")
SELECTION_SEPARATOR = "; "


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (list, tuple)):
        return SELECTION_SEPARATOR.join(_cell(v) for v in value)
    return str(value)


def build_csv(report: AggregationReport, responses: Sequence[ResponseRecord]) -> str:
    """One header row, then one row per response with answers in header order."""
    question_ids = list(report.per_question)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([*BASE_COLUMNS, *(report.per_question[q].question for q in question_ids)])
    for response in responses:
        answers = response.answers if isinstance(response.answers, dict) else {}
        writer.writerow([
            str(response.response_id),
            response.submitted_at.isoformat(),
            *(_cell(answers.get(q)) for q in question_ids),
        ])
    return buffer.getvalue()
