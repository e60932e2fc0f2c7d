import csv
import io
from datetime import datetime, timezone
from uuid import uuid4

from app.analytics.calculators import build_report
from app.analytics.exporter import build_csv
from app.models.enums import QuestionType
from app.questions.schemas import QuestionSchema, ScaleBounds
from app.responses.schemas import ResponseRecord

SURVEY_ID = uuid4()
SUBMITTED = datetime(2024, 3, 10, 9, 30, tzinfo=timezone.utc)

QUESTIONS = [
    QuestionSchema(question_id="c", survey_id=SURVEY_ID, text="Colour", type=QuestionType.MULTIPLE_CHOICE, options=["red", "blue"]),
    QuestionSchema(question_id="f", survey_id=SURVEY_ID, text="Features", type=QuestionType.MULTIPLE_SELECTION, options=["a", "b"]),
    QuestionSchema(question_id="y", survey_id=SURVEY_ID, text="Recommend?", type=QuestionType.YES_NO),
    QuestionSchema(question_id="s", survey_id=SURVEY_ID, text="Score", type=QuestionType.SCALE, validation=ScaleBounds(min=1, max=5)),
]


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_header_then_one_row_per_response() -> None:
    responses = [
        ResponseRecord(
            response_id=uuid4(), survey_id=SURVEY_ID, submitted_at=SUBMITTED,
            answers={"c": "red", "f": ["a", "b"], "y": True, "s": 4},
        ),
        ResponseRecord(
            response_id=uuid4(), survey_id=SURVEY_ID, submitted_at=SUBMITTED,
            answers={"c": "blue"},
        ),
    ]
    report = build_report(QUESTIONS, responses)

    rows = _rows(build_csv(report, responses))

    assert rows[0] == ["Response ID", "Submitted At", "Colour", "Features", "Recommend?", "Score"]
    assert rows[1] == [
        str(responses[0].response_id), SUBMITTED.isoformat(), "red", "a; b", "yes", "4",
    ]
    assert rows[2] == [str(responses[1].response_id), SUBMITTED.isoformat(), "blue", "", "", ""]
    assert len(rows) == 3


def test_values_with_commas_and_quotes_are_escaped() -> None:
    question = QuestionSchema(question_id="t", survey_id=SURVEY_ID, text='Say "hi", please', type=QuestionType.TEXT)
    response = ResponseRecord(
        response_id=uuid4(), survey_id=SURVEY_ID, submitted_at=SUBMITTED,
        answers={"t": 'hello, "world"\nsecond line'},
    )
    report = build_report([question], [response])

    rows = _rows(build_csv(report, [response]))

    assert rows[0][2] == 'Say "hi", please'
    assert rows[1][2] == 'hello, "world"\nsecond line'


def test_no_responses_yields_header_only() -> None:
    report = build_report(QUESTIONS, [])
    assert _rows(build_csv(report, [])) == [
        ["Response ID", "Submitted At", "Colour", "Features", "Recommend?", "Score"],
    ]
