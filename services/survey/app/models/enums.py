import enum

from sqlalchemy import Enum as SAEnum


class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    MULTIPLE_SELECTION = "multiple_selection"
    YES_NO = "yes_no"
    TEXT = "text"
    SCALE = "scale"
    DATE = "date"


CHOICE_TYPES = frozenset({QuestionType.MULTIPLE_CHOICE, QuestionType.MULTIPLE_SELECTION})

question_type_enum = SAEnum(
    QuestionType,
    name="questiontype",
    values_callable=lambda e: [m.value for m in e],
)
