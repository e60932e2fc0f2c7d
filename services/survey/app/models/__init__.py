# Import all models so Alembic can discover them via Base.metadata
from .enums import CHOICE_TYPES, QuestionType
from .question import Question
from .survey import Survey
from .survey_response import SurveyResponse

__all__ = [
    "CHOICE_TYPES",
    "Question",
    "QuestionType",
    "Survey",
    "SurveyResponse",
]
