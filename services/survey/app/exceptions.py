"""Domain exception classes for the survey service.

These are raised by service-layer code and caught by controllers
to map to appropriate HTTP responses.
"""

from enum import Enum


class RejectReason(str, Enum):
    """Machine-readable reason an answer set was refused."""

    QUESTION_NOT_FOUND = "question_not_found"
    REQUIRED_NOT_ANSWERED = "required_not_answered"
    INVALID_OPTION = "invalid_option"
    OUT_OF_RANGE = "out_of_range"


class SurveyNotFoundError(Exception):
    def __init__(self, survey_id: str = ""):
        self.survey_id = survey_id
        super().__init__(f"Survey not found: {survey_id}")


class QuestionNotFoundError(Exception):
    def __init__(self, question_id: str = ""):
        self.question_id = question_id
        super().__init__(f"Question not found: {question_id}")


class ResponseNotFoundError(Exception):
    def __init__(self, response_id: str = ""):
        self.response_id = response_id
        super().__init__(f"Response not found: {response_id}")


class SurveyClosedError(Exception):
    """Raised when a survey is inactive or past its expiry and cannot take responses."""

    def __init__(self, survey_id: str = "", reason: str = "no longer active"):
        self.survey_id = survey_id
        self.reason = reason
        super().__init__(f"Survey {survey_id} is {reason}")


class NotSurveyOwnerError(Exception):
    """Raised when a user tries to read or modify a survey they don't own."""


class InvalidQuestionDefinitionError(Exception):
    """Raised when a question definition breaks the structural rules of its type."""

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"Invalid question definition: {detail}")


class AnswerRejectedError(Exception):
    """Raised when a submitted answer set fails validation against the survey's questions."""

    def __init__(self, reason: RejectReason, question_id: str, message: str = ""):
        self.reason = reason
        self.question_id = question_id
        self.message = message or reason.value.replace("_", " ")
        super().__init__(self.message)


class ExportStorageError(Exception):
    """Raised when the CSV export cannot be uploaded or its download URL cannot be signed."""
