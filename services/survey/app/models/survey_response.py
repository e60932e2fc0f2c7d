import uuid
from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base


class SurveyResponse(Base):
    """One accepted answer set. Append-only: never updated in place."""

    __tablename__ = "survey_responses"

    response_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    survey_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("surveys.survey_id", ondelete="CASCADE"),
        nullable=False,
    )
    submitter_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    # {question_id: answer_value}
    answers: Mapped[dict] = mapped_column(JSONB, nullable=False)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    survey = relationship("Survey", back_populates="responses", lazy="select")

    __table_args__ = (
        Index("ix_survey_responses_survey_id", "survey_id"),
        Index("ix_survey_responses_submitter_id", "submitter_id"),
    )
