# hrd_survey/models/response.py
import uuid

from sqlalchemy import (
    CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship

from hrd_survey.db.base_class import Base
from hrd_survey.models.course import _utcnow
from hrd_survey.models.survey import JSONType


class Response(Base):
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint("survey_id", "session_id", name="uq_responses_survey_session"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id"), nullable=False, index=True)
    session_id = Column(String(64), nullable=False)
    respondent_name = Column(String)  # only kept for non-anonymous surveys
    device_info = Column(JSONType)

    submitted_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    answers = relationship(
        "Answer",
        back_populates="response",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class Answer(Base):
    __tablename__ = "answers"
    __table_args__ = (
        CheckConstraint("(score_value IS NULL) <> (text_value IS NULL)", name="ck_answers_one_value"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    response_id = Column(Uuid(as_uuid=True), ForeignKey("responses.id"), nullable=False, index=True)
    question_id = Column(Uuid(as_uuid=True), ForeignKey("questions.id"), nullable=False, index=True)

    score_value = Column(Integer)  # NULL for text questions
    text_value = Column(Text)      # NULL for choice questions

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    response = relationship("Response", back_populates="answers")
