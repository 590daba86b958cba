# hrd_survey/models/survey.py
import uuid

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text, Uuid
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from hrd_survey.db.base_class import Base
from hrd_survey.models.course import _utcnow

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Survey(Base):
    __tablename__ = "surveys"
    __table_args__ = (
        CheckConstraint("status IN ('draft','active','closed')", name="ck_surveys_status"),
        CheckConstraint("scale_type IN (5,7,9,10)", name="ck_surveys_scale_type"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id"), index=True)
    admin_id = Column(String, nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(Text)
    status = Column(String, nullable=False, default="draft", index=True)  # draft|active|closed
    unique_code = Column(String(16), unique=True, nullable=False, index=True)
    scale_type = Column(Integer, nullable=False, default=5)  # 5|7|9|10
    is_anonymous = Column(Boolean, nullable=False, default=True)
    start_date = Column(Date)
    end_date = Column(Date)

    # Cached narrative analysis
    ai_summary = Column(Text)
    ai_insights = Column(JSONType)
    ai_recommendations = Column(JSONType)
    ai_analyzed_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    closed_at = Column(DateTime(timezone=True))

    course = relationship("Course", back_populates="surveys")
    questions = relationship(
        "Question", back_populates="survey", order_by="Question.order_num", passive_deletes="all"
    )


class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("type IN ('choice','text')", name="ck_questions_type"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id"), nullable=False, index=True)

    type = Column(String, nullable=False)      # 'choice' | 'text'
    category = Column(String)                  # overall|content|instructor|facility|other
    content = Column(Text, nullable=False)
    order_num = Column(Integer, nullable=False)
    is_required = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    survey = relationship("Survey", back_populates="questions")
