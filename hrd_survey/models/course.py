# hrd_survey/models/course.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from hrd_survey.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Course(Base):
    __tablename__ = "courses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    admin_id = Column(String, nullable=False, index=True)  # token 'sub'

    title = Column(String, nullable=False)
    objectives = Column(Text)
    content = Column(Text)
    instructor = Column(String)
    training_start_date = Column(Date)
    training_end_date = Column(Date)
    target_participants = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # No ORM cascade: deleting a course walks its surveys in SurveyStore.delete_course
    surveys = relationship(
        "Survey", back_populates="course", order_by="Survey.created_at.desc()", passive_deletes="all"
    )
