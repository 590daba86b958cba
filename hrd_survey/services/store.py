# hrd_survey/services/store.py
"""
SurveyStore: the per-request data accessor every endpoint goes through.

One instance wraps one SQLAlchemy session (see ``api.deps.store.get_store``).
Methods commit their own writes; reads never commit.
"""
from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Iterable, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from hrd_survey.models.course import Course
from hrd_survey.models.enums import SurveyStatus
from hrd_survey.models.response import Answer, Response
from hrd_survey.models.survey import Question, Survey

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8


def generate_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def _apply(obj, patch: dict[str, Any], allowed: Iterable[str]) -> None:
    for key in allowed:
        if key in patch:
            setattr(obj, key, patch[key])


COURSE_FIELDS = (
    "title", "objectives", "content", "instructor",
    "training_start_date", "training_end_date", "target_participants",
)
SURVEY_FIELDS = (
    "course_id", "title", "description", "status", "scale_type", "is_anonymous",
    "start_date", "end_date", "closed_at",
    "ai_summary", "ai_insights", "ai_recommendations", "ai_analyzed_at",
)
QUESTION_FIELDS = ("type", "category", "content", "order_num", "is_required")


class SurveyStore:
    def __init__(self, db: Session):
        self.db = db

    # ---------- Courses ----------

    def list_courses(self, search: str | None = None, offset: int = 0,
                     limit: int | None = None) -> tuple[list[Course], int]:
        q = self.db.query(Course)
        if search:
            like = f"%{search}%"
            q = q.filter(or_(Course.title.ilike(like), Course.instructor.ilike(like)))
        total = q.count()
        q = q.order_by(Course.created_at.desc()).offset(offset)
        if limit is not None:
            q = q.limit(limit)
        return q.all(), total

    def get_course(self, course_id: UUID) -> Optional[Course]:
        return self.db.get(Course, course_id)

    def create_course(self, admin_id: str, data: dict[str, Any]) -> Course:
        course = Course(admin_id=admin_id)
        _apply(course, data, COURSE_FIELDS)
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        return course

    def update_course(self, course: Course, patch: dict[str, Any]) -> Course:
        _apply(course, patch, COURSE_FIELDS)
        self.db.commit()
        self.db.refresh(course)
        return course

    def delete_course(self, course: Course) -> None:
        """Deletes the course's surveys one by one, then the course itself."""
        for survey in self.list_surveys(course_id=course.id):
            self.delete_survey(survey)
        self.db.delete(course)
        self.db.commit()
        logger.info("[STORE] Course %s deleted", course.id)

    # ---------- Surveys ----------

    def list_surveys(self, course_id: UUID | None = None, status: str | None = None,
                     search: str | None = None) -> list[Survey]:
        q = self.db.query(Survey)
        if course_id is not None:
            q = q.filter(Survey.course_id == course_id)
        if status:
            q = q.filter(Survey.status == status)
        if search:
            q = q.filter(Survey.title.ilike(f"%{search}%"))
        return q.order_by(Survey.created_at.desc()).all()

    def get_survey(self, survey_id: UUID) -> Optional[Survey]:
        return self.db.get(Survey, survey_id)

    def get_survey_by_code(self, code: str) -> Optional[Survey]:
        return self.db.query(Survey).filter(Survey.unique_code == code.strip().upper()).first()

    def _unused_code(self) -> str:
        while True:
            code = generate_code()
            if not self.db.query(Survey.id).filter(Survey.unique_code == code).first():
                return code

    def create_survey(self, admin_id: str, data: dict[str, Any]) -> Survey:
        survey = Survey(admin_id=admin_id, status=SurveyStatus.draft.value, unique_code=self._unused_code())
        _apply(survey, {k: v for k, v in data.items() if k != "status"}, SURVEY_FIELDS)
        self.db.add(survey)
        self.db.commit()
        self.db.refresh(survey)
        logger.info("[STORE] Survey %s created (code=%s)", survey.id, survey.unique_code)
        return survey

    def update_survey(self, survey: Survey, patch: dict[str, Any]) -> Survey:
        _apply(survey, patch, SURVEY_FIELDS)
        self.db.commit()
        self.db.refresh(survey)
        return survey

    def delete_survey(self, survey: Survey) -> None:
        response_ids = select(Response.id).where(Response.survey_id == survey.id)
        self.db.query(Answer).filter(Answer.response_id.in_(response_ids)) \
            .delete(synchronize_session=False)
        self.db.query(Response).filter(Response.survey_id == survey.id).delete(synchronize_session=False)
        self.db.query(Question).filter(Question.survey_id == survey.id).delete(synchronize_session=False)
        self.db.delete(survey)
        self.db.commit()
        logger.info("[STORE] Survey %s deleted", survey.id)

    # ---------- Questions ----------

    def get_questions(self, survey_id: UUID) -> list[Question]:
        return (
            self.db.query(Question)
            .filter(Question.survey_id == survey_id)
            .order_by(Question.order_num, Question.created_at)
            .all()
        )

    def get_question(self, survey_id: UUID, question_id: UUID) -> Optional[Question]:
        return (
            self.db.query(Question)
            .filter(Question.id == question_id, Question.survey_id == survey_id)
            .first()
        )

    def count_questions(self, survey_id: UUID) -> int:
        return self.db.query(func.count(Question.id)).filter(Question.survey_id == survey_id).scalar() or 0

    def next_order_num(self, survey_id: UUID) -> int:
        current = self.db.query(func.max(Question.order_num)).filter(Question.survey_id == survey_id).scalar()
        return (current or 0) + 1

    def create_question(self, survey_id: UUID, data: dict[str, Any]) -> Question:
        question = Question(survey_id=survey_id)
        _apply(question, data, QUESTION_FIELDS)
        if question.order_num is None:
            question.order_num = self.next_order_num(survey_id)
        self.db.add(question)
        self.db.commit()
        self.db.refresh(question)
        return question

    def update_question(self, question: Question, patch: dict[str, Any]) -> Question:
        _apply(question, patch, QUESTION_FIELDS)
        self.db.commit()
        self.db.refresh(question)
        return question

    def _drop_questions(self, question_ids) -> None:
        # Answers pointing at a removed question can no longer be aggregated
        self.db.query(Answer).filter(Answer.question_id.in_(question_ids)).delete(synchronize_session=False)
        self.db.query(Question).filter(Question.id.in_(question_ids)).delete(synchronize_session=False)

    def delete_question(self, question: Question) -> None:
        self._drop_questions([question.id])
        self.db.commit()

    def delete_questions(self, survey_id: UUID) -> int:
        ids = [qid for (qid,) in self.db.query(Question.id).filter(Question.survey_id == survey_id)]
        if ids:
            self._drop_questions(ids)
        self.db.commit()
        return len(ids)

    def replace_questions(self, survey_id: UUID, items: list[dict[str, Any]]) -> list[Question]:
        """Bulk replace: old set deleted, new set inserted in one commit."""
        ids = [qid for (qid,) in self.db.query(Question.id).filter(Question.survey_id == survey_id)]
        if ids:
            self._drop_questions(ids)
        for i, item in enumerate(items, start=1):
            question = Question(survey_id=survey_id)
            _apply(question, item, QUESTION_FIELDS)
            if question.order_num is None:
                question.order_num = i
            self.db.add(question)
        self.db.commit()
        logger.info("[STORE] Survey %s questions replaced (%d -> %d)", survey_id, len(ids), len(items))
        return self.get_questions(survey_id)

    # ---------- Responses ----------

    def get_responses(self, survey_id: UUID, offset: int = 0, limit: int | None = None) -> list[Response]:
        q = (
            self.db.query(Response)
            .filter(Response.survey_id == survey_id)
            .order_by(Response.submitted_at.desc())
            .offset(offset)
        )
        if limit is not None:
            q = q.limit(limit)
        return q.all()

    def count_responses(self, survey_id: UUID | None = None) -> int:
        q = self.db.query(func.count(Response.id))
        if survey_id is not None:
            q = q.filter(Response.survey_id == survey_id)
        return q.scalar() or 0

    def has_response(self, survey_id: UUID, session_id: str) -> bool:
        return (
            self.db.query(Response.id)
            .filter(Response.survey_id == survey_id, Response.session_id == session_id)
            .first()
            is not None
        )

    def create_response(self, survey_id: UUID, session_id: str, answers: list[dict[str, Any]],
                        respondent_name: str | None = None,
                        device_info: dict | None = None) -> Response:
        """
        Inserts the response and its answers in one commit. The unique
        (survey_id, session_id) constraint raises IntegrityError on a
        concurrent duplicate; the session is rolled back before re-raising.
        """
        response = Response(
            survey_id=survey_id,
            session_id=session_id,
            respondent_name=respondent_name,
            device_info=device_info,
            submitted_at=datetime.now(timezone.utc),
        )
        response.answers = [
            Answer(
                question_id=a["question_id"],
                score_value=a.get("score_value"),
                text_value=a.get("text_value"),
            )
            for a in answers
        ]
        self.db.add(response)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(response)
        return response

    def recent_responses(self, limit: int = 10) -> list[Response]:
        return self.db.query(Response).order_by(Response.submitted_at.desc()).limit(limit).all()

    def count_surveys_by_status(self) -> dict[str, int]:
        rows = self.db.query(Survey.status, func.count(Survey.id)).group_by(Survey.status).all()
        counts = {s.value: 0 for s in SurveyStatus}
        for status, n in rows:
            counts[status] = n
        return counts

    def count_courses(self) -> int:
        return self.db.query(func.count(Course.id)).scalar() or 0

    def recent_surveys(self, limit: int = 5) -> list[Survey]:
        return self.db.query(Survey).order_by(Survey.created_at.desc()).limit(limit).all()
