# hrd_survey/services/analysis.py
"""
Glue between the store and the pure aggregators: loads one survey (or every
survey of a course), aggregates it and, on request, adds the narrative.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from hrd_survey.core.errors import InvalidStateError
from hrd_survey.models.course import Course
from hrd_survey.models.survey import Survey
from hrd_survey.services.narrative import TextGenerator, request_course_narrative, request_survey_narrative
from hrd_survey.services.report import build_report
from hrd_survey.services.stats import build_course_analysis, build_survey_analysis
from hrd_survey.services.store import SurveyStore

logger = logging.getLogger(__name__)


def _load(store: SurveyStore, survey: Survey):
    course = store.get_course(survey.course_id) if survey.course_id else None
    return course, store.get_questions(survey.id), store.get_responses(survey.id)


def cached_narrative(survey: Survey) -> dict[str, Any]:
    return {
        "ai_summary": survey.ai_summary,
        "ai_insights": survey.ai_insights,
        "ai_recommendations": survey.ai_recommendations,
        "ai_analyzed_at": survey.ai_analyzed_at,
    }


def survey_analysis(store: SurveyStore, survey: Survey) -> dict[str, Any]:
    course, questions, responses = _load(store, survey)
    return build_survey_analysis(survey, course, questions, responses)


def survey_report(store: SurveyStore, survey: Survey) -> dict[str, Any]:
    course, questions, responses = _load(store, survey)
    return build_report(survey, course, questions, responses)


def run_survey_narrative(store: SurveyStore, client: TextGenerator, survey: Survey) -> dict[str, Any]:
    """
    Requests a fresh narrative and caches it on the survey. Concurrent runs
    are not serialised; whichever commits last is kept.
    """
    analysis = survey_analysis(store, survey)
    narrative = request_survey_narrative(client, analysis)
    store.update_survey(survey, {
        "ai_summary": narrative["summary"],
        "ai_insights": narrative["insights"],
        "ai_recommendations": narrative["recommendations"],
        "ai_analyzed_at": datetime.now(timezone.utc),
    })
    logger.info("[ANALYSIS] Narrative cached for survey %s", survey.id)
    return {**analysis, **cached_narrative(survey)}


def course_analysis(store: SurveyStore, course: Course) -> dict[str, Any]:
    rows = [
        (s, store.get_questions(s.id), store.get_responses(s.id))
        for s in store.list_surveys(course_id=course.id)
    ]
    return build_course_analysis(course, rows)


def run_course_narrative(store: SurveyStore, client: TextGenerator, course: Course) -> dict[str, Any]:
    analysis = course_analysis(store, course)
    if analysis["summary"]["survey_count"] == 0:
        raise InvalidStateError("분석할 설문 데이터가 없습니다")
    narrative = request_course_narrative(client, analysis)
    return {
        **analysis,
        "ai_summary": narrative["summary"],
        "ai_strengths": narrative["strengths"],
        "ai_weaknesses": narrative["weaknesses"],
        "ai_insights": narrative["insights"],
        "ai_recommendations": narrative["recommendations"],
    }
