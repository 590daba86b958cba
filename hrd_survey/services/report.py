# hrd_survey/services/report.py
"""
Report document model.

``build_report`` merges the survey analysis, course metadata and any cached
narrative into one tree of plain values. The JSON report endpoint returns it
as-is and the xlsx export flattens it; neither renders anything itself.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Sequence

from hrd_survey.services.stats import build_survey_analysis


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def narrative_block(survey) -> dict[str, Any] | None:
    if not survey.ai_summary:
        return None
    return {
        "summary": survey.ai_summary,
        "insights": list(survey.ai_insights or []),
        "recommendations": list(survey.ai_recommendations or []),
        "analyzed_at": _iso(survey.ai_analyzed_at),
    }


def respondent_rows(questions: Sequence, responses: Sequence) -> list[dict[str, Any]]:
    """Names and free-text answers per response, oldest first."""
    text_questions = {q.id: q for q in questions if q.type == "text"}
    rows = []
    for r in sorted(responses, key=lambda r: r.submitted_at):
        texts = [
            {"question_id": a.question_id, "question_text": text_questions[a.question_id].content,
             "text": a.text_value}
            for a in r.answers
            if a.question_id in text_questions and a.text_value and a.text_value.strip()
        ]
        rows.append({
            "respondent_name": r.respondent_name,
            "submitted_at": _iso(r.submitted_at),
            "text_answers": texts,
        })
    return rows


def build_report(survey, course, questions: Sequence, responses: Sequence,
                 generated_at: datetime | None = None) -> dict[str, Any]:
    analysis = build_survey_analysis(survey, course, questions, responses)
    generated_at = generated_at or datetime.now(timezone.utc)

    header = {
        "survey_id": survey.id,
        "survey_title": survey.title,
        "course_title": course.title if course is not None else "",
        "instructor": course.instructor if course is not None else None,
        "training_start_date": _iso(course.training_start_date) if course is not None else None,
        "training_end_date": _iso(course.training_end_date) if course is not None else None,
        "survey_start_date": _iso(survey.start_date),
        "survey_end_date": _iso(survey.end_date),
        "scale_type": analysis["survey"]["scale_type"],
        "is_anonymous": bool(survey.is_anonymous),
        "generated_at": generated_at.isoformat(),
    }

    return {
        "header": header,
        "summary": analysis["summary"],
        "narrative": narrative_block(survey),
        "categories": analysis["categories"],
        "questions": analysis["questions"],
        # Identifying details only leave the system for named surveys
        "respondents": None if survey.is_anonymous else respondent_rows(questions, responses),
    }
