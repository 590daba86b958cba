# hrd_survey/services/stats.py
"""
Descriptive statistics over survey results.

Pure functions: questions and responses (already loaded rows, or anything
with the same attributes) go in, plain dicts come out. Nothing here touches
the database, so aggregating the same rows twice gives the same numbers.

Rounding follows the half-up rule used on the survey screens: averages and
standard deviations to 2 decimals, percentages and response rates to whole
numbers.
"""
from __future__ import annotations

import statistics
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence

from hrd_survey.models.enums import (
    CATEGORY_LABELS,
    DEFAULT_SCALE,
    QuestionCategory,
    QuestionType,
)


# ---------- Numeric helpers ----------

def round_half_up(value: float, digits: int = 2) -> float:
    """
    Decimal half-up on the printed value: 2.675 -> 2.68. Multiplying by
    100 and rounding the float instead gives 2.67 on such inputs.
    """
    quant = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quant, rounding=ROUND_HALF_UP))


def percent(part: float, whole: float) -> int:
    """Whole-number percentage; 0 when the denominator is 0 or missing."""
    if not whole:
        return 0
    return int(Decimal(repr(part * 100 / whole)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def describe(values: Sequence[int]) -> dict[str, Any]:
    """count / average / std_deviation (population) of a pooled value set."""
    if not values:
        return {"count": 0, "average": 0.0, "std_deviation": 0.0}
    return {
        "count": len(values),
        "average": round_half_up(statistics.fmean(values)),
        "std_deviation": round_half_up(statistics.pstdev(values)),
    }


def _category(question) -> QuestionCategory | None:
    return QuestionCategory(question.category) if question.category else None


def _category_label(category: QuestionCategory | None) -> str | None:
    return CATEGORY_LABELS[category] if category else None


def group_answers(responses: Iterable) -> dict[Any, list]:
    """question_id -> every answer referencing it, across all responses."""
    grouped: dict[Any, list] = defaultdict(list)
    for response in responses:
        for answer in response.answers:
            grouped[answer.question_id].append(answer)
    return grouped


def _scores(answers: Iterable) -> list[int]:
    return [a.score_value for a in answers if a.score_value is not None]


def _texts(answers: Iterable) -> list[str]:
    return [a.text_value for a in answers if a.text_value and a.text_value.strip()]


# ---------- Per question ----------

def question_stats(question, answers: Sequence, scale_max: int = DEFAULT_SCALE) -> dict[str, Any]:
    category = _category(question)
    out: dict[str, Any] = {
        "question_id": question.id,
        "question_text": question.content,
        "question_type": question.type,
        "category": category.value if category else None,
        "category_label": _category_label(category),
        "order_num": question.order_num,
        "is_required": question.is_required,
    }

    qtype = QuestionType(question.type)
    if qtype is QuestionType.choice:
        values = _scores(answers)
        n = len(values)
        distribution = {score: 0 for score in range(1, scale_max + 1)}
        for v in values:
            if v in distribution:
                distribution[v] += 1
        out.update(
            response_count=n,
            average=round_half_up(statistics.fmean(values)) if n else 0.0,
            median=float(statistics.median(values)) if n else 0.0,
            # ties go to the lowest score
            mode=max(distribution, key=distribution.__getitem__) if n else None,
            std_deviation=round_half_up(statistics.pstdev(values)) if n else 0.0,
            distribution=distribution,
            percentages={score: percent(count, n) for score, count in distribution.items()},
            text_responses=None,
        )
    elif qtype is QuestionType.text:
        texts = _texts(answers)
        out.update(
            response_count=len(texts),
            average=None,
            median=None,
            mode=None,
            std_deviation=None,
            distribution=None,
            percentages=None,
            text_responses=texts,
        )
    return out


# ---------- Per category ----------

def pool_by_category(questions: Iterable, grouped: dict[Any, list],
                     pooled: dict[QuestionCategory, dict[str, Any]] | None = None):
    """
    Adds each categorised choice question's raw scores to its category's
    pool. Pass an existing ``pooled`` to accumulate across surveys.
    """
    pooled = {} if pooled is None else pooled
    for q in questions:
        if QuestionType(q.type) is not QuestionType.choice:
            continue
        category = _category(q)
        if category is None:
            continue
        entry = pooled.setdefault(category, {"question_count": 0, "values": []})
        entry["question_count"] += 1
        entry["values"].extend(_scores(grouped.get(q.id, ())))
    return pooled


def category_rows(pooled: dict[QuestionCategory, dict[str, Any]]) -> list[dict[str, Any]]:
    rows = []
    for category in QuestionCategory:
        if category not in pooled:
            continue
        entry = pooled[category]
        desc = describe(entry["values"])
        rows.append({
            "category": category.value,
            "label": CATEGORY_LABELS[category],
            "question_count": entry["question_count"],
            "response_count": desc["count"],
            "average": desc["average"],
            "std_deviation": desc["std_deviation"],
        })
    return rows


def category_stats(questions: Iterable, grouped: dict[Any, list]) -> list[dict[str, Any]]:
    """
    Pools the raw scores of every choice question sharing a category (not a
    mean of question means). Uncategorised questions are left out here but
    still count towards the survey-level figures.
    """
    return category_rows(pool_by_category(questions, grouped))


def pooled_choice_scores(questions: Iterable, grouped: dict[Any, list]) -> list[int]:
    values: list[int] = []
    for q in questions:
        if QuestionType(q.type) is QuestionType.choice:
            values.extend(_scores(grouped.get(q.id, ())))
    return values


# ---------- Survey level ----------

def survey_summary(respondent_count: int, target_participants: int | None,
                   values: Sequence[int]) -> dict[str, Any]:
    desc = describe(values)
    target = target_participants or 0
    return {
        "respondent_count": respondent_count,
        "target_participants": target,
        # not capped: late or external respondents can push this past 100
        "response_rate": percent(respondent_count, target),
        "overall_average": desc["average"],
        "overall_std_deviation": desc["std_deviation"],
        "answer_count": desc["count"],
    }


def build_survey_analysis(survey, course, questions: Sequence, responses: Sequence) -> dict[str, Any]:
    ordered = sorted(questions, key=lambda q: (q.order_num, str(q.id)))
    grouped = group_answers(responses)
    scale_max = survey.scale_type or DEFAULT_SCALE

    summary = survey_summary(
        len(responses),
        course.target_participants if course is not None else 0,
        pooled_choice_scores(ordered, grouped),
    )
    summary["question_count"] = len(ordered)

    return {
        "survey": {
            "id": survey.id,
            "title": survey.title,
            "status": survey.status,
            "scale_type": scale_max,
            "is_anonymous": survey.is_anonymous,
            "course_id": survey.course_id,
            "course_title": course.title if course is not None else "",
        },
        "summary": summary,
        "categories": category_stats(ordered, grouped),
        "questions": [question_stats(q, grouped.get(q.id, ()), scale_max) for q in ordered],
    }


# ---------- Course level ----------

def build_course_analysis(course, survey_rows: Iterable[tuple]) -> dict[str, Any]:
    """
    survey_rows: (survey, questions, responses) per survey of the course.
    Category and overall figures pool scores across every survey.
    """
    surveys_out = []
    all_values: list[int] = []
    total_respondents = 0
    by_category: dict[QuestionCategory, dict[str, Any]] = {}

    for survey, questions, responses in survey_rows:
        grouped = group_answers(responses)
        values = pooled_choice_scores(questions, grouped)
        desc = describe(values)
        surveys_out.append({
            "id": survey.id,
            "title": survey.title,
            "status": survey.status,
            "respondent_count": len(responses),
            "average": desc["average"],
            "std_deviation": desc["std_deviation"],
        })
        all_values.extend(values)
        total_respondents += len(responses)

        pool_by_category(questions, grouped, by_category)

    target = course.target_participants or 0
    overall = describe(all_values)
    return {
        "course": {
            "id": course.id,
            "title": course.title,
            "instructor": course.instructor,
        },
        "summary": {
            "survey_count": len(surveys_out),
            "total_respondents": total_respondents,
            "target_participants": target,
            "response_rate": percent(total_respondents, target),
            "overall_average": overall["average"],
            "overall_std_deviation": overall["std_deviation"],
        },
        "surveys": surveys_out,
        "categories": category_rows(by_category),
    }
