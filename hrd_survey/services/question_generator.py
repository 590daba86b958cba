# hrd_survey/services/question_generator.py
"""
AI question generation for a survey, from its course's metadata.

The model is asked for ``{"questions": [...]}`` in JSON mode; transient
failures (HTTP errors, unparsable output) are retried with exponential
backoff before giving up.
"""
from __future__ import annotations

import logging
from typing import Any, Sequence

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from hrd_survey.core.config import settings
from hrd_survey.core.errors import AIResponseParseError, ExternalServiceError
from hrd_survey.models.enums import CATEGORY_LABELS, QuestionCategory, QuestionType
from hrd_survey.services.gemini import extract_json_object
from hrd_survey.services.narrative import TextGenerator

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (QuestionCategory.overall, QuestionCategory.content, QuestionCategory.instructor)


def build_generation_prompt(course, categories: Sequence[QuestionCategory], scale_type: int,
                            scale_question_count: int, text_question_count: int) -> str:
    course_lines = [f"- 과정명: {course.title}"]
    if course.objectives:
        course_lines.append(f"- 교육목표: {course.objectives}")
    if course.content:
        course_lines.append(f"- 교육내용: {course.content}")
    if course.instructor:
        course_lines.append(f"- 강사: {course.instructor}")

    labels = ", ".join(CATEGORY_LABELS[c] for c in categories)
    text_rule = (
        f"- 서술형 문항: 정확히 {text_question_count}개 (overall 또는 other 카테고리)"
        if text_question_count > 0 else "- 서술형 문항: 없음"
    )
    total = scale_question_count + text_question_count
    course_info = "\n".join(course_lines)

    return f"""당신은 기업교육 설문조사 전문가입니다.
다음 교육과정에 대한 만족도 설문 문항을 생성해주세요.

## 교육과정 정보
{course_info}

## 생성 조건
- 카테고리: {labels}
- {scale_type}점 척도(객관식) 문항: 정확히 {scale_question_count}개 (선택한 카테고리에 골고루 분배)
{text_rule}

## 카테고리 설명
- overall: 교육 전반에 대한 종합적인 만족도
- content: 교육 내용의 전문성, 실용성, 체계성
- instructor: 강사의 전달력, 전문성, 열정
- facility: 교육 환경, 시설, 교재 등
- other: 기타 교육 관련 의견

## 출력 형식 (JSON)
{{
  "questions": [
    {{"category": "content", "question_text": "교육 내용이 실무에 적용하기에 적합했다.", "question_type": "scale", "is_required": true}},
    {{"category": "overall", "question_text": "교육에서 개선이 필요한 점을 자유롭게 작성해 주세요.", "question_type": "text", "is_required": false}}
  ]
}}

반드시 유효한 JSON 형식으로만 출력하고, 총 {total}개를 정확히 생성하세요."""


def normalise_generated(items: Any) -> list[dict[str, Any]]:
    """Maps the model's question list onto question rows (order 1..n)."""
    if not isinstance(items, list):
        raise AIResponseParseError()

    out = []
    for item in items:
        if not isinstance(item, dict):
            continue
        text = str(item.get("question_text") or item.get("content") or "").strip()
        if not text:
            continue
        raw_type = str(item.get("question_type") or item.get("type") or "").lower()
        qtype = QuestionType.text if raw_type == "text" else QuestionType.choice
        raw_category = str(item.get("category") or "").lower()
        try:
            category = QuestionCategory(raw_category)
        except ValueError:
            category = QuestionCategory.other
        is_required = item.get("is_required")
        out.append({
            "type": qtype.value,
            "category": category.value,
            "content": text,
            "is_required": True if is_required is None else bool(is_required),
            "order_num": len(out) + 1,
        })
    if not out:
        raise AIResponseParseError()
    return out


def generate_questions(client: TextGenerator, course, *, categories: Sequence[QuestionCategory] | None = None,
                       scale_type: int = 5, scale_question_count: int = 10, text_question_count: int = 2,
                       attempts: int | None = None, wait=None) -> list[dict[str, Any]]:
    categories = list(categories or DEFAULT_CATEGORIES)
    prompt = build_generation_prompt(course, categories, scale_type, scale_question_count, text_question_count)

    retrying = Retrying(
        stop=stop_after_attempt(attempts or settings.AI_GENERATION_RETRIES),
        wait=wait if wait is not None else wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(ExternalServiceError),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            n = attempt.retry_state.attempt_number
            if n > 1:
                logger.warning("[AI] Question generation retry %d", n)
            raw = client.generate(prompt, json_mode=True)
            questions = normalise_generated(extract_json_object(raw).get("questions"))

    logger.info("[AI] Generated %d questions for course %s", len(questions), course.id)
    return questions
