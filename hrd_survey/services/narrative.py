# hrd_survey/services/narrative.py
"""
Narrative (LLM) analysis of aggregated survey results.

Builds a Korean prompt from the numbers produced by ``services.stats``,
sends it through a text-generation client and validates the JSON object
that comes back. Survey-level results carry summary/insights/recommendations;
course-level results add strengths/weaknesses.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

from hrd_survey.core.errors import AIResponseParseError
from hrd_survey.services.gemini import extract_json_object

logger = logging.getLogger(__name__)

# Only the first N free-text answers per question go into the prompt
TEXT_SAMPLE_LIMIT = 10

SURVEY_KEYS = ("insights", "recommendations")
COURSE_KEYS = ("strengths", "weaknesses", "insights", "recommendations")


class TextGenerator(Protocol):
    def generate(self, prompt: str, json_mode: bool = False) -> str: ...


# ---------- Prompts ----------

def build_survey_prompt(analysis: dict[str, Any]) -> str:
    survey = analysis["survey"]
    summary = analysis["summary"]
    scale = survey.get("scale_type") or 5

    category_lines = "\n".join(
        f"- {c['label']}: {c['average']}점 (표준편차 {c['std_deviation']})"
        for c in analysis["categories"]
    ) or "- (카테고리 데이터 없음)"

    question_lines = "\n".join(
        f"- {q['question_text']}: {q['average']}점 "
        f"(응답 {q['response_count']}명, 표준편차 {q['std_deviation']})"
        for q in analysis["questions"]
        if q["question_type"] == "choice"
    ) or "- (객관식 문항 없음)"

    text_blocks = [
        f"[{q['question_text']}]\n" + "\n".join(q["text_responses"][:TEXT_SAMPLE_LIMIT])
        for q in analysis["questions"]
        if q["question_type"] == "text" and q.get("text_responses")
    ]
    text_section = (
        "=== 서술형 응답 (학습자 직접 의견) ===\n" + "\n\n".join(text_blocks)
        if text_blocks else ""
    )

    return f"""당신은 HRD(인적자원개발) 및 기업교육 분야의 전문 컨설턴트입니다.
아래 교육 만족도 설문조사 결과를 분석하여 교육 담당자를 위한 분석 리포트를 작성해주세요.

=== 설문 기본 정보 ===
교육과정: {survey.get('course_title') or 'N/A'}
설문 제목: {survey['title']}
응답자 수: {summary['respondent_count']}명
응답률: {summary['response_rate']}%
전체 평균: {summary['overall_average']}점 ({scale}점 만점)
표준편차: {summary['overall_std_deviation']}

=== 카테고리별 분석 결과 ===
{category_lines}

=== 문항별 상세 점수 ===
{question_lines}

{text_section}

=== 분석 요청사항 ===
위 데이터를 바탕으로 다음 JSON 형식으로 분석 결과를 작성해주세요.
{{
  "summary": "종합 평가 (350-500자). 전반적 만족도 수준, 우수 영역과 개선 필요 영역, 표준편차로 본 응답 일관성, 서술형 의견 요약을 포함",
  "insights": [
    "**[소제목]**: 구체적 수치를 인용한 데이터 기반 발견점 (80-120자)",
    "... 총 5개"
  ],
  "recommendations": [
    "**[소제목]**: 가장 낮은 영역부터 실행 가능한 개선안 (100-150자)",
    "... 총 5개"
  ]
}}

반드시 유효한 JSON 형식으로만 응답하세요. JSON 외의 설명은 불필요합니다."""


def build_course_prompt(analysis: dict[str, Any]) -> str:
    course = analysis["course"]
    summary = analysis["summary"]

    survey_lines = "\n".join(
        f"- {s['title']}: {s['average']}점 ({s['respondent_count']}명 응답)"
        for s in analysis["surveys"]
    )
    category_lines = "\n".join(
        f"- {c['label']}: {c['average']}점 (표준편차 {c['std_deviation']})"
        for c in analysis["categories"]
    ) or "- (카테고리 데이터 없음)"

    return f"""당신은 기업교육 전문가입니다. 아래 교육과정의 전체 설문조사 결과를 분석하여 JSON 형식으로 응답해주세요.

교육과정: {course['title']}
강사: {course.get('instructor') or 'N/A'}
설문 수: {summary['survey_count']}개
총 응답자: {summary['total_respondents']}명
응답률: {summary['response_rate']}%
전체 평균: {summary['overall_average']}점 (표준편차 {summary['overall_std_deviation']})

설문별 결과:
{survey_lines}

카테고리별 평균:
{category_lines}

다음 JSON 형식으로 정확히 응답해주세요:
{{
  "summary": "전체 교육과정에 대한 종합적인 평가 요약 (2-3문장)",
  "strengths": ["이 교육과정의 강점 1", "이 교육과정의 강점 2"],
  "weaknesses": ["개선이 필요한 영역 1", "개선이 필요한 영역 2"],
  "insights": ["데이터에서 발견된 주요 인사이트 1", "주요 인사이트 2", "주요 인사이트 3"],
  "recommendations": ["구체적인 권장사항 1", "구체적인 권장사항 2", "구체적인 권장사항 3"]
}}

반드시 유효한 JSON 형식으로만 응답하세요. 추가 설명 없이 JSON만 출력하세요."""


# ---------- Parsing ----------

def parse_narrative(text: str, list_keys: tuple[str, ...] = SURVEY_KEYS) -> dict[str, Any]:
    """
    Extracts the JSON object from the raw model text and checks its shape:
    'summary' must be a string, every list key a list (missing -> []).
    """
    data = extract_json_object(text)

    summary = data.get("summary")
    if not isinstance(summary, str):
        logger.warning("[AI] Narrative without a string 'summary'")
        raise AIResponseParseError()

    out: dict[str, Any] = {"summary": summary}
    for key in list_keys:
        value = data.get(key) or []
        if not isinstance(value, list):
            logger.warning("[AI] Narrative field %r is not a list", key)
            raise AIResponseParseError()
        out[key] = [str(v) for v in value]
    return out


# ---------- Requests ----------

def request_survey_narrative(client: TextGenerator, analysis: dict[str, Any]) -> dict[str, Any]:
    prompt = build_survey_prompt(analysis)
    logger.info("[AI] Survey narrative for %s (prompt=%d chars)", analysis["survey"]["id"], len(prompt))
    return parse_narrative(client.generate(prompt), SURVEY_KEYS)


def request_course_narrative(client: TextGenerator, analysis: dict[str, Any]) -> dict[str, Any]:
    prompt = build_course_prompt(analysis)
    logger.info("[AI] Course narrative for %s (prompt=%d chars)", analysis["course"]["id"], len(prompt))
    return parse_narrative(client.generate(prompt), COURSE_KEYS)
