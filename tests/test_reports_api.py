import json
from io import BytesIO

from openpyxl import load_workbook

from hrd_survey.core.errors import ExternalServiceError
from hrd_survey.services.xlsx_export import XLSX_MEDIA_TYPE

API = "/api/v1"

SURVEY_NARRATIVE = json.dumps({
    "summary": "강사 만족도가 높고 교육 내용은 보통 수준입니다.",
    "insights": ["**[강사]**: 평균 4.5점"],
    "recommendations": ["**[내용]**: 사례 보강"],
}, ensure_ascii=False)


def _seed(api, scores, texts=(), **survey_overrides):
    """Active survey with one response per (content, instructor) score pair."""
    survey, qs = api.active_survey(**survey_overrides)
    for i, (content, instructor) in enumerate(scores):
        answers = [
            {"question_id": qs[0]["id"], "score_value": content},
            {"question_id": qs[1]["id"], "score_value": instructor},
        ]
        if i < len(texts):
            answers.append({"question_id": qs[2]["id"], "text_value": texts[i]})
        r = api.submit(survey["unique_code"], answers, respondent_name=f"응답자{i}", session_id=f"s{i}")
        assert r.status_code == 201, r.text
    return survey, qs


def test_stats_aggregate_responses(api):
    survey, qs = _seed(api, [(5, 4), (4, 5), (5, 5), (3, 4)], texts=["좋았습니다"])
    r = api.client.get(f"{API}/surveys/{survey['id']}/stats", headers=api.headers)

    assert r.status_code == 200
    body = r.json()
    assert body["summary"]["respondent_count"] == 4
    assert body["summary"]["response_rate"] == 8
    assert body["summary"]["question_count"] == 3

    content = body["questions"][0]
    assert content["question_id"] == qs[0]["id"]
    assert content["average"] == 4.25
    assert content["median"] == 4.5
    assert content["mode"] == 5
    assert content["distribution"] == {"1": 0, "2": 0, "3": 1, "4": 1, "5": 2}

    assert body["questions"][2]["text_responses"] == ["좋았습니다"]
    assert [c["category"] for c in body["categories"]] == ["content", "instructor"]
    assert body["categories"][1]["average"] == 4.5


def test_stats_response_rate(api):
    survey, _ = _seed(api, [(4, 4)] * 10)
    r = api.client.get(f"{API}/surveys/{survey['id']}/stats", headers=api.headers)
    assert r.json()["summary"]["response_rate"] == 20


def test_stats_without_responses(api):
    survey, _ = api.active_survey()
    body = api.client.get(f"{API}/surveys/{survey['id']}/stats", headers=api.headers).json()
    assert body["summary"]["respondent_count"] == 0
    assert body["summary"]["overall_average"] == 0
    assert body["questions"][0]["mode"] is None


def test_analysis_is_cached_on_the_survey(api, fake_ai):
    fake = fake_ai(SURVEY_NARRATIVE)
    survey, _ = _seed(api, [(3, 5), (3, 4)], texts=["예시가 더 필요합니다"])
    url = f"{API}/surveys/{survey['id']}/analysis"

    before = api.client.get(url, headers=api.headers).json()
    assert before["ai_summary"] is None

    r = api.client.post(url, headers=api.headers)
    assert r.status_code == 200, r.text
    assert r.json()["ai_insights"] == ["**[강사]**: 평균 4.5점"]
    assert r.json()["ai_analyzed_at"] is not None

    prompt, json_mode = fake.prompts[0]
    assert "예시가 더 필요합니다" in prompt
    assert "강사만족도: 4.5점" in prompt
    assert json_mode is False

    after = api.client.get(url, headers=api.headers).json()
    assert after["ai_summary"] == "강사 만족도가 높고 교육 내용은 보통 수준입니다."
    assert after["ai_recommendations"] == ["**[내용]**: 사례 보강"]


def test_failed_analysis_keeps_previous_narrative(api, fake_ai):
    fake_ai(SURVEY_NARRATIVE)
    survey, _ = _seed(api, [(4, 4)])
    url = f"{API}/surveys/{survey['id']}/analysis"
    api.client.post(url, headers=api.headers)

    fake_ai(ExternalServiceError())
    r = api.client.post(url, headers=api.headers)
    assert r.status_code == 502
    assert r.json()["detail"] == "AI 분석에 실패했습니다"
    assert api.client.get(url, headers=api.headers).json()["ai_summary"].startswith("강사 만족도")


def test_unparsable_narrative_is_502(api, fake_ai):
    fake_ai('{"insights": ["요약 없음"]}')
    survey, _ = _seed(api, [(4, 4)])
    r = api.client.post(f"{API}/surveys/{survey['id']}/analysis", headers=api.headers)
    assert r.status_code == 502
    assert r.json()["detail"] == "AI 응답 파싱에 실패했습니다"


def test_analysis_without_ai_key_is_503(api):
    survey, _ = _seed(api, [(4, 4)])
    r = api.client.post(f"{API}/surveys/{survey['id']}/analysis", headers=api.headers)
    assert r.status_code == 503


def test_report_for_named_survey_lists_respondents(api, fake_ai):
    fake_ai(SURVEY_NARRATIVE)
    survey, qs = _seed(api, [(5, 5), (4, 4)], texts=["좋아요"], is_anonymous=False)
    api.client.post(f"{API}/surveys/{survey['id']}/analysis", headers=api.headers)

    r = api.client.get(f"{API}/surveys/{survey['id']}/report", headers=api.headers)
    assert r.status_code == 200
    body = r.json()
    assert body["header"]["course_title"] == "리더십 과정"
    assert body["header"]["is_anonymous"] is False
    assert body["narrative"]["summary"].startswith("강사 만족도")
    names = sorted(row["respondent_name"] for row in body["respondents"])
    assert names == ["응답자0", "응답자1"]
    texts = [t["text"] for row in body["respondents"] for t in row["text_answers"]]
    assert texts == ["좋아요"]


def test_report_for_anonymous_survey_hides_respondents(api):
    survey, _ = _seed(api, [(5, 5)])
    body = api.client.get(f"{API}/surveys/{survey['id']}/report", headers=api.headers).json()
    assert body["respondents"] is None
    assert body["narrative"] is None


def test_report_xlsx_export(api):
    survey, _ = _seed(api, [(5, 4), (3, 4)], texts=["의견"], is_anonymous=False)
    r = api.client.get(f"{API}/surveys/{survey['id']}/report.xlsx", headers=api.headers)

    assert r.status_code == 200
    assert r.headers["content-type"] == XLSX_MEDIA_TYPE
    assert f"survey_{survey['unique_code']}.xlsx" in r.headers["content-disposition"]

    wb = load_workbook(BytesIO(r.content))
    assert wb.sheetnames == ["요약", "카테고리", "문항", "서술형", "응답자"]
    summary = {row[0]: row[1] for row in wb["요약"].iter_rows(min_row=2, values_only=True) if row[0]}
    assert summary["응답자 수"] == 2
    assert summary["교육과정"] == "리더십 과정"


def test_report_xlsx_export_for_anonymous_survey(api):
    survey, _ = _seed(api, [(5, 4)])
    r = api.client.get(f"{API}/surveys/{survey['id']}/report.xlsx", headers=api.headers)
    wb = load_workbook(BytesIO(r.content))
    assert "응답자" not in wb.sheetnames


def test_reports_for_missing_survey(client, admin_headers):
    r = client.get(f"{API}/surveys/00000000-0000-0000-0000-000000000000/stats", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "설문을 찾을 수 없습니다"
