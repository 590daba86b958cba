import json

from hrd_survey.core.errors import AIResponseParseError

API = "/api/v1"

COURSE_NARRATIVE = json.dumps({
    "summary": "전반적으로 만족도가 높습니다.",
    "strengths": ["강사 전달력"],
    "weaknesses": ["교육 환경"],
    "insights": ["내용 만족도가 가장 높음"],
    "recommendations": ["실습 시간 확대"],
}, ensure_ascii=False)


def test_course_crud(api, client, admin_headers):
    course = api.course(objectives="리더십 역량 강화", training_start_date="2026-03-02",
                        training_end_date="2026-03-04")
    assert course["admin_id"] == "admin-1"
    assert course["target_participants"] == 50

    url = f"{API}/courses/{course['id']}"
    r = client.get(url, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["survey_count"] == 0

    r = client.put(url, json={"instructor": "박강사", "target_participants": 30}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["instructor"] == "박강사"
    assert r.json()["title"] == "리더십 과정"

    r = client.delete(url, headers=admin_headers)
    assert r.json()["message"] == "교육과정이 삭제되었습니다"
    assert client.get(url, headers=admin_headers).status_code == 404


def test_course_validation(client, admin_headers):
    r = client.post(f"{API}/courses", json={"title": ""}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "과정명을 입력해주세요"

    r = client.post(f"{API}/courses", json={"title": "과정", "training_start_date": "2026-03-04",
                                             "training_end_date": "2026-03-01"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "교육 종료일은 시작일 이후여야 합니다"

    r = client.post(f"{API}/courses", json={"title": "과정", "target_participants": -1}, headers=admin_headers)
    assert r.status_code == 400


def test_course_list_search_and_pagination(api, client, admin_headers):
    for i in range(4):
        api.course(title=f"리더십 {i}", instructor="김강사")
    api.course(title="엑셀 실무", instructor="이강사")

    def listing(**params):
        r = client.get(f"{API}/courses", params=params, headers=admin_headers)
        assert r.status_code == 200
        return r.json()

    assert listing()["pagination"]["total"] == 5
    assert [c["title"] for c in listing(search="엑셀")["items"]] == ["엑셀 실무"]
    assert listing(search="이강사")["pagination"]["total"] == 1

    page = listing(page=3, limit=2)
    assert len(page["items"]) == 1
    assert page["pagination"] == {"total": 5, "page": 3, "limit": 2, "total_pages": 3}


def test_course_list_shows_its_surveys(api, client, admin_headers):
    course = api.course()
    for i in range(6):
        api.survey(course["id"], title=f"설문 {i}")

    [item] = client.get(f"{API}/courses", headers=admin_headers).json()["items"]
    assert item["survey_count"] == 6
    assert len(item["surveys"]) == 5


def test_deleting_course_removes_its_surveys(api, client, admin_headers):
    survey, qs = api.active_survey()
    api.submit(survey["unique_code"], [
        {"question_id": qs[0]["id"], "score_value": 5},
        {"question_id": qs[1]["id"], "score_value": 4},
    ])

    r = client.delete(f"{API}/courses/{survey['course_id']}", headers=admin_headers)
    assert r.status_code == 200
    assert client.get(f"{API}/surveys/{survey['id']}", headers=admin_headers).status_code == 404
    assert client.get(f"{API}/dashboard", headers=admin_headers).json()["totals"]["responses"] == 0


def test_course_analysis_without_surveys(api, client, admin_headers):
    course = api.course()
    r = client.get(f"{API}/courses/{course['id']}/analysis", headers=admin_headers)

    assert r.status_code == 200
    body = r.json()
    assert body["summary"]["survey_count"] == 0
    assert body["summary"]["overall_average"] == 0
    assert body["surveys"] == []
    assert body["ai_summary"] is None


def test_course_narrative_needs_survey_data(api, client, admin_headers, fake_ai):
    fake_ai(COURSE_NARRATIVE)
    course = api.course()
    r = client.post(f"{API}/courses/{course['id']}/analysis", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "분석할 설문 데이터가 없습니다"


def test_course_narrative(api, client, admin_headers, fake_ai):
    fake = fake_ai("```json\n" + COURSE_NARRATIVE + "\n```")
    survey, qs = api.active_survey()
    for score in (5, 3):
        api.submit(survey["unique_code"], [
            {"question_id": qs[0]["id"], "score_value": score},
            {"question_id": qs[1]["id"], "score_value": 4},
        ])

    r = client.post(f"{API}/courses/{survey['course_id']}/analysis", headers=admin_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["summary"]["total_respondents"] == 2
    assert body["summary"]["response_rate"] == 4
    assert body["surveys"][0]["average"] == 4.0
    assert body["ai_strengths"] == ["강사 전달력"]
    assert body["ai_weaknesses"] == ["교육 환경"]
    assert "리더십 과정" in fake.prompts[0][0]


def test_course_narrative_parse_failure(api, client, admin_headers, fake_ai):
    fake_ai("분석을 완료하지 못했습니다")
    survey, _ = api.active_survey()
    r = client.post(f"{API}/courses/{survey['course_id']}/analysis", headers=admin_headers)
    assert r.status_code == 502
    assert r.json()["detail"] == AIResponseParseError().message


def test_course_narrative_without_ai_key(api, client, admin_headers):
    survey, _ = api.active_survey()
    r = client.post(f"{API}/courses/{survey['course_id']}/analysis", headers=admin_headers)
    assert r.status_code == 503
