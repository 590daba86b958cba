import re
from uuid import uuid4

from hrd_survey.core.security import create_access_token

API = "/api/v1"

CHOICE = {"type": "choice", "category": "content", "content": "교육 내용이 유익했다"}


def test_admin_routes_require_a_token(client):
    r = client.get(f"{API}/surveys")
    assert r.status_code == 401
    assert r.json()["detail"] == "인증이 필요합니다"


def test_admin_routes_reject_non_admins(client):
    token = create_access_token({"sub": "user-9", "roles": ["learner"]})
    r = client.get(f"{API}/surveys", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403
    assert r.json()["detail"] == "관리자만 접근할 수 있습니다"


def test_expired_token_is_rejected(client):
    token = create_access_token({"sub": "admin-1", "roles": ["admin"]}, expires_minutes=-10)
    r = client.get(f"{API}/surveys", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "토큰이 만료되었습니다"


def test_create_survey_starts_as_draft_with_code(api):
    course = api.course()
    survey = api.survey(course["id"], description="1차 설문")

    assert survey["status"] == "draft"
    assert survey["admin_id"] == "admin-1"
    assert survey["is_anonymous"] is True
    assert re.fullmatch(r"[A-Z0-9]{8}", survey["unique_code"])
    assert survey["public_url"] == f"https://survey.test/s/{survey['unique_code']}"
    assert survey["course"]["title"] == "리더십 과정"


def test_create_survey_validation(api, client, admin_headers):
    r = client.post(f"{API}/surveys", json={"title": "설문"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "유효한 교육과정을 선택해주세요"

    r = client.post(f"{API}/surveys", json={"course_id": str(uuid4()), "title": "설문"}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "교육과정을 찾을 수 없습니다"

    course = api.course()
    r = client.post(f"{API}/surveys", json={"course_id": course["id"], "title": "  "}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "설문 제목을 입력해주세요"

    r = client.post(f"{API}/surveys", json={"course_id": course["id"], "title": "설문", "scale_type": 6},
                    headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "척도는 5, 7, 9, 10점 중 하나여야 합니다"

    r = client.post(f"{API}/surveys", json={"course_id": course["id"], "title": "설문",
                                             "start_date": "2026-05-10", "end_date": "2026-05-01"},
                    headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "설문 종료일은 시작일 이후여야 합니다"


def test_activation_needs_a_question(api):
    course = api.course()
    survey = api.survey(course["id"])

    r = api.set_status(survey["id"], "active")
    assert r.status_code == 400
    assert r.json()["detail"] == "설문을 활성화하려면 최소 1개 이상의 문항이 필요합니다"

    api.questions(survey["id"], [CHOICE])
    r = api.set_status(survey["id"], "active")
    assert r.status_code == 200
    assert r.json()["message"] == "설문이 활성화되었습니다"

    detail = api.client.get(f"{API}/surveys/{survey['id']}", headers=api.headers).json()
    assert detail["status"] == "active"


def test_closing_stamps_closed_at_and_reopening_is_allowed(api):
    survey, _ = api.active_survey()
    assert api.set_status(survey["id"], "closed").status_code == 200

    detail = api.client.get(f"{API}/surveys/{survey['id']}", headers=api.headers).json()
    assert detail["status"] == "closed"
    assert detail["closed_at"] is not None

    assert api.set_status(survey["id"], "active").status_code == 200
    assert api.set_status(survey["id"], "draft").json()["message"] == "설문이 임시저장 상태로 변경되었습니다"


def test_update_survey_fields_and_status(api):
    course = api.course()
    survey = api.survey(course["id"])
    url = f"{API}/surveys/{survey['id']}"

    r = api.client.put(url, json={"title": "수정된 설문", "scale_type": 7}, headers=api.headers)
    assert r.status_code == 200
    assert r.json()["title"] == "수정된 설문"
    assert r.json()["scale_type"] == 7
    assert r.json()["unique_code"] == survey["unique_code"]

    r = api.client.put(url, json={"status": "active"}, headers=api.headers)
    assert r.status_code == 400

    r = api.client.put(url, json={"course_id": str(uuid4())}, headers=api.headers)
    assert r.status_code == 404


def test_scale_is_locked_once_responses_exist(api):
    survey, qs = api.active_survey(scale_type=10)
    url = f"{API}/surveys/{survey['id']}"
    for score in (9, 8):
        r = api.submit(survey["unique_code"], [
            {"question_id": qs[0]["id"], "score_value": score},
            {"question_id": qs[1]["id"], "score_value": score},
        ])
        assert r.status_code == 201, r.text

    r = api.client.put(url, json={"scale_type": 5}, headers=api.headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "응답이 있는 설문은 척도를 변경할 수 없습니다"

    stats = api.client.get(f"{url}/stats", headers=api.headers).json()
    assert stats["survey"]["scale_type"] == 10
    first = stats["questions"][0]
    assert sum(first["distribution"].values()) == first["response_count"] == 2

    # same scale or other fields still go through
    r = api.client.put(url, json={"scale_type": 10, "title": "새 제목"}, headers=api.headers)
    assert r.status_code == 200
    assert r.json()["title"] == "새 제목"


def test_list_surveys_filters_and_paginates(api):
    c1 = api.course(title="과정 A")
    c2 = api.course(title="과정 B")
    for i in range(3):
        api.survey(c1["id"], title=f"A 설문 {i}")
    active, _ = api.active_survey(title="활성 설문")
    api.survey(c2["id"], title="B 설문")

    def listing(**params):
        r = api.client.get(f"{API}/surveys", params=params, headers=api.headers)
        assert r.status_code == 200
        return r.json()

    assert listing()["pagination"]["total"] == 5
    assert listing(course_id=c1["id"])["pagination"]["total"] == 3
    assert [s["id"] for s in listing(status="active")["items"]] == [active["id"]]
    assert listing(search="B 설문")["items"][0]["course_title"] == "과정 B"

    page = listing(course_id=c1["id"], page=2, limit=2)
    assert len(page["items"]) == 1
    assert page["pagination"]["total_pages"] == 2

    row = listing(status="active")["items"][0]
    assert row["question_count"] == 3
    assert row["response_count"] == 0


def test_question_crud(api):
    course = api.course()
    survey = api.survey(course["id"])
    base = f"{API}/surveys/{survey['id']}/questions"

    created = api.questions(survey["id"], [CHOICE, {**CHOICE, "content": "두 번째"}])
    assert [q["order_num"] for q in created] == [1, 2]

    r = api.client.post(base, json={"type": "text", "content": "의견", "is_required": False}, headers=api.headers)
    assert r.status_code == 201
    assert r.json()["order_num"] == 3
    assert r.json()["category"] is None

    qid = created[0]["id"]
    r = api.client.put(f"{base}/{qid}", json={"content": "수정된 문항", "category": "instructor"},
                       headers=api.headers)
    assert r.status_code == 200
    assert r.json()["content"] == "수정된 문항"
    assert r.json()["category"] == "instructor"

    r = api.client.delete(f"{base}/{qid}", headers=api.headers)
    assert r.status_code == 200
    assert len(api.client.get(base, headers=api.headers).json()) == 2

    r = api.client.delete(f"{base}/{qid}", headers=api.headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "문항을 찾을 수 없습니다"

    r = api.client.delete(base, headers=api.headers)
    assert r.json()["message"] == "2개의 문항이 삭제되었습니다"


def test_question_validation(api):
    course = api.course()
    survey = api.survey(course["id"])
    base = f"{API}/surveys/{survey['id']}/questions"

    r = api.client.post(base, json={**CHOICE, "category": "food"}, headers=api.headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "지원하지 않는 문항 카테고리입니다"

    r = api.client.post(base, json={**CHOICE, "type": "scale"}, headers=api.headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "문항 유형은 choice 또는 text 여야 합니다"

    r = api.client.post(base, json={**CHOICE, "content": ""}, headers=api.headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "문항 내용을 입력해주세요"


def test_replacing_questions_drops_their_answers(api):
    survey, qs = api.active_survey()
    api.submit(survey["unique_code"], [
        {"question_id": qs[0]["id"], "score_value": 5},
        {"question_id": qs[1]["id"], "score_value": 4},
    ])
    api.questions(survey["id"], [CHOICE])

    stats = api.client.get(f"{API}/surveys/{survey['id']}/stats", headers=api.headers).json()
    assert stats["summary"]["answer_count"] == 0
    assert stats["summary"]["respondent_count"] == 1


def test_link_and_delete(api):
    survey, qs = api.active_survey()
    api.submit(survey["unique_code"], [
        {"question_id": qs[0]["id"], "score_value": 5},
        {"question_id": qs[1]["id"], "score_value": 4},
    ])

    link = api.client.get(f"{API}/surveys/{survey['id']}/link", headers=api.headers).json()
    assert link == {
        "survey_id": survey["id"],
        "unique_code": survey["unique_code"],
        "url": f"https://survey.test/s/{survey['unique_code']}",
    }

    r = api.client.delete(f"{API}/surveys/{survey['id']}", headers=api.headers)
    assert r.status_code == 200
    assert r.json()["message"] == "설문이 삭제되었습니다"
    assert api.client.get(f"{API}/surveys/{survey['id']}", headers=api.headers).status_code == 404
    assert api.client.get(f"{API}/public/surveys/{survey['unique_code']}").status_code == 404
