# hrd_survey/services/xlsx_export.py
from io import BytesIO
from typing import Any

from openpyxl import Workbook

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def report_to_xlsx(report: dict[str, Any]) -> bytes:
    """
    Flattens a report document (services.report.build_report) into a
    workbook: 요약 / 카테고리 / 문항 / 서술형, plus 응답자 for named surveys.
    """
    header = report["header"]
    summary = report["summary"]
    scale = header["scale_type"]

    wb = Workbook()

    # Summary
    ws_sum = wb.active
    ws_sum.title = "요약"
    ws_sum.append(["항목", "값"])
    for label, value in (
        ("교육과정", header["course_title"]),
        ("설문", header["survey_title"]),
        ("강사", header["instructor"]),
        ("교육 시작일", header["training_start_date"]),
        ("교육 종료일", header["training_end_date"]),
        ("응답자 수", summary["respondent_count"]),
        ("목표 인원", summary["target_participants"]),
        ("응답률(%)", summary["response_rate"]),
        ("전체 평균", summary["overall_average"]),
        ("전체 표준편차", summary["overall_std_deviation"]),
        ("척도", scale),
        ("생성 시각", header["generated_at"]),
    ):
        ws_sum.append([label, value])

    narrative = report.get("narrative")
    if narrative:
        ws_sum.append([])
        ws_sum.append(["AI 종합 평가", narrative["summary"]])
        for item in narrative["insights"]:
            ws_sum.append(["AI 인사이트", item])
        for item in narrative["recommendations"]:
            ws_sum.append(["AI 권장사항", item])

    # Categories
    ws_cat = wb.create_sheet("카테고리")
    ws_cat.append(["category", "label", "question_count", "response_count", "average", "std_deviation"])
    for c in report["categories"]:
        ws_cat.append([c["category"], c["label"], c["question_count"], c["response_count"],
                       c["average"], c["std_deviation"]])

    # Choice questions
    ws_q = wb.create_sheet("문항")
    ws_q.append(
        ["order", "question", "category", "n", "average", "median", "mode", "std_deviation"]
        + [f"c{i}" for i in range(1, scale + 1)]
    )
    for q in report["questions"]:
        if q["question_type"] != "choice":
            continue
        dist = q["distribution"] or {}
        ws_q.append(
            [q["order_num"], q["question_text"], q["category_label"], q["response_count"],
             q["average"], q["median"], q["mode"], q["std_deviation"]]
            + [dist.get(i, 0) for i in range(1, scale + 1)]
        )

    # Free text
    ws_t = wb.create_sheet("서술형")
    ws_t.append(["order", "question", "answer"])
    for q in report["questions"]:
        if q["question_type"] != "text":
            continue
        for text in q["text_responses"] or []:
            ws_t.append([q["order_num"], q["question_text"], text])

    respondents = report.get("respondents")
    if respondents is not None:
        ws_r = wb.create_sheet("응답자")
        ws_r.append(["respondent_name", "submitted_at", "question", "answer"])
        for r in respondents:
            if not r["text_answers"]:
                ws_r.append([r["respondent_name"], r["submitted_at"], None, None])
            for t in r["text_answers"]:
                ws_r.append([r["respondent_name"], r["submitted_at"], t["question_text"], t["text"]])

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()
