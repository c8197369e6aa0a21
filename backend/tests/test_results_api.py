"""
Tests for viewing, regenerating and editing reports.
"""

import json

from backend.app.errors import UpstreamError
from backend.app.reports import ReportV1, dump_report

from conftest import V2_PAYLOAD


def test_view_generates_missing_report(client, submission_factory, fake_llm):
    row = submission_factory()
    response = client.get(f"/results/{row.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["ai_report"]["schema_version"] == "v2"
    assert data["ai_report"]["overallComment"] == V2_PAYLOAD["overallComment"]
    assert data["report_error"] is None
    assert data["avg_score_display"] == "3.0"
    assert [s["label"] for s in data["scores"]][:2] == ["市場理解", "競合分析"]
    assert len(fake_llm.prompts) == 1


def test_view_does_not_regenerate_existing_report(client, submission_factory, fake_llm):
    row = submission_factory(ai_report=dump_report(ReportV1(overall_comment="既存")))
    data = client.get(f"/results/{row.id}").json()
    assert data["ai_report"]["overallComment"] == "既存"
    assert fake_llm.prompts == []


def test_view_failure_returns_record_without_report(client, submission_factory, fake_llm, db_session):
    row = submission_factory()
    fake_llm.error = UpstreamError("timeout")
    response = client.get(f"/results/{row.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["ai_report"] is None
    assert "AI分析に失敗しました" in data["report_error"]
    db_session.refresh(row)
    assert row.ai_report is None

    # Next visit retries
    fake_llm.error = None
    assert client.get(f"/results/{row.id}").json()["ai_report"] is not None


def test_unknown_result_is_404(client):
    assert client.get("/results/does-not-exist").status_code == 404


def test_regenerate_requires_admin(client, submission_factory):
    row = submission_factory()
    assert client.post(f"/results/{row.id}/report").status_code == 401


def test_regenerate_replaces_edited_report(client, submission_factory, fake_llm, admin_headers):
    row = submission_factory(ai_report=json.dumps({"schema_version": "v2", "overallComment": "手で編集"}))
    response = client.post(f"/results/{row.id}/report", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["ai_report"]["overallComment"] == V2_PAYLOAD["overallComment"]


def test_regenerate_failure_is_502_and_keeps_old_report(client, submission_factory, fake_llm, admin_headers):
    row = submission_factory(ai_report=json.dumps({"schema_version": "v2", "overallComment": "旧"}))
    fake_llm.reply = "no json here"
    response = client.post(f"/results/{row.id}/report", headers=admin_headers)
    assert response.status_code == 502
    assert json.loads(row.ai_report)["overallComment"] == "旧"


def test_save_edited_report(client, submission_factory, admin_headers, db_session):
    row = submission_factory(ai_report=json.dumps({"schema_version": "v2", **V2_PAYLOAD}))
    edited = {**V2_PAYLOAD, "schema_version": "v2", "overallComment": "編集後のコメント"}
    response = client.put(f"/results/{row.id}/report", json=edited, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["ai_report"]["overallComment"] == "編集後のコメント"
    db_session.refresh(row)
    assert json.loads(row.ai_report)["overallComment"] == "編集後のコメント"


def test_edit_cannot_switch_report_shape(client, submission_factory, admin_headers):
    row = submission_factory(ai_report=dump_report(ReportV1(overall_comment="v1")))
    response = client.put(
        f"/results/{row.id}/report",
        json={"schema_version": "v2", "overallComment": "x"},
        headers=admin_headers,
    )
    assert response.status_code == 409


def test_edit_without_tag_uses_stored_shape(client, submission_factory, admin_headers):
    row = submission_factory(ai_report=dump_report(ReportV1(overall_comment="v1")))
    response = client.put(
        f"/results/{row.id}/report",
        json={"overallComment": "編集", "risks": ["r"]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["ai_report"]["schema_version"] == "v1"
    assert response.json()["ai_report"]["risks"] == ["r"]


def test_edit_requires_admin(client, submission_factory):
    row = submission_factory()
    response = client.put(f"/results/{row.id}/report", json={"overallComment": "x"})
    assert response.status_code == 401
