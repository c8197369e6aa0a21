"""
Tests for analysis prompt construction.
"""

import json
import re

import pytest
from pydantic import ValidationError

from backend.app.errors import ScoreValidationError
from backend.app.prompts import (
    ReportRequest,
    build_analysis_prompt,
    compose_context,
    schema_example,
)
from backend.app.reports import report_field_names
from backend.app.scoring import CATEGORY_LABELS, ScoreSet


def test_prompt_contains_every_score_and_average():
    scores = [1, 2, 3, 4, 5, 1, 2, 3, 4, 5, 1, 2]
    request = ReportRequest.from_scores(scores, business_phase="成長中", company_name="株式会社テスト")
    prompt = build_analysis_prompt(request, "v2")
    for label, score in zip(CATEGORY_LABELS, scores):
        assert f"{label}: {score}点" in prompt
    assert "平均スコア: 2.8点" in prompt
    assert "会社名: 株式会社テスト" in prompt
    assert "ビジネスフェーズ: 成長中" in prompt


def test_all_twos_growth_scenario():
    request = ReportRequest.from_scores([2] * 12, business_phase="growth")
    prompt = build_analysis_prompt(request, "v2")
    assert "2.0点" in prompt
    assert "growthフェーズ" in prompt
    assert sum(f"{label}: 2点" in prompt for label in CATEGORY_LABELS) == 12


def test_placeholders_when_optional_fields_missing():
    request = ReportRequest.from_scores([3] * 12)
    prompt = build_analysis_prompt(request, "v1")
    assert "会社名: 未入力" in prompt
    assert "記載なし" in prompt


def test_free_text_is_embedded():
    request = ReportRequest.from_scores([3] * 12, free_text="採用に課題があります")
    assert "採用に課題があります" in build_analysis_prompt(request)


@pytest.mark.parametrize("scores", [[3] * 11, [3] * 13, []])
def test_rejects_wrong_score_count(scores):
    with pytest.raises(ScoreValidationError):
        ReportRequest.from_scores(scores)


def test_request_only_accepts_a_validated_score_set():
    with pytest.raises(ValidationError):
        ReportRequest(scores=[3] * 11)
    with pytest.raises(ScoreValidationError):
        ReportRequest(scores=ScoreSet([3] * 11))
    with pytest.raises(ScoreValidationError):
        ReportRequest(scores=ScoreSet([9] * 12))


@pytest.mark.parametrize("version", ["v1", "v2"])
def test_prompt_requests_fenced_json_matching_report_fields(version):
    prompt = build_analysis_prompt(ReportRequest.from_scores([4] * 12), version)
    block = re.search(r"```json\s*([\s\S]*?)\s*```", prompt)
    assert block is not None
    keys = set(json.loads(block.group(1)))
    assert keys == set(report_field_names(version))
    assert keys == set(schema_example(version))
    assert "ですます調" in prompt


def test_v2_prompt_asks_for_category_names_in_improvements():
    prompt = build_analysis_prompt(ReportRequest.from_scores([4] * 12), "v2")
    assert "contradictionsAndRisks" in prompt
    assert "【市場理解】" in prompt


def test_unknown_schema_version_is_rejected():
    with pytest.raises(ValueError):
        build_analysis_prompt(ReportRequest.from_scores([4] * 12), "v3")


def test_request_is_immutable():
    request = ReportRequest.from_scores([4] * 12)
    with pytest.raises(Exception):
        request.business_phase = "成長中"


def test_compose_context_from_structured_fields(submission_factory):
    row = submission_factory(mission="誠実なものづくり", vision_future=None, other_challenge="海外展開")
    row.challenge_list = ["認知・知名度不足", "競合との差別化"]
    text = compose_context(row)
    assert "【企業理念】\n誠実なものづくり" in text
    assert "【3〜5年後のビジョン】\n未記入" in text
    assert "認知・知名度不足、競合との差別化" in text
    assert text.endswith("その他: 海外展開")


def test_compose_context_falls_back_to_legacy_memo(submission_factory):
    row = submission_factory(memo="旧フォームのメモ")
    assert compose_context(row) == "旧フォームのメモ"


def test_compose_context_empty(submission_factory):
    assert compose_context(submission_factory()) is None
