"""
Tests for priority marks on improvement suggestions.
"""

import pytest

from backend.app.priority import (
    DEFAULT_SCORE,
    annotate_improvements,
    annotate_report,
    marker_weight,
    match_category,
    priority_weight,
)
from backend.app.reports import ReportV1, ReportV2
from backend.app.scoring import ScoreSet


@pytest.fixture
def scores():
    # 市場理解=2, 競合分析=3, 自社分析=5, 独自性=1, rest 4
    return ScoreSet.from_list([2, 3, 5, 4, 1, 4, 4, 4, 4, 4, 4, 4])


@pytest.mark.parametrize("score, weight", [(1, 3), (2, 3), (3, 2), (4, 1), (5, 1)])
def test_priority_weight(score, weight):
    assert priority_weight(score) == weight


def test_default_weight_matches_score_three():
    assert priority_weight(DEFAULT_SCORE) == priority_weight(3) == 2


def test_marks_follow_matched_category_score(scores):
    out = annotate_improvements(
        [
            "【自社分析】強みを整理しましょう",
            "【市場理解】顧客像を共有しましょう",
            "【競合分析】比較表を作りましょう",
        ],
        scores,
    )
    assert out == [
        "★★★ 【市場理解】顧客像を共有しましょう",
        "★★ 【競合分析】比較表を作りましょう",
        "★ 【自社分析】強みを整理しましょう",
    ]


def test_unmatched_text_gets_medium_weight(scores):
    out = annotate_improvements(["SNS発信を強化しましょう"], scores)
    assert out == ["★★ SNS発信を強化しましょう"]


def test_first_category_in_table_order_wins(scores):
    # Text order is irrelevant: 自社分析 (score 5) precedes 独自性 (score 1) in the table
    assert match_category("独自性と市場理解を見直す") == "市場理解"
    out = annotate_improvements(["独自性と自社分析を見直す"], scores)
    assert out == ["★ 独自性と自社分析を見直す"]


def test_sort_is_stable_and_descending(scores):
    items = ["A 1つ目", "【市場理解】x", "B 2つ目", "【自社分析】y", "【独自性】z"]
    out = annotate_improvements(items, scores)
    weights = [marker_weight(o) for o in out]
    assert weights == sorted(weights, reverse=True)
    assert out == [
        "★★★ 【市場理解】x",
        "★★★ 【独自性】z",
        "★★ A 1つ目",
        "★★ B 2つ目",
        "★ 【自社分析】y",
    ]


def test_annotating_twice_is_idempotent(scores):
    once = annotate_improvements(["【自社分析】a", "【市場理解】b", "c"], scores)
    assert annotate_improvements(once, scores) == once


def test_existing_marks_are_kept_and_resorted(scores):
    out = annotate_improvements(["★ 低い", "★★★ 高い", "★★ 中"], scores)
    assert out == ["★★★ 高い", "★★ 中", "★ 低い"]


def test_marker_weight():
    assert marker_weight("★★ text") == 2
    assert marker_weight("text ★") == 0
    assert marker_weight("★★★★★") == 3


def test_annotate_report_only_touches_v2(scores):
    v2 = ReportV2(improvements=["【市場理解】a"])
    annotated = annotate_report(v2, scores)
    assert annotated.improvements == ["★★★ 【市場理解】a"]
    assert v2.improvements == ["【市場理解】a"]

    v1 = ReportV1(recommendations=["【市場理解】a"])
    assert annotate_report(v1, scores) is v1
