from __future__ import annotations
from typing import List, Optional, Sequence, Union

from .reports import ReportV1, ReportV2
from .scoring import CATEGORY_LABELS, ScoreSet


PRIORITY_MARK = "★"
MAX_WEIGHT = 3
# Used when an improvement mentions no category; weighs like a score of 3.
DEFAULT_SCORE = 3


def priority_weight(score: int) -> int:
	if score <= 2:
		return 3
	if score <= 3:
		return 2
	return 1


def marker_weight(text: str) -> int:
	count = 0
	for ch in text:
		if ch != PRIORITY_MARK:
			break
		count += 1
	return min(count, MAX_WEIGHT)


def match_category(text: str) -> Optional[str]:
	# First label in table order wins when several are mentioned.
	for label in CATEGORY_LABELS:
		if label in text:
			return label
	return None


def annotate(text: str, scores: ScoreSet) -> str:
	if marker_weight(text):
		return text
	label = match_category(text)
	score = scores.score_for(label) if label else None
	weight = priority_weight(DEFAULT_SCORE if score is None else score)
	return f"{PRIORITY_MARK * weight} {text}"


def annotate_improvements(items: Sequence[str], scores: ScoreSet) -> List[str]:
	"""Prefix each item with its priority marks and order highest weight first.

	Items that already start with a mark keep it, so running this twice is a no-op
	apart from restoring the ordering.
	"""
	annotated = [annotate(item, scores) for item in items]
	# sorted() is stable: equal weights keep their original order
	return sorted(annotated, key=marker_weight, reverse=True)


def annotate_report(report: Union[ReportV1, ReportV2], scores: ScoreSet) -> Union[ReportV1, ReportV2]:
	if isinstance(report, ReportV2):
		return report.model_copy(update={"improvements": annotate_improvements(report.improvements, scores)})
	return report
