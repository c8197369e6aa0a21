from __future__ import annotations
import csv
import io
from typing import Any, Iterable, List

from .scoring import CATEGORIES, round_half_up


EXPORT_COLUMNS: List[str] = [
	"作成日時",
	"会社名",
	"回答者名",
	"メールアドレス",
	"業界",
	"ビジネスフェーズ",
	"売上規模",
	"平均スコア",
	*[c.label for c in CATEGORIES],
	"レポート有無",
]


def submission_row(row: Any) -> List[str]:
	created = row.created_at.strftime("%Y-%m-%d %H:%M:%S") if row.created_at else ""
	return [
		created,
		row.company_name or "",
		row.respondent_name or "",
		row.respondent_email or "",
		row.industry or "",
		row.business_phase or "",
		row.revenue_scale or "",
		round_half_up(row.avg_score or 0.0),
		*[str(getattr(row, c.key)) for c in CATEGORIES],
		"有" if row.ai_report else "無",
	]


def submissions_to_csv(rows: Iterable[Any]) -> str:
	buf = io.StringIO()
	writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\r\n")
	writer.writerow(EXPORT_COLUMNS)
	for row in rows:
		writer.writerow(submission_row(row))
	return buf.getvalue()
