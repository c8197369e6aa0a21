from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

from .reports import load_report
from .scoring import CATEGORIES, round_half_up


logger = logging.getLogger(__name__)


class SubmissionCreate(BaseModel):
	company_name: str = Field(min_length=1, max_length=256)
	respondent_name: str = Field(min_length=1, max_length=128)
	respondent_email: EmailStr
	industry: Optional[str] = None
	business_phase: str = Field(min_length=1, max_length=64)
	revenue_scale: Optional[str] = None
	mission: Optional[str] = None
	vision_future: Optional[str] = None
	challenges: List[str] = Field(default_factory=list)
	other_challenge: Optional[str] = None
	memo: Optional[str] = None
	scores: List[Any]
	privacy_agreed: bool = False


class SubmissionCreated(BaseModel):
	id: str
	avg_score: float
	report_generated: bool


class CategoryScore(BaseModel):
	key: str
	label: str
	description: str
	score: int


class SubmissionSummary(BaseModel):
	id: str
	created_at: datetime
	company_name: Optional[str] = None
	respondent_name: Optional[str] = None
	respondent_email: Optional[str] = None
	industry: Optional[str] = None
	business_phase: Optional[str] = None
	revenue_scale: Optional[str] = None
	avg_score: float
	avg_score_display: str
	has_report: bool


class SubmissionDetail(SubmissionSummary):
	mission: Optional[str] = None
	vision_future: Optional[str] = None
	challenges: List[str] = Field(default_factory=list)
	other_challenge: Optional[str] = None
	memo: Optional[str] = None
	scores: List[CategoryScore]
	ai_report: Optional[Dict[str, Any]] = None
	report_error: Optional[str] = None


def _summary_fields(row: Any) -> Dict[str, Any]:
	return {
		"id": row.id,
		"created_at": row.created_at,
		"company_name": row.company_name,
		"respondent_name": row.respondent_name,
		"respondent_email": row.respondent_email,
		"industry": row.industry,
		"business_phase": row.business_phase,
		"revenue_scale": row.revenue_scale,
		"avg_score": row.avg_score,
		"avg_score_display": round_half_up(row.avg_score or 0.0),
		"has_report": bool(row.ai_report),
	}


def submission_summary(row: Any) -> SubmissionSummary:
	return SubmissionSummary(**_summary_fields(row))


def submission_detail(row: Any, report_error: Optional[str] = None) -> SubmissionDetail:
	report: Optional[Dict[str, Any]] = None
	try:
		loaded = load_report(row.ai_report)
		report = loaded.to_json() if loaded is not None else None
	except ValueError:
		logger.exception("stored report of %s could not be read", row.id)
		report_error = report_error or "保存されたレポートを読み込めませんでした"
	return SubmissionDetail(
		**_summary_fields(row),
		mission=row.mission,
		vision_future=row.vision_future,
		challenges=row.challenge_list,
		other_challenge=row.other_challenge,
		memo=row.memo,
		scores=[
			CategoryScore(key=c.key, label=c.label, description=c.description, score=getattr(row, c.key))
			for c in CATEGORIES
		],
		ai_report=report,
		report_error=report_error,
	)
