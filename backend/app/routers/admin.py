from __future__ import annotations
import logging
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..exporting import submissions_to_csv
from ..models import Submission
from ..schemas import SubmissionSummary, submission_summary
from .auth import Admin, get_current_admin
from .results import get_submission_or_404

router = APIRouter(prefix="/admin", tags=["admin"])

logger = logging.getLogger(__name__)


SORTABLE_COLUMNS = {
	"created_at": Submission.created_at,
	"avg_score": Submission.avg_score,
	"company_name": Submission.company_name,
	"respondent_name": Submission.respondent_name,
	"industry": Submission.industry,
	"business_phase": Submission.business_phase,
}

SortField = Literal["created_at", "avg_score", "company_name", "respondent_name", "industry", "business_phase"]


class SubmissionFilter(BaseModel):
	q: Optional[str] = None
	business_phase: Optional[str] = None
	industry: Optional[str] = None
	min_score: Optional[float] = None
	max_score: Optional[float] = None
	has_report: Optional[bool] = None
	sort_by: SortField = "created_at"
	order: Literal["asc", "desc"] = "desc"


def submission_filter(
	q: Optional[str] = Query(default=None, description="会社名・回答者名・メールアドレスの部分一致"),
	business_phase: Optional[str] = None,
	industry: Optional[str] = None,
	min_score: Optional[float] = Query(default=None, ge=1, le=5),
	max_score: Optional[float] = Query(default=None, ge=1, le=5),
	has_report: Optional[bool] = None,
	sort_by: SortField = "created_at",
	order: Literal["asc", "desc"] = "desc",
) -> SubmissionFilter:
	return SubmissionFilter(
		q=q,
		business_phase=business_phase,
		industry=industry,
		min_score=min_score,
		max_score=max_score,
		has_report=has_report,
		sort_by=sort_by,
		order=order,
	)


def query_submissions(db: Session, f: SubmissionFilter) -> List[Submission]:
	query = db.query(Submission)
	term = (f.q or "").strip()
	if term:
		# % and _ in the search term are literal characters
		escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
		pattern = f"%{escaped}%"
		query = query.filter(
			or_(
				Submission.company_name.ilike(pattern, escape="\\"),
				Submission.respondent_name.ilike(pattern, escape="\\"),
				Submission.respondent_email.ilike(pattern, escape="\\"),
			)
		)
	if f.business_phase:
		query = query.filter(Submission.business_phase == f.business_phase)
	if f.industry:
		query = query.filter(Submission.industry == f.industry)
	if f.min_score is not None:
		query = query.filter(Submission.avg_score >= f.min_score)
	if f.max_score is not None:
		query = query.filter(Submission.avg_score <= f.max_score)
	if f.has_report is True:
		query = query.filter(Submission.ai_report.isnot(None))
	elif f.has_report is False:
		query = query.filter(Submission.ai_report.is_(None))
	column = SORTABLE_COLUMNS[f.sort_by]
	primary = column.asc() if f.order == "asc" else column.desc()
	# Newest first among equal sort keys
	return query.order_by(primary, Submission.created_at.desc()).all()


class SubmissionList(BaseModel):
	total: int
	items: List[SubmissionSummary]


@router.get("/submissions", response_model=SubmissionList)
def list_submissions(
	f: SubmissionFilter = Depends(submission_filter),
	db: Session = Depends(get_db),
	admin: Admin = Depends(get_current_admin),
):
	try:
		rows = query_submissions(db, f)
	except SQLAlchemyError:
		logger.exception("failed to list submissions")
		raise HTTPException(status_code=500, detail="データの読み込みに失敗しました")
	return SubmissionList(total=len(rows), items=[submission_summary(r) for r in rows])


@router.get("/submissions/export")
def export_submissions(
	f: SubmissionFilter = Depends(submission_filter),
	db: Session = Depends(get_db),
	admin: Admin = Depends(get_current_admin),
):
	try:
		rows = query_submissions(db, f)
	except SQLAlchemyError:
		logger.exception("failed to export submissions")
		raise HTTPException(status_code=500, detail="データの読み込みに失敗しました")
	# BOM so spreadsheet software detects UTF-8
	body = "\ufeff" + submissions_to_csv(rows)
	filename = f"brand-check-{datetime.utcnow():%Y%m%d-%H%M%S}.csv"
	return Response(
		content=body.encode("utf-8"),
		media_type="text/csv; charset=utf-8",
		headers={"Content-Disposition": f'attachment; filename="{filename}"'},
	)


@router.delete("/submissions/{submission_id}", status_code=204)
def delete_submission(
	submission_id: str,
	db: Session = Depends(get_db),
	admin: Admin = Depends(get_current_admin),
):
	row = get_submission_or_404(db, submission_id)
	try:
		db.delete(row)
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		logger.exception("failed to delete submission %s", submission_id)
		raise HTTPException(status_code=500, detail="削除に失敗しました")
	logger.info("deleted submission %s", submission_id)
	return Response(status_code=204)
