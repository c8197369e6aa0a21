from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import ReportParseError, UpstreamError
from ..gemini_client import GeminiClient, get_gemini_client
from ..models import Submission
from ..report_service import generate_report
from ..reports import build_report, dump_report, load_report
from ..schemas import SubmissionDetail, submission_detail
from ..settings import settings
from .auth import Admin, get_current_admin

router = APIRouter(prefix="/results", tags=["results"])

logger = logging.getLogger(__name__)


def get_submission_or_404(db: Session, submission_id: str) -> Submission:
	try:
		row = db.get(Submission, submission_id)
	except SQLAlchemyError:
		logger.exception("failed to load submission %s", submission_id)
		raise HTTPException(status_code=500, detail="データの読み込みに失敗しました")
	if row is None:
		raise HTTPException(status_code=404, detail="結果が見つかりません")
	return row


@router.get("/{submission_id}", response_model=SubmissionDetail)
async def get_result(
	submission_id: str,
	db: Session = Depends(get_db),
	client: Optional[GeminiClient] = Depends(get_gemini_client),
):
	row = get_submission_or_404(db, submission_id)
	report_error: Optional[str] = None
	# A missing report is generated on view; failures leave it missing for the next visit
	if not row.ai_report:
		try:
			await generate_report(db, row, client)
		except (UpstreamError, ReportParseError) as e:
			logger.warning("report generation for %s failed: %s", row.id, e)
			report_error = f"AI分析に失敗しました: {e}"
		except SQLAlchemyError:
			db.rollback()
			logger.exception("failed to store report for %s", row.id)
			report_error = "レポートの保存に失敗しました"
	return submission_detail(row, report_error)


@router.post("/{submission_id}/report", response_model=SubmissionDetail)
async def regenerate_report(
	submission_id: str,
	db: Session = Depends(get_db),
	client: Optional[GeminiClient] = Depends(get_gemini_client),
	admin: Admin = Depends(get_current_admin),
):
	"""Discard the current report (edited or not) and ask the model again."""
	row = get_submission_or_404(db, submission_id)
	try:
		await generate_report(db, row, client)
	except (UpstreamError, ReportParseError) as e:
		logger.warning("report regeneration for %s failed: %s", row.id, e)
		raise HTTPException(status_code=502, detail=f"AI分析に失敗しました: {e}")
	except SQLAlchemyError:
		db.rollback()
		logger.exception("failed to store report for %s", row.id)
		raise HTTPException(status_code=500, detail="レポートの保存に失敗しました")
	return submission_detail(row)


@router.put("/{submission_id}/report", response_model=SubmissionDetail)
async def save_edited_report(
	submission_id: str,
	report: Dict[str, Any] = Body(...),
	db: Session = Depends(get_db),
	admin: Admin = Depends(get_current_admin),
):
	row = get_submission_or_404(db, submission_id)
	try:
		stored = load_report(row.ai_report)
	except ValueError:
		stored = None
	expected = stored.schema_version if stored is not None else settings.report_schema_version
	version = report.get("schema_version") or expected
	if version != expected:
		raise HTTPException(
			status_code=409,
			detail=f"レポート形式が一致しません (expected {expected}, got {version})",
		)
	try:
		edited = build_report(report, version)
	except ValidationError as e:
		raise HTTPException(status_code=422, detail=str(e))
	row.ai_report = dump_report(edited)
	try:
		db.add(row)
		db.commit()
		db.refresh(row)
	except SQLAlchemyError:
		db.rollback()
		logger.exception("failed to save edited report for %s", row.id)
		raise HTTPException(status_code=500, detail="保存に失敗しました")
	logger.info("saved edited report for %s", row.id)
	return submission_detail(row)
