from __future__ import annotations
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotificationError, ReportParseError, ScoreValidationError, UpstreamError
from ..gemini_client import GeminiClient, get_gemini_client
from ..models import Submission
from ..notifier import SurveyNotifier, get_notifier
from ..report_service import generate_report
from ..schemas import SubmissionCreate, SubmissionCreated
from ..scoring import BUSINESS_PHASES, CATEGORIES, CHALLENGE_CATEGORIES, INDUSTRIES, REVENUE_SCALES, ScoreSet


router = APIRouter(prefix="/survey", tags=["survey"])

logger = logging.getLogger(__name__)


@router.get("/options")
def get_options():
	return {
		"questions": [{"id": c.key, "label": c.label, "description": c.description} for c in CATEGORIES],
		"business_phases": list(BUSINESS_PHASES),
		"revenue_scales": list(REVENUE_SCALES),
		"industries": list(INDUSTRIES),
		"challenge_categories": [{"title": title, "options": list(options)} for title, options in CHALLENGE_CATEGORIES],
	}


@router.post("/submissions", response_model=SubmissionCreated, status_code=201)
async def submit(
	req: SubmissionCreate,
	db: Session = Depends(get_db),
	client: Optional[GeminiClient] = Depends(get_gemini_client),
	notifier: SurveyNotifier = Depends(get_notifier),
):
	if not req.privacy_agreed:
		raise HTTPException(status_code=400, detail="個人情報保護方針に同意してください。")
	try:
		scores = ScoreSet.from_list(req.scores)
	except ScoreValidationError as e:
		raise HTTPException(status_code=400, detail=str(e))

	row = Submission(
		company_name=req.company_name.strip(),
		respondent_name=req.respondent_name.strip(),
		respondent_email=str(req.respondent_email),
		industry=req.industry,
		business_phase=req.business_phase,
		revenue_scale=req.revenue_scale,
		privacy_agreed=True,
		mission=req.mission,
		vision_future=req.vision_future,
		other_challenge=req.other_challenge,
		memo=req.memo,
		avg_score=scores.average(),
		**scores.as_columns(),
	)
	row.challenge_list = req.challenges
	try:
		db.add(row)
		db.commit()
		db.refresh(row)
	except SQLAlchemyError:
		db.rollback()
		logger.exception("failed to store survey answer")
		raise HTTPException(status_code=500, detail="回答の保存に失敗しました。時間をおいて再度お試しください。")
	logger.info("stored survey answer %s (%s)", row.id, row.company_name)

	try:
		await notifier.send_survey_notification(row)
	except NotificationError as e:
		logger.warning("notification for %s failed: %s", row.id, e)

	report_generated = False
	try:
		await generate_report(db, row, client)
		report_generated = True
	except (UpstreamError, ReportParseError) as e:
		logger.warning("report generation for %s failed: %s", row.id, e)
	except SQLAlchemyError:
		db.rollback()
		logger.exception("failed to store report for %s", row.id)

	return SubmissionCreated(id=row.id, avg_score=row.avg_score, report_generated=report_generated)
