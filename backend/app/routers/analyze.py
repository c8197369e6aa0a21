from __future__ import annotations
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..errors import ReportParseError, ScoreValidationError, UpstreamError
from ..gemini_client import GeminiClient, get_gemini_client
from ..prompts import ReportRequest
from ..report_service import analyze

router = APIRouter(prefix="/analyze", tags=["analyze"])

logger = logging.getLogger(__name__)


class AnalyzeRequest(BaseModel):
	scores: Optional[List[Any]] = None
	memo: Optional[str] = None
	business_phase: Optional[str] = None
	company_name: Optional[str] = None


@router.post("")
async def analyze_scores(req: AnalyzeRequest, client: Optional[GeminiClient] = Depends(get_gemini_client)):
	"""Run one analysis without storing anything."""
	try:
		request = ReportRequest.from_scores(
			req.scores,
			free_text=req.memo,
			business_phase=req.business_phase,
			company_name=req.company_name,
		)
	except ScoreValidationError as e:
		raise HTTPException(status_code=400, detail=str(e))
	try:
		report = await analyze(request, client)
	except (UpstreamError, ReportParseError) as e:
		logger.warning("analysis failed: %s", e)
		raise HTTPException(status_code=502, detail=f"AI分析に失敗しました: {e}")
	return report.to_json()
