from __future__ import annotations
import logging
from typing import Any, Optional, Protocol, Union

from sqlalchemy.orm import Session

from .errors import UpstreamError
from .priority import annotate_report
from .prompts import ReportRequest, build_analysis_prompt
from .report_parser import parse_report
from .reports import ReportV1, ReportV2, dump_report
from .settings import settings


logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
	async def generate(self, prompt: str) -> str: ...


async def analyze(
	request: ReportRequest,
	client: Optional[TextGenerator],
	schema_version: Optional[str] = None,
) -> Union[ReportV1, ReportV2]:
	"""Prompt the model for one report and post-process its reply.

	Raises UpstreamError when the model cannot be reached and a ReportParseError
	when its reply carries no usable JSON block.
	"""
	version = schema_version or settings.report_schema_version
	prompt = build_analysis_prompt(request, version)
	if client is None:
		raise UpstreamError("LLM client is not configured")
	try:
		reply = await client.generate(prompt)
	except UpstreamError:
		raise
	except Exception as exc:
		raise UpstreamError(str(exc)) from exc
	report = parse_report(reply, version)
	return annotate_report(report, request.scores)


async def generate_report(
	db: Session,
	submission: Any,
	client: Optional[TextGenerator],
	schema_version: Optional[str] = None,
) -> Union[ReportV1, ReportV2]:
	"""Build, request, parse and store the report of one submission.

	Nothing is written unless every step succeeds, so a failed run leaves the
	submission without a report and it is regenerated on the next visit.
	"""
	request = ReportRequest.from_submission(submission)
	report = await analyze(request, client, schema_version)
	submission.ai_report = dump_report(report)
	db.add(submission)
	db.commit()
	db.refresh(submission)
	logger.info("stored %s report for submission %s", report.schema_version, submission.id)
	return report
