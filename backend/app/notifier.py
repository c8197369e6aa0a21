from __future__ import annotations
import html
import logging
from typing import Any, Dict, Optional

import httpx

from .errors import NotificationError
from .scoring import round_half_up
from .settings import settings


logger = logging.getLogger(__name__)


def result_url(submission_id: Optional[str]) -> str:
	base = settings.public_base_url.rstrip("/")
	return f"{base}/results/{submission_id}" if submission_id else f"{base}/admin"


def build_notification_html(submission: Any) -> str:
	def esc(value: Any, fallback: str = "未入力") -> str:
		return html.escape(str(value)) if value not in (None, "") else fallback

	avg = round_half_up(submission.avg_score or 0.0)
	return (
		'<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">'
		'<h2 style="color: #0f172a;">新しいブランドチェック回答が届きました</h2>'
		'<div style="background: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0;">'
		f"<p><strong>企業名:</strong> {esc(submission.company_name)}</p>"
		f"<p><strong>回答者:</strong> {esc(submission.respondent_name)}</p>"
		f"<p><strong>メール:</strong> {esc(submission.respondent_email)}</p>"
		f"<p><strong>業種:</strong> {esc(submission.industry)}</p>"
		f"<p><strong>事業フェーズ:</strong> {esc(submission.business_phase)}</p>"
		f"<p><strong>平均スコア:</strong> {avg} / 5.0</p>"
		"</div>"
		f'<p><a href="{html.escape(result_url(submission.id))}">結果を確認する</a></p>'
		'<p style="color: #64748b; font-size: 14px;">または、管理画面で詳細を確認してください。</p>'
		"</div>"
	)


class SurveyNotifier:
	"""Sends the "new answer" mail to the admin through the Resend HTTP API."""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		to_address: Optional[str] = None,
		from_address: Optional[str] = None,
		base_url: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.resend_api_key
		self.to_address = to_address or settings.admin_email
		self.from_address = from_address or settings.notification_from
		self.base_url = base_url or settings.resend_base_url
		self._client = httpx.AsyncClient(timeout=30, transport=transport)

	async def send_survey_notification(self, submission: Any) -> Dict[str, Any]:
		if not self.api_key:
			raise NotificationError("RESEND_API_KEY is not configured")
		if not self.to_address:
			raise NotificationError("ADMIN_EMAIL is not configured")
		payload = {
			"from": self.from_address,
			"to": [self.to_address],
			"subject": f"新しいブランドチェック回答: {submission.company_name or '未入力'}",
			"html": build_notification_html(submission),
		}
		headers = {"Authorization": f"Bearer {self.api_key}"}
		try:
			r = await self._client.post(self.base_url, headers=headers, json=payload)
			r.raise_for_status()
			data = r.json()
		except (httpx.HTTPError, ValueError) as exc:
			raise NotificationError(f"notification mail failed: {exc}") from exc
		logger.info("notification mail sent for submission %s", submission.id)
		return data

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_notifier():
	notifier = SurveyNotifier()
	try:
		yield notifier
	finally:
		await notifier.aclose()
