from __future__ import annotations
import json
import re
from typing import Any, Dict, Union

from .errors import InvalidJSONError, MalformedResponseError
from .reports import ReportV1, ReportV2, build_report


_JSON_FENCE = re.compile(r"```json(?!\w)\s*([\s\S]*?)\s*```")


def extract_report_json(text: str) -> Dict[str, Any]:
	"""Decode the first ```json fenced block of an LLM reply."""
	match = _JSON_FENCE.search(text or "")
	if not match:
		raise MalformedResponseError()
	try:
		data = json.loads(match.group(1))
	except json.JSONDecodeError as exc:
		raise InvalidJSONError(f"AIのレスポンスに含まれるJSONが不正です: {exc.msg}") from exc
	if not isinstance(data, dict):
		raise InvalidJSONError("AIのレスポンスのJSONがオブジェクトではありません")
	return data


def parse_report(text: str, schema_version: str) -> Union[ReportV1, ReportV2]:
	return build_report(extract_report_json(text), schema_version)
