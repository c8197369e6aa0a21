from __future__ import annotations


class ScoreValidationError(ValueError):
	"""Raised when a score list is not exactly 12 integers between 1 and 5."""


class UpstreamError(RuntimeError):
	"""The LLM provider could not be reached or returned an unusable payload."""


class ReportParseError(ValueError):
	"""Base class for failures turning an LLM reply into a report."""


class MalformedResponseError(ReportParseError):
	def __init__(self, message: str = "AIのレスポンス形式が不正です") -> None:
		super().__init__(message)


class InvalidJSONError(ReportParseError):
	def __init__(self, message: str = "AIのレスポンスに含まれるJSONが不正です") -> None:
		super().__init__(message)


class NotificationError(RuntimeError):
	"""Notification mail could not be sent. Callers log and continue."""
