"""Analysis report shapes.

Two report layouts exist and must never be mixed inside one deployment:

* ``v1`` keeps contradictions, risks and recommendations apart and carries a
  separate priority-action list.
* ``v2`` merges contradictions and risks, adds strengths and replaces the
  recommendation lists with a single ``improvements`` list whose entries are
  prefixed with priority marks (see :mod:`priority`).

Both are pydantic models tagged by ``schema_version`` so stored JSON can be
validated back into the right class without guessing. Every field is optional:
the LLM reply is only checked for being valid JSON, so missing keys render as
empty sections.
"""

from __future__ import annotations
import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter


def _as_text(value: Any) -> str:
	if value is None:
		return ""
	if isinstance(value, list):
		return "\n".join(str(v) for v in value if v is not None)
	return str(value)


def _as_text_list(value: Any) -> List[str]:
	if value is None:
		return []
	if isinstance(value, str):
		return [value] if value.strip() else []
	if isinstance(value, (list, tuple)):
		return [str(v) for v in value if v is not None]
	return [str(value)]


Text = Annotated[str, BeforeValidator(_as_text)]
TextList = Annotated[List[str], BeforeValidator(_as_text_list)]


class _ReportBase(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	overall_comment: Text = Field(default="", alias="overallComment")
	action_plan_3_months: TextList = Field(default_factory=list, alias="actionPlan3Months")
	action_plan_6_months: TextList = Field(default_factory=list, alias="actionPlan6Months")
	action_plan_1_year: TextList = Field(default_factory=list, alias="actionPlan1Year")
	phase_advice: Text = Field(default="", alias="phaseAdvice")

	def to_json(self) -> Dict[str, Any]:
		return self.model_dump(by_alias=True)


class ReportV1(_ReportBase):
	schema_version: Literal["v1"] = "v1"
	contradictions: TextList = Field(default_factory=list)
	priority_actions: TextList = Field(default_factory=list, alias="priorityActions")
	weaknesses: TextList = Field(default_factory=list)
	recommendations: TextList = Field(default_factory=list)
	risks: TextList = Field(default_factory=list)


class ReportV2(_ReportBase):
	schema_version: Literal["v2"] = "v2"
	strengths: TextList = Field(default_factory=list)
	contradictions_and_risks: TextList = Field(default_factory=list, alias="contradictionsAndRisks")
	improvements: TextList = Field(default_factory=list)


AnalysisReport = Annotated[Union[ReportV1, ReportV2], Field(discriminator="schema_version")]

REPORT_MODELS = {"v1": ReportV1, "v2": ReportV2}
SCHEMA_VERSIONS = tuple(REPORT_MODELS)

_report_adapter: TypeAdapter = TypeAdapter(AnalysisReport)


def check_schema_version(version: str) -> str:
	if version not in REPORT_MODELS:
		raise ValueError(f"unknown report schema version {version!r}; expected one of {SCHEMA_VERSIONS}")
	return version


def report_field_names(version: str) -> List[str]:
	"""JSON keys the LLM is asked to produce for ``version``."""
	model = REPORT_MODELS[check_schema_version(version)]
	return [f.alias or name for name, f in model.model_fields.items() if name != "schema_version"]


def build_report(data: Dict[str, Any], version: str) -> Union[ReportV1, ReportV2]:
	"""Wrap a decoded LLM payload into the report model for ``version``."""
	payload = {k: v for k, v in data.items() if k != "schema_version"}
	payload["schema_version"] = check_schema_version(version)
	return _report_adapter.validate_python(payload)


def load_report(raw: Optional[Union[str, Dict[str, Any]]]) -> Optional[Union[ReportV1, ReportV2]]:
	"""Read a stored report. Untagged payloads predate versioning and are v1."""
	if raw is None or raw == "":
		return None
	data = json.loads(raw) if isinstance(raw, str) else dict(raw)
	data.setdefault("schema_version", "v1")
	return _report_adapter.validate_python(data)


def dump_report(report: Union[ReportV1, ReportV2]) -> str:
	return json.dumps(report.to_json(), ensure_ascii=False)
