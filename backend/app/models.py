from __future__ import annotations
import json
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, String, DateTime, Integer, Float, Text, Boolean
from .db import Base


def _new_id() -> str:
	return uuid.uuid4().hex


class Submission(Base):
	__tablename__ = "survey_results"
	id = Column(String(32), primary_key=True, default=_new_id)
	# Respondent metadata
	company_name = Column(String(256), nullable=True)
	respondent_name = Column(String(128), nullable=True)
	respondent_email = Column(String(256), nullable=True)
	industry = Column(String(128), nullable=True)
	business_phase = Column(String(64), nullable=True)
	revenue_scale = Column(String(64), nullable=True)
	privacy_agreed = Column(Boolean, default=False, nullable=False)
	# Free-text context
	mission = Column(Text, nullable=True)
	vision_future = Column(Text, nullable=True)
	challenges = Column(Text, nullable=True)  # JSON array of selected challenge labels
	other_challenge = Column(Text, nullable=True)
	memo = Column(Text, nullable=True)  # first survey version only
	# Scores, one column per category
	q1_market_understanding = Column(Integer, nullable=False)
	q2_competitive_analysis = Column(Integer, nullable=False)
	q3_self_analysis = Column(Integer, nullable=False)
	q4_value_proposition = Column(Integer, nullable=False)
	q5_uniqueness = Column(Integer, nullable=False)
	q6_product_service = Column(Integer, nullable=False)
	q7_communication = Column(Integer, nullable=False)
	q8_inner_branding = Column(Integer, nullable=False)
	q9_kpi_management = Column(Integer, nullable=False)
	q10_results = Column(Integer, nullable=False)
	q11_ip_protection = Column(Integer, nullable=False)
	q12_growth_intent = Column(Integer, nullable=False)
	avg_score = Column(Float, nullable=False)
	ai_report = Column(Text, nullable=True)  # JSON string, tagged with schema_version
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	@property
	def challenge_list(self) -> List[str]:
		if not self.challenges:
			return []
		try:
			data = json.loads(self.challenges)
		except ValueError:
			return [self.challenges]
		return [str(c) for c in data] if isinstance(data, list) else [str(data)]

	@challenge_list.setter
	def challenge_list(self, values: Optional[List[str]]) -> None:
		self.challenges = json.dumps(list(values or []), ensure_ascii=False)
