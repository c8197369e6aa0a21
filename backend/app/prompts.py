from __future__ import annotations
import json
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from .reports import check_schema_version
from .scoring import ScoreSet


COMPANY_PLACEHOLDER = "未入力"
PHASE_PLACEHOLDER = "未入力"
FREE_TEXT_PLACEHOLDER = "記載なし"


class ReportRequest(BaseModel):
	model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

	scores: ScoreSet
	free_text: Optional[str] = None
	business_phase: str = ""
	company_name: Optional[str] = None

	@classmethod
	def from_scores(
		cls,
		scores: Optional[Sequence[Any]],
		*,
		free_text: Optional[str] = None,
		business_phase: Optional[str] = None,
		company_name: Optional[str] = None,
	) -> "ReportRequest":
		return cls(
			scores=ScoreSet.from_list(scores),
			free_text=free_text,
			business_phase=business_phase or "",
			company_name=company_name,
		)

	@classmethod
	def from_submission(cls, row: Any) -> "ReportRequest":
		return cls(
			scores=ScoreSet.from_submission(row),
			free_text=compose_context(row),
			business_phase=row.business_phase or "",
			company_name=row.company_name,
		)


def _filled(value: Optional[str]) -> Optional[str]:
	value = (value or "").strip()
	return value or None


def compose_context(row: Any) -> Optional[str]:
	"""Free-text block handed to the model for one submission.

	Current survey answers carry mission, vision and challenge fields. Answers
	from the first survey version only have a single memo, used as is.
	"""
	mission = _filled(getattr(row, "mission", None))
	vision = _filled(getattr(row, "vision_future", None))
	challenges: List[str] = list(getattr(row, "challenge_list", None) or [])
	other = _filled(getattr(row, "other_challenge", None))
	if not (mission or vision or challenges or other):
		return _filled(getattr(row, "memo", None))
	text = (
		f"【企業理念】\n{mission or '未記入'}\n\n"
		f"【3〜5年後のビジョン】\n{vision or '未記入'}\n\n"
		f"【課題】\n{'、'.join(challenges) or '未選択'}"
	)
	if other:
		text += f"\nその他: {other}"
	return text


_SCHEMA_EXAMPLES: Dict[str, Dict[str, Any]] = {
	"v1": {
		"overallComment": "総合評価の文章",
		"contradictions": ["矛盾1", "矛盾2", "矛盾3", "矛盾4"],
		"priorityActions": ["アクション1", "アクション2", "アクション3", "アクション4"],
		"weaknesses": ["改善領域1", "改善領域2", "改善領域3"],
		"recommendations": ["提案1", "提案2", "提案3", "提案4", "提案5", "提案6"],
		"risks": ["リスク1", "リスク2", "リスク3", "リスク4"],
		"actionPlan3Months": ["3ヶ月以内のアクション1", "3ヶ月以内のアクション2", "3ヶ月以内のアクション3"],
		"actionPlan6Months": ["6ヶ月以内のアクション1", "6ヶ月以内のアクション2", "6ヶ月以内のアクション3"],
		"actionPlan1Year": ["1年以内のアクション1", "1年以内のアクション2", "1年以内のアクション3"],
		"phaseAdvice": "事業フェーズ別アドバイスの文章",
	},
	"v2": {
		"overallComment": "総合評価の文章",
		"strengths": ["強み1", "強み2", "強み3"],
		"contradictionsAndRisks": ["矛盾・リスク1", "矛盾・リスク2", "矛盾・リスク3", "矛盾・リスク4"],
		"improvements": ["【項目名】改善提案1", "【項目名】改善提案2", "【項目名】改善提案3", "【項目名】改善提案4", "【項目名】改善提案5"],
		"actionPlan3Months": ["3ヶ月以内のアクション1", "3ヶ月以内のアクション2", "3ヶ月以内のアクション3"],
		"actionPlan6Months": ["6ヶ月以内のアクション1", "6ヶ月以内のアクション2", "6ヶ月以内のアクション3"],
		"actionPlan1Year": ["1年以内のアクション1", "1年以内のアクション2", "1年以内のアクション3"],
		"phaseAdvice": "事業フェーズ別アドバイスの文章",
	},
}


def schema_example(version: str) -> Dict[str, Any]:
	return _SCHEMA_EXAMPLES[check_schema_version(version)]


def _section_instructions(version: str, phase: str) -> str:
	if version == "v1":
		return (
			"1. **総合評価**: 平均スコアと全体の状況を4〜5文で評価してください。メモの内容も踏まえ、現状の強みと今後の可能性に触れてください。\n"
			"2. **矛盾検知**: スコア同士、またはスコアとメモの間に見られる矛盾を4〜6個、丁寧に指摘してください。\n"
			"3. **優先アクション（緊急度順）**: 最も優先度の高いアクションを4〜5個提案してください。\n"
			"4. **改善が必要な領域**: 3点以下の項目について、改善の余地と方向性を3〜4個示してください。\n"
			"5. **具体的な改善提案**: 実行可能な具体的アクションを6〜8個提案してください。\n"
			"6. **リスク分析**: 現状のまま進んだ場合に想定されるリスクを4〜5個示してください。\n"
			"7. **3ヶ月後のアクションプラン**: 今後3ヶ月で取り組むべきアクションを3〜4個提案してください。\n"
			"8. **6ヶ月後のアクションプラン**: 3〜6ヶ月の期間で取り組むべきアクションを3〜4個提案してください。\n"
			"9. **1年後のアクションプラン**: 6ヶ月〜1年の期間で取り組むべきアクションを3〜4個提案してください。\n"
			f"10. **事業フェーズ別アドバイス**: {phase}フェーズに特化したアドバイスを3〜4文で示してください。\n"
		)
	return (
		"1. **総合評価**: 平均スコアと全体の状況を4〜5文で評価してください。メモの内容も踏まえ、現状の強みと今後の可能性に触れてください。\n"
		"2. **強み**: スコアやメモから読み取れる強みを3個挙げてください。\n"
		"3. **矛盾とリスク**: スコア同士・スコアとメモの矛盾、および現状のまま進んだ場合のリスクを合わせて4〜6個指摘してください。\n"
		"4. **改善提案**: 実行可能な改善提案を5〜7個示してください。各提案の先頭に、関係する診断項目名を【】で囲んで必ず記載してください（例:【市場理解】）。\n"
		"5. **3ヶ月後のアクションプラン**: 今後3ヶ月で取り組むべきアクションを3〜4個提案してください。\n"
		"6. **6ヶ月後のアクションプラン**: 3〜6ヶ月の期間で取り組むべきアクションを3〜4個提案してください。\n"
		"7. **1年後のアクションプラン**: 6ヶ月〜1年の期間で取り組むべきアクションを3〜4個提案してください。\n"
		f"8. **事業フェーズ別アドバイス**: {phase}フェーズに特化したアドバイスを3〜4文で示してください。\n"
	)


def build_analysis_prompt(request: ReportRequest, schema_version: str = "v2") -> str:
	version = check_schema_version(schema_version)
	scores = request.scores
	score_lines = "\n".join(f"{label}: {score}点" for label, score in scores.pairs())
	phase = request.business_phase or PHASE_PLACEHOLDER
	example = json.dumps(schema_example(version), ensure_ascii=False, indent=2)
	return (
		"あなたはブランディングの専門家です。以下の企業のブランドチェック診断結果を分析してください。\n\n"
		"【企業情報】\n"
		f"会社名: {request.company_name or COMPANY_PLACEHOLDER}\n"
		f"ビジネスフェーズ: {phase}\n\n"
		"【診断スコア（5点満点）】\n"
		f"{score_lines}\n"
		f"平均スコア: {scores.average_display()}点\n\n"
		"【経営者のメモ（課題・展望）】\n"
		f"{request.free_text or FREE_TEXT_PLACEHOLDER}\n\n"
		"---\n\n"
		"以下の項目について、丁寧かつ具体的に分析してください。\n\n"
		f"{_section_instructions(version, phase)}\n"
		"注意事項:\n"
		"- すべての文章をですます調で統一し、配慮のある表現を使うこと\n"
		"- 断定を避け、「〜することをお勧めします」「〜の可能性があります」といった提案型の表現を使うこと\n"
		"- メモに書かれた経営者の想いや課題認識を尊重すること\n"
		"- ポジティブな面も認めながら、建設的な提案を行うこと\n\n"
		"出力は次の形式のJSONオブジェクトを1つだけ、言語指定jsonのコードブロックに入れて返してください:\n"
		f"```json\n{example}\n```"
	)
