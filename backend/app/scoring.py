from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from .errors import ScoreValidationError


class Category(NamedTuple):
	key: str
	label: str
	description: str


# Order is meaningful: survey display, prompt lines and recommendation matching all follow it.
CATEGORIES: Tuple[Category, ...] = (
	Category("q1_market_understanding", "市場理解", "自社の「理想的な顧客像（ターゲット）」が明確で、社内でも共有されている。"),
	Category("q2_competitive_analysis", "競合分析", "主な競合と自社の違いを、言語化して説明できる。"),
	Category("q3_self_analysis", "自社分析", "自社の強み・弱みを、第三者に説明できるレベルで把握している。"),
	Category("q4_value_proposition", "価値提案", "自社が「誰に」「どんな価値を」「なぜ提供できるのか」が明文化されている。"),
	Category("q5_uniqueness", "独自性", "競合が真似できない「独自の意味」や「世界観」がある。"),
	Category("q6_product_service", "商品・サービス", "提供する商品・サービスが、ブランドの理念と整合している。"),
	Category("q7_communication", "コミュニケーション", "ブランドのメッセージが、Web・営業・採用など全てで一貫している。"),
	Category("q8_inner_branding", "インナーブランディング", "社員が自社のブランド価値を理解し、日常業務で体現している。"),
	Category("q9_kpi_management", "KPI運用", "ブランドに関する目標（KPI）や指標を定期的にモニタリングしている。"),
	Category("q10_results", "成果実感", "ブランド施策によって、売上・採用・顧客満足度などに変化が出ている。"),
	Category("q11_ip_protection", "知的保護", "ブランド名・ロゴ・デザインなど、法的保護（商標・特許）を意識している。"),
	Category("q12_growth_intent", "今後の方向性", "自社のブランドを資産として成長させたいという意思がある。"),
)

CATEGORY_KEYS: Tuple[str, ...] = tuple(c.key for c in CATEGORIES)
CATEGORY_LABELS: Tuple[str, ...] = tuple(c.label for c in CATEGORIES)

MIN_SCORE = 1
MAX_SCORE = 5

BUSINESS_PHASES: Tuple[str, ...] = ("構想中", "売り出し中", "成長中", "見直し中")

REVENUE_SCALES: Tuple[str, ...] = (
	"1億円未満",
	"1〜3億円",
	"3〜10億円",
	"10〜30億円",
	"30〜100億円",
	"100億円以上",
	"分からない／回答したくない",
)

INDUSTRIES: Tuple[str, ...] = (
	"ソフトウェア開発", "SaaS・クラウドサービス", "Web制作・デザイン", "システムインテグレーション", "ITコンサルティング", "セキュリティ",
	"食品製造", "繊維・アパレル製造", "化学・医薬品製造", "金属・機械製造", "電子部品・デバイス製造", "自動車・輸送機器製造",
	"百貨店・総合小売", "専門小売（食品）", "専門小売（アパレル）", "専門小売（家電・雑貨）", "EC・オンライン販売", "卸売",
	"飲食店（レストラン）", "カフェ・喫茶店", "居酒屋・バー", "ホテル・旅館", "民泊", "観光・レジャー施設",
	"建設・土木", "建築設計", "不動産売買・仲介", "不動産管理", "リフォーム・リノベーション",
	"病院・クリニック", "歯科医院", "介護・福祉施設", "薬局・ドラッグストア", "整体・鍼灸",
	"学習塾・予備校", "語学教室", "専門学校・各種スクール", "企業研修", "オンライン教育",
	"銀行・信用金庫", "証券", "保険", "ファイナンス",
	"経営コンサルティング", "マーケティング・PR", "広告代理店", "デザイン事務所", "法律事務所", "会計・税理士事務所", "人材紹介・派遣",
	"運輸・物流", "美容・エステ", "フィットネス・スポーツ", "清掃・メンテナンス", "イベント・企画", "その他",
)

CHALLENGE_CATEGORIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
	("売上・市場での立ち位置", ("認知・知名度不足", "価格競争からの脱却", "新規集客の低迷", "リピート率の向上")),
	("戦略・差別化", ("強みの言語化・明確化", "競合との差別化", "ターゲット設定の曖昧さ")),
	("組織・採用", ("採用ブランディング（人材獲得）", "社内の意識統一（理念浸透）", "事業承継・世代交代")),
	("クリエイティブ・発信", ("デザインの一貫性（ロゴ・Web等）", "情報発信・SNS運用")),
)


def _check_score(index: int, value: Any) -> int:
	# bool is an int subclass; True/False are not answers
	if isinstance(value, bool) or not isinstance(value, int):
		raise ScoreValidationError(f"{CATEGORY_LABELS[index]}のスコアが整数ではありません")
	if value < MIN_SCORE or value > MAX_SCORE:
		raise ScoreValidationError(f"{CATEGORY_LABELS[index]}のスコアは{MIN_SCORE}〜{MAX_SCORE}で入力してください")
	return value


def round_half_up(value: float, digits: int = 1) -> str:
	quantum = Decimal(1).scaleb(-digits)
	return str(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class ScoreSet:
	"""The 12 category scores of one survey answer, in CATEGORIES order."""

	__slots__ = ("_scores",)

	def __init__(self, scores: Sequence[Any]) -> None:
		if scores is None or isinstance(scores, (str, bytes)) or len(scores) != len(CATEGORIES):
			raise ScoreValidationError("12項目のスコアが必要です")
		self._scores: Tuple[int, ...] = tuple(_check_score(i, v) for i, v in enumerate(scores))

	@classmethod
	def from_list(cls, scores: Optional[Sequence[Any]]) -> "ScoreSet":
		return cls(scores)

	@classmethod
	def from_submission(cls, row: Any) -> "ScoreSet":
		return cls.from_list([getattr(row, key) for key in CATEGORY_KEYS])

	def __iter__(self) -> Iterator[Tuple[str, int]]:
		return iter(self.pairs())

	def __len__(self) -> int:
		return len(self._scores)

	def __eq__(self, other: object) -> bool:
		return isinstance(other, ScoreSet) and other._scores == self._scores

	def __hash__(self) -> int:
		return hash(self._scores)

	def __repr__(self) -> str:
		return f"ScoreSet({list(self._scores)!r})"

	def pairs(self) -> List[Tuple[str, int]]:
		return list(zip(CATEGORY_LABELS, self._scores))

	def as_columns(self) -> dict:
		return dict(zip(CATEGORY_KEYS, self._scores))

	def score_for(self, label: str) -> Optional[int]:
		for name, score in self.pairs():
			if name == label:
				return score
		return None

	def average(self) -> float:
		return sum(self._scores) / len(self._scores)

	def average_display(self) -> str:
		# Exact rational mean, rounded half-up: 27/12 = 2.25 -> "2.3"
		mean = Decimal(sum(self._scores)) / Decimal(len(self._scores))
		return str(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
