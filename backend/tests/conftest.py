"""
PyTest configuration and fixtures.
"""

import json
import os

# Must be set before the app settings are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_PASSWORD"] = "brand-admin-pass"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["REPORT_SCHEMA_VERSION"] = "v2"
for _name in ("GEMINI_API_KEY", "OPENROUTER_API_KEY", "RESEND_API_KEY", "ADMIN_EMAIL"):
    os.environ.pop(_name, None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.db import Base, get_db
from backend.app.gemini_client import get_gemini_client
from backend.app.main import app
from backend.app.models import Submission
from backend.app.notifier import get_notifier
from backend.app.routers.auth import create_access_token
from backend.app.scoring import ScoreSet


def fenced(payload) -> str:
    """Wrap a payload the way the model is asked to answer."""
    return "以下が分析結果です。\n```json\n" + json.dumps(payload, ensure_ascii=False) + "\n```\nご確認ください。"


V2_PAYLOAD = {
    "overallComment": "全体として伸びしろのある状態です。",
    "strengths": ["成長意欲が高いです"],
    "contradictionsAndRisks": ["価値提案が明文化されていない点が気になります"],
    "improvements": [
        "【独自性】世界観を言語化されることをお勧めします",
        "【市場理解】ターゲット像を社内で共有しましょう",
        "SNSでの発信を強化しましょう",
    ],
    "actionPlan3Months": ["ペルソナ設計"],
    "actionPlan6Months": ["メッセージ統一"],
    "actionPlan1Year": ["KPIの定期レビュー"],
    "phaseAdvice": "成長フェーズでは一貫性が重要です。",
}


class FakeLLM:
    """Stands in for GeminiClient; records prompts and replays a canned reply."""

    def __init__(self, reply=None, error=None):
        self.reply = fenced(V2_PAYLOAD) if reply is None else reply
        self.error = error
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def aclose(self) -> None:
        pass


class FakeNotifier:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def send_survey_notification(self, submission):
        if self.error is not None:
            raise self.error
        self.sent.append(submission.id)
        return {"id": "mail-1"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Get database session for each test."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def client(db_session, fake_llm, fake_notifier):
    """Create test client with database, LLM and mail dependencies overridden."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gemini_client] = lambda: fake_llm
    app.dependency_overrides[get_notifier] = lambda: fake_notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "admin", "jti": "test"})
    return {"Authorization": f"Bearer {token}"}


def make_submission(db_session, scores=None, **fields):
    score_set = ScoreSet.from_list(scores or [3] * 12)
    values = {
        "company_name": "株式会社テスト",
        "respondent_name": "山田",
        "respondent_email": "yamada@example.com",
        "industry": "ソフトウェア開発",
        "business_phase": "成長中",
        "privacy_agreed": True,
        "avg_score": score_set.average(),
        **score_set.as_columns(),
    }
    values.update(fields)
    row = Submission(**values)
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture
def submission_factory(db_session):
    def factory(scores=None, **fields):
        return make_submission(db_session, scores, **fields)

    return factory


