from __future__ import annotations
import logging

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url or "sqlite:///./brand_check.db"

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args, future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Columns added by the second survey version; older databases only have `memo`.
_LATER_COLUMNS = {
	"revenue_scale": "VARCHAR(64)",
	"privacy_agreed": "BOOLEAN DEFAULT FALSE NOT NULL",
	"mission": "TEXT",
	"vision_future": "TEXT",
	"challenges": "TEXT",
	"other_challenge": "TEXT",
	"updated_at": "TIMESTAMP",
}


# Best-effort lightweight migrations (SQLite-friendly)
def ensure_schema(bind=None) -> None:
	bind = bind or engine
	try:
		inspector = inspect(bind)
		tables = set(inspector.get_table_names())
	except Exception:
		logger.warning("schema inspection failed; skipping migrations", exc_info=True)
		return
	if "survey_results" not in tables:
		return
	cols = {c["name"] for c in inspector.get_columns("survey_results")}
	missing = [(name, ddl) for name, ddl in _LATER_COLUMNS.items() if name not in cols]
	if not missing:
		return
	with bind.begin() as conn:
		for name, ddl in missing:
			logger.info("adding column survey_results.%s", name)
			conn.exec_driver_sql(f"ALTER TABLE survey_results ADD COLUMN {name} {ddl}")
