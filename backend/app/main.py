import logging

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from .db import Base, engine, ensure_schema
from .settings import settings
from .routers import health
from .routers import auth
from .routers import survey
from .routers import analyze
from .routers import results
from .routers import admin

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
	datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Brand Check API")
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(survey.router)
app.include_router(analyze.router)
app.include_router(results.router)
app.include_router(admin.router)


@app.get("/", include_in_schema=False)
async def redirect_root_to_docs():
	return RedirectResponse(url="/docs")

@app.get("/info")
def root():
	return {
		"status": "ok",
		"gemini_configured": bool(settings.gemini_api_key),
		"notification_configured": bool(settings.resend_api_key and settings.admin_email),
		"report_schema_version": settings.report_schema_version,
	}

@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	# Add columns introduced after the first survey version
	ensure_schema()
	logger.info("Brand Check API started (report schema %s)", settings.report_schema_version)
