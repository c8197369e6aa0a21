from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-pro", validation_alias="GEMINI_MODEL")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# Generation parameters shared by every report request
	llm_max_output_tokens: int = Field(default=8000, validation_alias="LLM_MAX_OUTPUT_TOKENS")
	llm_temperature: float = Field(default=0.7, validation_alias="LLM_TEMPERATURE")
	llm_timeout_seconds: float = Field(default=120.0, validation_alias="LLM_TIMEOUT_SECONDS")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="anthropic/claude-sonnet-4", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Brand Check", validation_alias="OPENROUTER_TITLE")

	# Report shape served by this deployment: "v1" (classic) or "v2" (priority-annotated)
	report_schema_version: Literal["v1", "v2"] = Field(default="v2", validation_alias="REPORT_SCHEMA_VERSION")

	# Notification mail (Resend HTTP API)
	resend_api_key: str | None = Field(default=None, validation_alias="RESEND_API_KEY")
	resend_base_url: str = Field(default="https://api.resend.com/emails", validation_alias="RESEND_BASE_URL")
	notification_from: str = Field(default="delivered@resend.dev", validation_alias="NOTIFICATION_FROM")
	admin_email: str | None = Field(default=None, validation_alias="ADMIN_EMAIL")
	public_base_url: str = Field(default="http://localhost:8000", validation_alias="PUBLIC_BASE_URL")

	# Admin password gate
	admin_password: str | None = Field(default=None, validation_alias="ADMIN_PASSWORD")
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=480, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
