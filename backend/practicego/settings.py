from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="x-ai/grok-4-fast:free", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="PracticeGo", validation_alias="OPENROUTER_TITLE")

	# Auth: one login credential, checked against the values below
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	app_username: str = Field(default="student", validation_alias="APP_USERNAME")
	app_password: str = Field(default="practicego", validation_alias="APP_PASSWORD")

	# Storage
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	progress_storage_key: str = Field(default="practicego_user_progress", validation_alias="PROGRESS_STORAGE_KEY")
	lessons_storage_key: str = Field(default="practicego_custom_lessons", validation_alias="LESSONS_STORAGE_KEY")

	# Auth sessions idle for longer than this are purged (0 disables)
	session_retention_days: int = Field(default=7, validation_alias="SESSION_RETENTION_DAYS")
	# Chat sessions live in process memory; idle ones are dropped by the daily cleanup
	chat_idle_hours: int = Field(default=24, validation_alias="CHAT_IDLE_HOURS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
