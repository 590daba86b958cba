# hrd_survey/core/config.py
from __future__ import annotations
from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]  # repo root
ENV_FILE = ROOT_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # App
    APP_NAME: str = "HRD Survey API"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # JWT (issued by the external identity provider)
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60

    # CORS: CORS_ORIGINS=https://survey.example.com,https://admin.example.com
    CORS_ORIGINS: str = ""

    # DB URLs (either one is accepted)
    DATABASE_URL: str | None = None
    SQLALCHEMY_DATABASE_URI: str | None = None

    # Gemini
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 60.0
    GEMINI_TEMPERATURE: float = 0.7
    GEMINI_MAX_OUTPUT_TOKENS: int = 4096
    AI_GENERATION_RETRIES: int = 3

    # Public answer link: {PUBLIC_SURVEY_BASE_URL}/{code}
    PUBLIC_SURVEY_BASE_URL: str = "http://localhost:3000/s"

    @property
    def cors_list(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def db_url(self) -> str:
        """
        Unified SQLAlchemy URL. Accepts DATABASE_URL or SQLALCHEMY_DATABASE_URI.
        Forces sslmode=require for Supabase hosts when missing.
        """
        url = (self.DATABASE_URL or self.SQLALCHEMY_DATABASE_URI or "").strip()
        if not url:
            raise ValueError("Set DATABASE_URL or SQLALCHEMY_DATABASE_URI in the environment.")
        if ("supabase.co" in url or "supabase.com" in url) and "sslmode=" not in url:
            sep = "&" if "?" in url else "?"
            url = f"{url}{sep}sslmode=require"
        return url

    @property
    def ai_configured(self) -> bool:
        return bool((self.GEMINI_API_KEY or "").strip())


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
