from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Record store
    DATABASE_URL: str = "sqlite:///./eti.db"
    STORE_ENABLED: bool = True

    # Google Gemini API
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    OSINT_SEARCH_GROUNDING: bool = True
    MAX_MATCH_JOBS: int = 5

    # Session tokens
    SECRET_KEY: str = "eti-session-key-change-in-production"
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_MINUTES: int = 480
    ADMIN_ACCESS_CODE: str = "eti-sysadmin-2025"

    # Application
    APP_NAME: str = "ETI Talent Intelligence"
    DEBUG: bool = True
    BACKEND_CORS_ORIGINS: str = (
        "http://localhost:5173,"
        "http://localhost:3000,"
        "http://127.0.0.1:5173,"
        "http://127.0.0.1:3000"
    )


settings = Settings()
