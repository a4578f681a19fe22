"""
Application configuration.
All sensitive values loaded from environment variables.
"""
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    APP_NAME: str = "caltrack"

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Estimator Provider Configuration
    # Supported providers: gemini, openai, deepseek, claude
    AI_PROVIDER: str = "gemini"
    AI_API_KEY: str = ""
    AI_BASE_URL: Optional[str] = None  # Custom base URL if needed
    AI_MODEL: Optional[str] = None  # Custom model name
    AI_TEMPERATURE: float = 0.2
    AI_TIMEOUT: float = 30.0  # Seconds before a remote estimate is abandoned

    # Provider-specific API keys (optional, falls back to AI_API_KEY)
    GEMINI_API_KEY: Optional[str] = None
    GOOGLE_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    CLAUDE_API_KEY: Optional[str] = None
    DEEPSEEK_API_KEY: Optional[str] = None

    # Workout history storage
    # Supported backends: file, database, memory
    STORAGE_BACKEND: str = "file"
    STORAGE_DIR: str = ".caltrack"
    DATABASE_URL: str = "sqlite:///.caltrack/caltrack.db"
    HISTORY_KEY: str = "workouts"

    # strftime pattern for dates in CSV exports, "%x" is the locale's date
    EXPORT_DATE_FORMAT: str = "%x"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or console

    # AI Debug Logging - enables prompt/response content logging
    # WARNING: Set to True only for debugging
    AI_DEBUG_LOG: bool = False
    # Maximum length of message content to log (0 = unlimited)
    AI_DEBUG_LOG_MAX_LENGTH: int = 2000

    def get_api_key(self, provider: str) -> str:
        """Get API key for a specific provider."""
        provider_keys = {
            "gemini": self.GEMINI_API_KEY or self.GOOGLE_API_KEY,
            "openai": self.OPENAI_API_KEY,
            "claude": self.CLAUDE_API_KEY,
            "deepseek": self.DEEPSEEK_API_KEY,
        }
        # Return provider-specific key if set, otherwise fall back to AI_API_KEY
        return provider_keys.get(provider.lower()) or self.AI_API_KEY

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
