from pydantic_settings import BaseSettings
import os
from pathlib import Path

# Try to load .env file explicitly before creating Settings
try:
    from dotenv import load_dotenv
    import logging
    _logger = logging.getLogger(__name__)

    # Look for .env in api directory (parent of reporover directory)
    api_dir = Path(__file__).parent.parent.parent
    env_path = api_dir / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)
        _logger.info(f"Loaded .env file from: {env_path}")
    else:
        current_env = Path(".env")
        if current_env.exists():
            load_dotenv(current_env, override=False)
            _logger.info(f"Loaded .env file from: {current_env.absolute()}")
except Exception as e:
    import logging
    _logger = logging.getLogger(__name__)
    _logger.warning(f"Error loading .env file: {e}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = "production"

    # Database - hosting platforms provide DATABASE_URL (uppercase)
    database_url: str = ""

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]

    # Google Generative AI (Gemini) API
    google_gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # GitHub REST API
    github_token: str = ""
    github_api_url: str = "https://api.github.com"

    # Outbound HTTP
    http_timeout_seconds: float = 15.0
    http_max_retries: int = 2

    # Auth sessions
    session_ttl_hours: int = 24 * 7

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    def __init__(self, **kwargs):
        if not kwargs.get("database_url"):
            kwargs["database_url"] = os.getenv("DATABASE_URL", "")
        # The Gemini key is published under two names depending on the deployment
        if not kwargs.get("google_gemini_api_key"):
            kwargs["google_gemini_api_key"] = (
                os.getenv("GOOGLE_GEMINI_API_KEY") or os.getenv("GEMINI_API_KEY", "")
            )
        if not kwargs.get("github_token"):
            kwargs["github_token"] = os.getenv("GITHUB_TOKEN", "")
        super().__init__(**kwargs)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")


# Create settings instance
settings = Settings()

# Validate required DATABASE_URL
if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is required")
