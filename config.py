from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://postgres:postgres@db:5432/bookshelf"
    SECRET_KEY: str = "change_this_secret"
    ALGORITHM: str = "HS256"
    SESSION_TOKEN_EXPIRE_DAYS: int = 7
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    COOKIE_SECURE: bool = False
    FRONTEND_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Used to build links in outgoing mail
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # Email (Resend)
    RESEND_API_KEY: Optional[str] = None
    RESEND_FROM: Optional[str] = None

    COVER_IMAGE_BASE_PATH: str = "public/images"

    @property
    def allow_origins(self) -> List[str]:
        return [origin.strip() for origin in self.FRONTEND_ORIGINS.split(",") if origin.strip()]

    @property
    def session_max_age(self) -> int:
        return self.SESSION_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
