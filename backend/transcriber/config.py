import os
from dataclasses import dataclass, field


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./data.db"
    pool_size: int = 50
    max_overflow: int = 100
    pool_timeout: int = 30
    pool_recycle: int = 1800
    google_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash-exp"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    # fixed tag, the provider response carries no language information
    default_language: str = "pt"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    poll_interval: float = 3.0
    poll_timeout: float = 600.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./data.db"),
            pool_size=int(os.getenv("DB_POOL_SIZE", "50")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "100")),
            pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
            pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
            google_api_key=os.getenv("GOOGLE_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp"),
            gemini_base_url=os.getenv(
                "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
            ),
            default_language=os.getenv("DEFAULT_LANGUAGE", "pt"),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
            poll_interval=float(os.getenv("POLL_INTERVAL_SECONDS", "3.0")),
            poll_timeout=float(os.getenv("POLL_TIMEOUT_SECONDS", "600.0")),
        )
