# backend/config/settings.py
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.split(",") if x.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./grocery.db"
    sql_echo: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # אימות
    auth_secret: str = "change-me"
    auth_token_ttl_hours: int = 24

    # מדיניות הזמנות
    require_serving_option: bool = False
    default_completion_days: int = 3
    default_completion_hour: int = 17
    admin_orders_page_size: int = 15

    # Cloudinary (אופציונלי)
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""

    @property
    def has_cloudinary(self) -> bool:
        return all([self.cloudinary_cloud_name, self.cloudinary_api_key, self.cloudinary_api_secret])


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "").strip() or "sqlite:///./grocery.db",
        sql_echo=_env_bool("SQL_ECHO"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        cors_origins=_env_list("CORS_ORIGINS", "*"),
        auth_secret=os.getenv("AUTH_SECRET", "change-me"),
        auth_token_ttl_hours=_env_int("AUTH_TOKEN_TTL_HOURS", 24),
        require_serving_option=_env_bool("REQUIRE_SERVING_OPTION"),
        default_completion_days=_env_int("DEFAULT_COMPLETION_DAYS", 3),
        default_completion_hour=_env_int("DEFAULT_COMPLETION_HOUR", 17),
        admin_orders_page_size=_env_int("ADMIN_ORDERS_PAGE_SIZE", 15),
        cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME", "").strip(),
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY", "").strip(),
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET", "").strip(),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
