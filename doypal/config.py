import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file with explicit UTF-8 encoding
load_dotenv(encoding="utf-8")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return tuple(default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./doypal.db"

    # Week/month boundaries of the points summary are computed in this zone.
    timezone: str = "UTC"
    use_points_view: bool = False

    ai_enabled: bool = False
    openai_api_key: str | None = None
    openai_embedding_model: str = "text-embedding-3-large"
    openai_chat_model: str = "gpt-4o"

    # local | s3
    storage_backend: str = "local"
    reward_images_bucket: str = "reward-images"
    reward_images_dir: str = "./media"
    reward_images_public_base_url: str = "/media"
    s3_endpoint_url: str | None = None
    s3_region: str | None = None

    cors_origins: tuple[str, ...] = (
        "http://localhost:3000",
        "https://localhost:3000",
        "http://127.0.0.1:3000",
        "https://127.0.0.1:3000",
    )
    log_level: str = "INFO"


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL") or defaults.database_url,
        timezone=os.getenv("DOYPAL_TIMEZONE") or defaults.timezone,
        use_points_view=_env_bool("DOYPAL_USE_POINTS_VIEW", defaults.use_points_view),
        ai_enabled=_env_bool("DOYPAL_AI_ENABLED", defaults.ai_enabled),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_embedding_model=os.getenv("OPENAI_EMBEDDING_MODEL") or defaults.openai_embedding_model,
        openai_chat_model=os.getenv("OPENAI_CHAT_MODEL") or defaults.openai_chat_model,
        storage_backend=(os.getenv("REWARD_IMAGES_BACKEND") or defaults.storage_backend).lower(),
        reward_images_bucket=os.getenv("REWARD_IMAGES_BUCKET") or defaults.reward_images_bucket,
        reward_images_dir=os.getenv("REWARD_IMAGES_DIR") or defaults.reward_images_dir,
        reward_images_public_base_url=(
            os.getenv("REWARD_IMAGES_PUBLIC_BASE_URL") or defaults.reward_images_public_base_url
        ),
        s3_endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
        s3_region=os.getenv("S3_REGION") or None,
        cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
        log_level=(os.getenv("LOG_LEVEL") or defaults.log_level).upper(),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
