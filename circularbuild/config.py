# circularbuild/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    PROJECT_NAME: str = "CircularBuild API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Marketplace for surplus construction materials"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REALTIME_ENABLED: bool = True

    MAPBOX_TOKEN: str | None = None
    GEOCODER_TIMEOUT_SECONDS: float = 10.0

    SMTP_HOST: str | None = None
    SMTP_PORT: int | None = None
    SMTP_USER: str | None = None
    SMTP_PASS: str | None = None
    SMTP_FROM: str | None = None
    SITE_URL: str = "https://www.circularbuild.org"

    MAINTENANCE_KEY: str | None = None
    DEFAULT_SEARCH_RADIUS_MILES: float = 25.0

    model_config = SettingsConfigDict(env_file=".env", extra="allow")
