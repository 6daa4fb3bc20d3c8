from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "Masjid Directory"
    VERSION: str = "0.2.0"
    BRIEF_DESCRIPTION: str = "Directory of local masajid with prayer times, distance sorting and owner/admin management."

    ENV: str = Field("development", description="Application environment (e.g., production, development)")
    LOG_LEVEL: Optional[str] = Field(None, description="Root log level; defaults to INFO in development and WARNING elsewhere")

    # --- External services ---
    GEOCODE_API_KEY: str = Field("", description="API key for the geocode.maps.co search endpoint")
    GEOCODE_URL: str = Field("https://geocode.maps.co/search", description="Forward geocoding endpoint")
    PRAYER_TIMES_URL: str = Field("https://api.aladhan.com/v1/timings", description="Daily prayer timings endpoint")
    IP_GEOLOCATION_URL: str = Field("https://ipapi.co/json/", description="IP based position lookup used by non-browser clients")
    HTTP_TIMEOUT: float = Field(10.0, description="Timeout in seconds for outbound HTTP calls")

    # --- Auth ---
    JWT_SECRET: str = Field("your-default-jwt-secret-change-this-in-production", description="HMAC secret for access tokens")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_DAYS: int = 7

    # --- Storage ---
    ENABLE_REDIS: bool = Field(False, description="Persist documents in Redis instead of process memory")
    REDIS_URL: Optional[str] = Field(None, description="Redis URL for the document store")

    # --- Web ---
    CORS_ORIGINS: List[str] = Field(default_factory=list, description="Origins allowed to call the API from a browser")

    # --- Client ---
    API_BASE_URL: str = Field("http://localhost:8000/api", description="Base URL used by the API client and scripts")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
