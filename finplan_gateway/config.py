"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./finplan.db"

    # External Services
    portfolio_api_base: str = "http://localhost:8001"

    # Service
    service_name: str = "finplan-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Strategy engine
    recommendation_ttl_days: int = 30
    analyzer_max_workers: int = 8


settings = Settings()
