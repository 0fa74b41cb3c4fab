from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./ipam.db"
    api_v1_prefix: str = "/api/v1"
    allow_anonymous_hostnames: bool = True
    sqlite_busy_timeout: float = 30.0  # seconds a writer waits for the database lock
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
