from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    strava_api_url: str = "https://www.strava.com/api/v3"
    strava_access_token: str = ""
    strava_per_page: int = 200  # Strava caps per_page at 200
    strava_max_pages: int = 10
    strava_timeout_seconds: float = 10.0
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
