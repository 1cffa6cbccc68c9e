from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./data/recipes.db"

    # AI
    ai_mode: str = "mock"  # "mock" or "gemini"
    gemini_api_key: Optional[str] = None
    gemini_text_model: str = "gemini-2.5-flash"

    # Recipe source (Mealie-compatible API)
    recipe_source_url: str = "http://localhost:9925"
    recipe_source_api_key: Optional[str] = None
    recipe_source_timeout: float = 20.0

    # Generation is the expensive call, keep it behind its own limit
    generation_rate_limit: str = "10/minute"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost",
        "http://127.0.0.1",
    ]


settings = Settings()
