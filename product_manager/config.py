from typing import List, Optional

from pydantic_settings import BaseSettings


class ConfigurationError(RuntimeError):
    """Raised at startup when a required setting is missing."""
    pass


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]

    # single key-value slot holding the whole product collection
    STORAGE_KEY: str = "digital-products"
    PLACEHOLDER_IMAGE_URL: str = "https://picsum.photos/seed/{id}/400/300"

    OPENAI_API_KEY: Optional[str] = None
    AI_PROVIDER: str = "openai"  # openai | mock
    DESCRIPTION_MODEL: str = "gpt-4o-mini"
    STRUCTURED_MODEL: str = "gpt-4o"
    AI_TIMEOUT_SECONDS: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def require_api_key(self) -> str:
        if not self.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY environment variable not set")
        return self.OPENAI_API_KEY


settings = Settings()
