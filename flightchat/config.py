# flightchat/config.py
from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # App
    APP_ENV: Literal["dev", "prod", "staging"] = "dev"
    LOG_LEVEL: Optional[str] = None  # defaults to DEBUG outside prod, INFO in prod
    CORS_ORIGINS: List[str] = ["*"]

    # Ports
    GATEWAY_PORT: int = 8787
    FLIGHT_SERVER_PORT: int = 8700

    # LLM provider, selected once at startup
    LLM_PROVIDER: str = "openai"  # or "anthropic"
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 800

    # OpenAI
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"

    # Anthropic
    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_MODEL: str = "claude-3-5-sonnet-20241022"

    # Flight service (gateway -> flight server)
    FLIGHT_SERVER_URL: str = "http://localhost:8700"

    # Amadeus (flight server -> Amadeus)
    AMADEUS_CLIENT_ID: Optional[str] = None
    AMADEUS_CLIENT_SECRET: Optional[str] = None
    AMADEUS_ENV: str = "sandbox"  # or "production"
    AMADEUS_MAX_OFFERS: int = 20

    # read .env and ignore any extra keys
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def log_level(self) -> str:
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        return "INFO" if self.APP_ENV == "prod" else "DEBUG"

settings = Settings()
