from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"

    LOAD_DELAY_SECONDS: float = 0.8

    LINK_BASE_URL: str = "https://chat.local"
    ATTACHMENT_BASE_URL: str = "https://chat.local/files"

    SUPPORT_OPERATOR_HOURS_START: int = 8
    SUPPORT_OPERATOR_HOURS_END: int = 20
    SUPPORT_ASSISTANT_NAME: str = "iFlows AI Assistant"
    SUPPORT_GREETING: str = "Bună! Sunt Asistentul AI iFlows. Cu ce vă pot ajuta azi?"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
