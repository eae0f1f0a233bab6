from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from messaging.sms import SMS_SEND_URL, USER_INFO_URL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    LOG_LEVEL: str = Field(default="INFO")

    # Tigron API (basic auth)
    TIGRON_USERNAME: str = Field(default="")
    TIGRON_PASSWORD: str = Field(default="")
    TIGRON_SMS_URL: str = Field(default=SMS_SEND_URL)
    TIGRON_USER_INFO_URL: str = Field(default=USER_INFO_URL)

    # Default source number, format +xx.xxxxxxxxx
    SMS_FROM_NUMBER: str = Field(default="")


settings = Settings()
