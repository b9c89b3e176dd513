from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rollbar_reporter.models.schemas import ReportTemplate
from rollbar_reporter.observability.logging import LogLevel

DEFAULT_ENDPOINT = "https://api.rollbar.com/api/1/item/"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    endpoint: str = Field(default=DEFAULT_ENDPOINT, alias="ROLLBAR_ENDPOINT")
    access_token: str = Field(default="", alias="ROLLBAR_ACCESS_TOKEN")
    environment: str = Field(default="development", alias="ROLLBAR_ENVIRONMENT")
    code_version: str | None = Field(default=None, alias="ROLLBAR_CODE_VERSION")
    platform: str | None = Field(default=None, alias="ROLLBAR_PLATFORM")
    framework: str | None = Field(default=None, alias="ROLLBAR_FRAMEWORK")
    timeout_seconds: float = Field(default=10.0, alias="ROLLBAR_TIMEOUT_SECONDS")
    log_level: LogLevel = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    def report_template(self) -> ReportTemplate:
        return ReportTemplate(
            environment=self.environment,
            code_version=self.code_version,
            platform=self.platform,
            framework=self.framework,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
