"""Application settings loaded from config.yml and environment variables."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_FILE = Path("config.yml")

DEFAULT_SOURCES = ["vidsrc_to", "vidsrc_pro", "superembed", "vidking"]


class AppConfig(BaseModel):
    name: str = "StreamVerse"
    version: str = "0.1.0"
    environment: str = "development"
    debug: bool = True
    hostname: str = "localhost"
    allowed_origins: list[str] = Field(default_factory=list)


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8484


class LoggingConfig(BaseModel):
    level: Literal["critical", "error", "warning", "info", "debug"] = "info"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.lower()
            if value == "warn":
                return "warning"
        return value


class LLMConfig(BaseModel):
    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = "claude-3-5-sonnet-20241022"
    api_key: SecretStr | None = None


class TMDBConfig(BaseModel):
    api_key: SecretStr | None = None
    base_url: str = "https://api.themoviedb.org/3"
    image_base_url: str = "https://image.tmdb.org/t/p/original"


class PlaybackConfig(BaseModel):
    max_sessions: int = Field(default=500, gt=0)
    ttl_seconds: float = Field(default=3600, gt=0)


class ExtractionConfig(BaseModel):
    ffmpeg_location: str | None = None


class Settings(BaseSettings):
    """Top-level settings. config.yml values are overridden by env vars (e.g. TMDB__API_KEY)."""

    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    tmdb: TMDBConfig = Field(default_factory=TMDBConfig)
    sources: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES))
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # CONFIG_FILE is looked up at call time so tests can point it elsewhere
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=CONFIG_FILE),
        )


# Global settings instance
settings = Settings()
