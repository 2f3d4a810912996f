from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PLACEHOLDER_IMAGE = "https://picsum.photos/500/500?blur=4"


class Settings(BaseSettings):
    """Runtime configuration for the ROOTS worker process."""

    model_config = SettingsConfigDict(
        env_prefix="ROOTS_",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ROOTS_API_KEY", "GEMINI_API_KEY", "API_KEY", "api_key"),
        description="API key for the Gemini endpoint.",
    )
    analysis_model_id: str = Field(
        default="gemini-2.5-flash",
        max_length=128,
        description="Model used for image/audio analysis and meditations.",
    )
    creative_model_id: str = Field(
        default="gemini-3-pro-preview",
        max_length=128,
        description="Model used for chat, stories and video plans.",
    )
    image_model_id: str = Field(default="gemini-2.5-flash-image", max_length=128)
    speech_model_id: str = Field(default="gemini-2.5-flash-preview-tts", max_length=128)
    speech_voice: str = Field(
        default="Fenrir",
        max_length=64,
        description="Prebuilt voice used for narration.",
    )
    speech_sample_rate: int = Field(
        default=24_000,
        ge=8_000,
        le=192_000,
        description="Sample rate of the synthesised PCM16 payload.",
    )
    speech_channels: int = Field(default=1, ge=1, le=8)
    playback_gain: float = Field(
        default=1.0,
        ge=0.0,
        le=4.0,
        description="Linear gain applied before the output device.",
    )
    image_aspect_ratio: str = Field(default="1:1", max_length=8)
    placeholder_image_url: str = Field(default=DEFAULT_PLACEHOLDER_IMAGE, max_length=512)
    request_timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Optional ceiling for each remote call; unset waits indefinitely.",
    )

    @model_validator(mode="after")
    def _normalise_api_key(self) -> "Settings":
        if self.api_key is not None and not self.api_key.strip():
            self.api_key = None
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
