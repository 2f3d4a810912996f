"""Shared service-layer exceptions."""

from __future__ import annotations

from typing import Optional


class GenerationError(Exception):
    """Expected failure while talking to the generative model."""


class NetworkError(GenerationError):
    """Transport or API level failure reaching the remote model."""


class EmptyResponseError(GenerationError):
    """The model answered without the text payload we asked for."""


class SchemaViolationError(GenerationError):
    """The model answered with text that does not match the declared schema."""

    def __init__(self, message: str, raw_text: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class PlaybackError(GenerationError):
    """Speech could not be synthesised or handed to the output device."""


class NoAudioDataError(PlaybackError):
    """Speech request succeeded but carried no inline audio part."""


class AudioCodecError(ValueError):
    """Base class for codec failures."""


class EncodingError(AudioCodecError):
    """Malformed base64 text or data URL."""


class MalformedAudioError(AudioCodecError):
    """PCM payload cannot be shaped into a playable buffer."""
