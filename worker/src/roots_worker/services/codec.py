"""Base64, data URL and PCM16 conversions."""

from __future__ import annotations

import base64
import binascii
from typing import Tuple

import numpy as np

from .exceptions import EncodingError, MalformedAudioError
from .types import PlayableAudioBuffer

PCM16_SCALE = 32768.0
DATA_URL_PREFIX = "data:"


def decode_base64(text: str) -> bytes:
    """Strict standard-alphabet base64 decode, padding included."""

    try:
        return binascii.a2b_base64(text.encode("ascii"), strict_mode=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError(f"malformed base64 payload: {exc}") from exc


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def encode_data_url(data: bytes, mime_type: str) -> str:
    return f"{DATA_URL_PREFIX}{mime_type};base64,{encode_base64(data)}"


def parse_data_url(url: str) -> Tuple[bytes, str]:
    """Split ``data:<mime>;base64,<payload>`` into bytes and mime type."""

    if not url.startswith(DATA_URL_PREFIX) or "," not in url:
        raise EncodingError("expected a data URL of the form data:<mime>;base64,<payload>")
    header, payload = url[len(DATA_URL_PREFIX):].split(",", 1)
    mime_type, _, encoding = header.partition(";")
    if encoding != "base64" or not mime_type:
        raise EncodingError(f"unsupported data URL header: {header!r}")
    return decode_base64(payload), mime_type


def pcm16_to_float_buffer(
    data: bytes,
    sample_rate: int,
    channels: int,
) -> PlayableAudioBuffer:
    """Reinterpret little-endian int16 frames as normalised float channels.

    Samples are de-interleaved by ``sample[i * channels + c]`` and scaled by
    1/32768. A trailing partial frame is dropped.
    """

    if channels < 1:
        raise MalformedAudioError(f"channel count must be >= 1, got {channels}")
    if sample_rate <= 0:
        raise MalformedAudioError(f"sample rate must be positive, got {sample_rate}")
    if len(data) == 0:
        raise MalformedAudioError("PCM payload is empty")

    frame_bytes = 2 * channels
    usable = len(data) - (len(data) % frame_bytes)
    values = np.frombuffer(data[:usable], dtype="<i2")
    frames = values.reshape(-1, channels)
    samples = (frames.T.astype(np.float32)) / PCM16_SCALE
    return PlayableAudioBuffer(samples=samples, sample_rate=sample_rate)
