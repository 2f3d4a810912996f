"""Shared service data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class Part:
    """One unit of a generation request: text or a binary attachment."""

    text: Optional[str] = None
    data: Optional[bytes] = None
    mime_type: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.data is None):
            raise ValueError("part must carry exactly one of text or binary data")
        if self.data is not None and not self.mime_type:
            raise ValueError("binary part requires a mime type")

    @classmethod
    def from_text(cls, text: str) -> "Part":
        return cls(text=text)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "Part":
        return cls(data=data, mime_type=mime_type)

    @property
    def is_binary(self) -> bool:
        return self.data is not None


GenerationRequest = Tuple[Part, ...]


def build_request(parts: Sequence[Part]) -> GenerationRequest:
    request = tuple(parts)
    if not request:
        raise ValueError("generation request requires at least one part")
    return request


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class ChatTurn:
    role: ChatRole
    text: str


ChatHistory = Tuple[ChatTurn, ...]


@dataclass(frozen=True)
class InlinePayload:
    """Inline binary returned by the remote model.

    The SDK usually hands back decoded bytes; raw REST payloads arrive as
    base64 text. Both are accepted.
    """

    data: Union[bytes, str]
    mime_type: Optional[str] = None


@dataclass
class PlayableAudioBuffer:
    samples: np.ndarray
    sample_rate: int

    @property
    def channel_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.frame_count / float(self.sample_rate)

    def channel(self, index: int) -> np.ndarray:
        return self.samples[index]

    def interleaved(self) -> np.ndarray:
        """Return samples shaped (frames, channels) for output streams."""

        return np.ascontiguousarray(self.samples.T, dtype=np.float32)
