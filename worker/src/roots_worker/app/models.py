from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..services.types import ChatRole


class ResultRecord(BaseModel):
    """Immutable record parsed from a schema-constrained model reply."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class VisionResult(ResultRecord):
    title: str
    explanation: str
    symbolism: str
    history: str


class AudioAnalysisResult(ResultRecord):
    title: str
    meaning: str
    origin: str


class StoryDraft(ResultRecord):
    story: str
    image_prompt: str


class StoryResult(ResultRecord):
    title: str
    story: str
    image_url: Optional[str] = None


class VideoScene(ResultRecord):
    scene_number: int
    visual: str
    audio: str


class VideoPlanResult(ResultRecord):
    title: str
    script: str
    visual_style: str
    voiceover_dialogues: list[str]
    scenes: list[VideoScene]


class MeditationResult(ResultRecord):
    title: str
    intro: str = Field(..., description="Breathing and grounding instructions")
    visualization: str = Field(..., description="The main visualization journey")
    reflection: str = Field(..., description="A final thought or mantra")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Attachment(ApiModel):
    data: str = Field(..., min_length=1, description="Base64 encoded payload.")
    mime_type: str = Field(..., min_length=3, max_length=128)


class VisionRequest(ApiModel):
    image: Attachment


class AudioRequest(ApiModel):
    audio: Attachment


class ChatTurnPayload(ApiModel):
    role: ChatRole
    text: str


class ChatRequest(ApiModel):
    message: str = Field(..., min_length=1, max_length=4096)
    history: list[ChatTurnPayload] = Field(default_factory=list)


class ChatReply(ApiModel):
    reply: str


class StoryRequest(ApiModel):
    topic: str = Field(default="", max_length=512)


class StoryImageRequest(ApiModel):
    prompt: str = Field(..., min_length=1, max_length=2048)


class StoryImageReply(ApiModel):
    image_url: str


class VideoPlanRequest(ApiModel):
    topic: str = Field(default="", max_length=512)
    reference_image: Optional[str] = Field(
        default=None,
        description="Optional data URL (data:<mime>;base64,<payload>).",
    )


class SpeechRequest(ApiModel):
    text: str = Field(..., min_length=1, max_length=8192)


class SpeechStatus(ApiModel):
    started: bool
    voice: str
