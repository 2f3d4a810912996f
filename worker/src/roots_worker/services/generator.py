"""Schema-constrained single-turn generation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Type, TypeVar, get_args, get_origin

from loguru import logger
from pydantic import BaseModel, ValidationError

from ..app.models import (
    AudioAnalysisResult,
    MeditationResult,
    ResultRecord,
    StoryDraft,
    VideoPlanResult,
    VisionResult,
)
from ..app.settings import Settings
from . import prompts
from .client import GeminiClient
from .exceptions import EmptyResponseError, SchemaViolationError
from .types import GenerationRequest, Part, build_request

RecordT = TypeVar("RecordT", bound=ResultRecord)

_SCALAR_TYPES = {
    str: "STRING",
    int: "INTEGER",
    float: "NUMBER",
    bool: "BOOLEAN",
}


class RequestKind(str, Enum):
    VISION = "vision"
    AUDIO = "audio"
    STORY = "story"
    VIDEO_PLAN = "video_plan"
    MEDITATION = "meditation"


@dataclass(frozen=True)
class GenerationProfile:
    """Fixed data for one use case: which model, persona, prompt and schema."""

    kind: RequestKind
    model_setting: str
    system_context: str
    instruction: str
    schema: Type[ResultRecord]

    def build_parts(
        self,
        *,
        topic: Optional[str] = None,
        attachments: Sequence[Part] = (),
    ) -> GenerationRequest:
        text = self.instruction.format(topic=topic or "")
        return build_request([*attachments, Part.from_text(text)])


PROFILES: Dict[RequestKind, GenerationProfile] = {
    RequestKind.VISION: GenerationProfile(
        kind=RequestKind.VISION,
        model_setting="analysis_model_id",
        system_context=prompts.SYSTEM_INSTRUCTION,
        instruction=prompts.VISION_PROMPT,
        schema=VisionResult,
    ),
    RequestKind.AUDIO: GenerationProfile(
        kind=RequestKind.AUDIO,
        model_setting="analysis_model_id",
        system_context=prompts.SYSTEM_INSTRUCTION,
        instruction=prompts.AUDIO_PROMPT,
        schema=AudioAnalysisResult,
    ),
    RequestKind.STORY: GenerationProfile(
        kind=RequestKind.STORY,
        model_setting="creative_model_id",
        system_context=prompts.STORYTELLER_INSTRUCTION,
        instruction=prompts.STORY_PROMPT,
        schema=StoryDraft,
    ),
    RequestKind.VIDEO_PLAN: GenerationProfile(
        kind=RequestKind.VIDEO_PLAN,
        model_setting="creative_model_id",
        system_context=prompts.DIRECTOR_INSTRUCTION,
        instruction=prompts.VIDEO_PLAN_PROMPT,
        schema=VideoPlanResult,
    ),
    RequestKind.MEDITATION: GenerationProfile(
        kind=RequestKind.MEDITATION,
        model_setting="analysis_model_id",
        system_context=prompts.MEDITATION_GUIDE_INSTRUCTION,
        instruction=prompts.MEDITATION_PROMPT,
        schema=MeditationResult,
    ),
}


def response_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Describe a record as the OBJECT schema the endpoint understands.

    Field keys use the JSON aliases; required-ness follows the pydantic field.
    """

    properties: Dict[str, Any] = {}
    required: list[str] = []
    for name, field in model.model_fields.items():
        key = field.alias or name
        properties[key] = _annotation_schema(field.annotation, field.description)
        if field.is_required():
            required.append(key)
    return {"type": "OBJECT", "properties": properties, "required": required}


def _annotation_schema(annotation: Any, description: Optional[str]) -> Dict[str, Any]:
    if get_origin(annotation) is list:
        (item_type,) = get_args(annotation)
        schema: Dict[str, Any] = {
            "type": "ARRAY",
            "items": _annotation_schema(item_type, None),
        }
    elif isinstance(annotation, type) and issubclass(annotation, BaseModel):
        schema = response_schema(annotation)
    elif annotation in _SCALAR_TYPES:
        schema = {"type": _SCALAR_TYPES[annotation]}
    else:
        raise TypeError(f"unsupported schema annotation: {annotation!r}")
    if description:
        schema["description"] = description
    return schema


def parse_record(text: Optional[str], schema: Type[RecordT]) -> RecordT:
    if not text or not text.strip():
        raise EmptyResponseError(f"model returned no text for {schema.__name__}")
    try:
        return schema.model_validate_json(text, strict=True)
    except ValidationError as exc:
        raise SchemaViolationError(
            f"response does not match {schema.__name__}: {exc.error_count()} error(s)",
            raw_text=text,
        ) from exc


class SchemaConstrainedGenerator:
    """Issues one request per call and validates the JSON reply."""

    def __init__(self, settings: Settings, client: GeminiClient) -> None:
        self._settings = settings
        self._client = client

    async def generate(
        self,
        parts: Sequence[Part],
        schema: Type[RecordT],
        system_context: str,
        *,
        model: Optional[str] = None,
    ) -> RecordT:
        request = build_request(parts)
        model_id = model or self._settings.analysis_model_id
        logger.debug(
            "Requesting {} from {} ({} part(s))",
            schema.__name__,
            model_id,
            len(request),
        )
        text = await self._client.generate_json(
            model=model_id,
            parts=request,
            system_instruction=system_context,
            schema=response_schema(schema),
        )
        return parse_record(text, schema)

    async def run(
        self,
        kind: RequestKind,
        *,
        topic: Optional[str] = None,
        attachments: Sequence[Part] = (),
    ) -> ResultRecord:
        profile = PROFILES[kind]
        parts = profile.build_parts(topic=topic, attachments=attachments)
        return await self.generate(
            parts,
            profile.schema,
            profile.system_context,
            model=getattr(self._settings, profile.model_setting),
        )
