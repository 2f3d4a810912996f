"""Multi-scene video production plans."""

from __future__ import annotations

from typing import Optional, Union

from ..app.models import VideoPlanResult
from ..app.settings import Settings
from .codec import parse_data_url
from .generator import PROFILES, RequestKind, SchemaConstrainedGenerator
from .types import GenerationRequest, Part

ReferenceImage = Union[Part, str]


class VideoPlanGenerator:
    def __init__(self, settings: Settings, generator: SchemaConstrainedGenerator) -> None:
        self._settings = settings
        self._generator = generator

    @staticmethod
    def build_parts(topic: str, reference_image: Optional[ReferenceImage] = None) -> GenerationRequest:
        """Text prompt, preceded by the reference image when one is given.

        ``reference_image`` may be a binary part or a data URL.
        """

        attachments = []
        if reference_image is not None:
            if isinstance(reference_image, str):
                data, mime_type = parse_data_url(reference_image)
                reference_image = Part.from_bytes(data, mime_type)
            if not reference_image.is_binary:
                raise ValueError("reference image must be a binary part")
            attachments.append(reference_image)
        return PROFILES[RequestKind.VIDEO_PLAN].build_parts(topic=topic, attachments=attachments)

    async def plan(
        self,
        topic: str,
        reference_image: Optional[ReferenceImage] = None,
    ) -> VideoPlanResult:
        # scene numbers are passed through as returned, gaps and duplicates included
        profile = PROFILES[RequestKind.VIDEO_PLAN]
        return await self._generator.generate(
            self.build_parts(topic, reference_image),
            VideoPlanResult,
            profile.system_context,
            model=getattr(self._settings, profile.model_setting),
        )
