"""Caller-facing operations and their per-use-case failure policy."""

from __future__ import annotations

from typing import Optional, Sequence, cast

from loguru import logger

from ..app.models import (
    AudioAnalysisResult,
    MeditationResult,
    StoryDraft,
    StoryResult,
    VideoPlanResult,
    VisionResult,
)
from ..app.settings import Settings
from . import prompts
from .chat import ChatOrchestrator
from .client import GeminiClient
from .exceptions import GenerationError
from .generator import RequestKind, SchemaConstrainedGenerator
from .imagery import ImagePipeline
from .speech import SoundDeviceOutput, SpeechPlaybackPipeline, meditation_script
from .types import ChatTurn, Part
from .video import ReferenceImage, VideoPlanGenerator

AUDIO_FALLBACK = AudioAnalysisResult(
    title="Signal Faint 📡",
    meaning="The frequencies were a bit low. Please try closer to the source.",
    origin="Unknown Source",
)


class CoPilotOrchestrator:
    """Wires the pipelines together behind one surface.

    Vision, story, video-plan, meditation and speech failures propagate.
    Audio analysis, chat and image generation degrade to fixed substitutes.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[GeminiClient] = None,
        *,
        output: Optional[SoundDeviceOutput] = None,
    ) -> None:
        self._settings = settings
        client = client if client is not None else GeminiClient(settings)
        self._generator = SchemaConstrainedGenerator(settings, client)
        self._chat = ChatOrchestrator(settings, client)
        self._speech = SpeechPlaybackPipeline(settings, client, output)
        self._images = ImagePipeline(settings, client)
        self._video = VideoPlanGenerator(settings, self._generator)

    @property
    def speech(self) -> SpeechPlaybackPipeline:
        return self._speech

    async def analyze_image(self, image: bytes, mime_type: str) -> VisionResult:
        try:
            result = await self._generator.run(
                RequestKind.VISION,
                attachments=[Part.from_bytes(image, mime_type)],
            )
        except GenerationError as exc:
            logger.error("Vision analysis failed: {}", exc)
            raise
        return cast(VisionResult, result)

    async def analyze_audio(self, audio: bytes, mime_type: str) -> AudioAnalysisResult:
        try:
            result = await self._generator.run(
                RequestKind.AUDIO,
                attachments=[Part.from_bytes(audio, mime_type)],
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Audio analysis failed, returning faint-signal record: {}", exc)
            return AUDIO_FALLBACK
        return cast(AudioAnalysisResult, result)

    async def send_chat_message(self, message: str, history: Sequence[ChatTurn] = ()) -> str:
        return await self._chat.send(message, history)

    async def generate_story(self, topic: str) -> StoryDraft:
        try:
            result = await self._generator.run(RequestKind.STORY, topic=topic)
        except GenerationError as exc:
            logger.error("Story generation failed: {}", exc)
            raise
        return cast(StoryDraft, result)

    async def generate_story_image(self, prompt: str) -> str:
        return await self._images.generate_image(prompt)

    async def create_illustrated_story(self, topic: str) -> StoryResult:
        draft = await self.generate_story(topic)
        image_url = await self.generate_story_image(draft.image_prompt)
        return StoryResult(
            title=topic.strip() or prompts.STORY_DEFAULT_TITLE,
            story=draft.story,
            image_url=image_url,
        )

    async def generate_video_plan(
        self,
        topic: str,
        reference_image: Optional[ReferenceImage] = None,
    ) -> VideoPlanResult:
        try:
            return await self._video.plan(topic, reference_image)
        except GenerationError as exc:
            logger.error("Video plan generation failed: {}", exc)
            raise

    async def generate_meditation(self) -> MeditationResult:
        try:
            result = await self._generator.run(RequestKind.MEDITATION)
        except GenerationError as exc:
            logger.error("Meditation generation failed: {}", exc)
            raise
        return cast(MeditationResult, result)

    async def generate_speech(self, text: str) -> None:
        try:
            await self._speech.speak(text)
        except GenerationError as exc:
            logger.error("Speech playback failed: {}", exc)
            raise

    async def narrate_meditation(self, meditation: MeditationResult) -> None:
        await self.generate_speech(meditation_script(meditation))
