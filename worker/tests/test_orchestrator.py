from __future__ import annotations

import asyncio
import json
from typing import Any, List, Optional, Sequence

import pytest

from roots_worker.app.models import AudioAnalysisResult
from roots_worker.app.settings import Settings
from roots_worker.services.exceptions import (
    EmptyResponseError,
    NetworkError,
    NoAudioDataError,
    SchemaViolationError,
)
from roots_worker.services.orchestrator import AUDIO_FALLBACK, CoPilotOrchestrator
from roots_worker.services.types import ChatTurn, InlinePayload, PlayableAudioBuffer


class DummyGemini:
    """Scripted stand-in for every request shape of the Gemini adapter."""

    def __init__(
        self,
        *,
        json_text: Optional[str] = None,
        images: Sequence[InlinePayload] = (),
        audio: Sequence[InlinePayload] = (),
        reply: Optional[str] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.json_text = json_text
        self.images = list(images)
        self.audio = list(audio)
        self.reply = reply
        self.error = error
        self.calls: List[str] = []

    def _maybe_fail(self, name: str) -> None:
        self.calls.append(name)
        if self.error is not None:
            raise self.error

    async def generate_json(self, **_: Any) -> Optional[str]:
        self._maybe_fail("generate_json")
        return self.json_text

    async def generate_image(self, **_: Any) -> List[InlinePayload]:
        self._maybe_fail("generate_image")
        return self.images

    async def synthesize_speech(self, **_: Any) -> List[InlinePayload]:
        self._maybe_fail("synthesize_speech")
        return self.audio

    async def converse(self, *, turns: Sequence[ChatTurn], **_: Any) -> Optional[str]:
        self._maybe_fail("converse")
        return self.reply


class SilentOutput:
    def __init__(self) -> None:
        self.buffers: List[PlayableAudioBuffer] = []

    def start(self, buffer: PlayableAudioBuffer, gain: float) -> None:
        self.buffers.append(buffer)


def build_copilot(client: DummyGemini, output: Optional[SilentOutput] = None) -> CoPilotOrchestrator:
    return CoPilotOrchestrator(
        Settings(api_key="test-key"),
        client,  # type: ignore[arg-type]
        output=output or SilentOutput(),  # type: ignore[arg-type]
    )


@pytest.mark.asyncio
async def test_audio_analysis_transport_error_yields_exact_fallback() -> None:
    copilot = build_copilot(DummyGemini(error=NetworkError("connection reset")))

    result = await copilot.analyze_audio(b"webm", "audio/webm")

    assert result == AudioAnalysisResult(
        title="Signal Faint 📡",
        meaning="The frequencies were a bit low. Please try closer to the source.",
        origin="Unknown Source",
    )
    assert result is AUDIO_FALLBACK


@pytest.mark.asyncio
async def test_audio_analysis_schema_violation_also_degrades() -> None:
    copilot = build_copilot(DummyGemini(json_text='{"title": "Om"}'))
    assert await copilot.analyze_audio(b"webm", "audio/webm") is AUDIO_FALLBACK


@pytest.mark.asyncio
async def test_audio_analysis_returns_parsed_record() -> None:
    payload = {"title": "Gayatri Mantra", "meaning": "Illumination", "origin": "Rigveda"}
    copilot = build_copilot(DummyGemini(json_text=json.dumps(payload)))

    result = await copilot.analyze_audio(b"webm", "audio/webm")

    assert result.title == "Gayatri Mantra"
    assert result.origin == "Rigveda"


@pytest.mark.asyncio
async def test_audio_analysis_does_not_swallow_cancellation() -> None:
    copilot = build_copilot(DummyGemini(error=asyncio.CancelledError()))
    with pytest.raises(asyncio.CancelledError):
        await copilot.analyze_audio(b"webm", "audio/webm")


@pytest.mark.asyncio
async def test_image_analysis_propagates_failures() -> None:
    copilot = build_copilot(DummyGemini(error=NetworkError("timeout")))
    with pytest.raises(NetworkError):
        await copilot.analyze_image(b"jpg", "image/jpeg")


@pytest.mark.asyncio
async def test_meditation_propagates_schema_violations() -> None:
    copilot = build_copilot(DummyGemini(json_text='{"title": "Calm"}'))
    with pytest.raises(SchemaViolationError):
        await copilot.generate_meditation()


@pytest.mark.asyncio
async def test_chat_soft_fails() -> None:
    copilot = build_copilot(DummyGemini(error=NetworkError("offline")))
    reply = await copilot.send_chat_message("what is karma?")
    assert "glitching" in reply


@pytest.mark.asyncio
async def test_illustrated_story_combines_draft_and_image() -> None:
    draft = {"story": "A fox learned kindness.", "imagePrompt": "fox under moon"}
    client = DummyGemini(
        json_text=json.dumps(draft),
        images=[InlinePayload(data=b"fox", mime_type="image/png")],
    )
    copilot = build_copilot(client)

    story = await copilot.create_illustrated_story("  ")

    assert story.title == "New Legend"
    assert story.story == "A fox learned kindness."
    assert story.image_url is not None and story.image_url.startswith("data:image/png;base64,")
    assert client.calls == ["generate_json", "generate_image"]


@pytest.mark.asyncio
async def test_story_failure_skips_image_request() -> None:
    client = DummyGemini(json_text=None)
    copilot = build_copilot(client)

    with pytest.raises(EmptyResponseError):
        await copilot.create_illustrated_story("fox")
    assert client.calls == ["generate_json"]


@pytest.mark.asyncio
async def test_speech_without_audio_propagates() -> None:
    copilot = build_copilot(DummyGemini(audio=[]))
    with pytest.raises(NoAudioDataError):
        await copilot.generate_speech("hello")


@pytest.mark.asyncio
async def test_narrate_meditation_plays_script() -> None:
    output = SilentOutput()
    pcm = b"\x00\x01" * 48
    copilot = build_copilot(DummyGemini(audio=[InlinePayload(data=pcm)]), output)
    meditation_json = json.dumps(
        {"title": "T", "intro": "a", "visualization": "b", "reflection": "c"}
    )
    copilot_for_text = build_copilot(DummyGemini(json_text=meditation_json))
    meditation = await copilot_for_text.generate_meditation()

    await copilot.narrate_meditation(meditation)

    assert len(output.buffers) == 1
    assert output.buffers[0].frame_count == 48


@pytest.mark.asyncio
async def test_audio_analysis_unmapped_error_still_degrades() -> None:
    copilot = build_copilot(DummyGemini(error=RuntimeError("unexpected sdk failure")))
    assert await copilot.analyze_audio(b"webm", "audio/webm") is AUDIO_FALLBACK
