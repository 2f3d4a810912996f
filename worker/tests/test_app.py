import base64
import json
from typing import Any, List, Optional

from fastapi.testclient import TestClient

from roots_worker.app.main import create_app
from roots_worker.app.settings import DEFAULT_PLACEHOLDER_IMAGE, Settings
from roots_worker.services.exceptions import NetworkError
from roots_worker.services.orchestrator import CoPilotOrchestrator
from roots_worker.services.types import InlinePayload, PlayableAudioBuffer


class FakeGemini:
    def __init__(
        self,
        json_text: Optional[str] = None,
        error: Optional[Exception] = None,
        audio: Optional[List[InlinePayload]] = None,
    ) -> None:
        self.json_text = json_text
        self.error = error
        self.audio = audio or []
        self.turns: List[Any] = []

    async def generate_json(self, **_: Any) -> Optional[str]:
        if self.error is not None:
            raise self.error
        return self.json_text

    async def generate_image(self, **_: Any) -> List[InlinePayload]:
        if self.error is not None:
            raise self.error
        return []

    async def synthesize_speech(self, **_: Any) -> List[InlinePayload]:
        return self.audio

    async def converse(self, *, turns: Any, **_: Any) -> Optional[str]:
        self.turns = list(turns)
        return "In many traditions... ✨"


class NullOutput:
    def __init__(self) -> None:
        self.started = 0

    def start(self, buffer: PlayableAudioBuffer, gain: float) -> None:
        self.started += 1


def build_client(gemini: FakeGemini, output: Optional[NullOutput] = None) -> TestClient:
    settings = Settings(api_key="test-key")
    copilot = CoPilotOrchestrator(
        settings,
        gemini,  # type: ignore[arg-type]
        output=output or NullOutput(),  # type: ignore[arg-type]
    )
    return TestClient(create_app(settings=settings, copilot=copilot))


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_create_app() -> None:
    app = create_app(settings=Settings(api_key="test-key"))
    assert app.title == "ROOTS Worker"


def test_health_endpoint() -> None:
    with build_client(FakeGemini()) as client:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["speech_voice"] == "Fenrir"
        assert "video_plan" in body["request_kinds"]


def test_vision_returns_camel_case_record() -> None:
    record = {"title": "Menorah", "explanation": "e", "symbolism": "s", "history": "h"}
    with build_client(FakeGemini(json_text=json.dumps(record))) as client:
        response = client.post(
            "/vision",
            json={"image": {"data": _b64(b"jpg"), "mimeType": "image/jpeg"}},
        )
        assert response.status_code == 200
        assert response.json() == record


def test_vision_rejects_malformed_base64() -> None:
    with build_client(FakeGemini()) as client:
        response = client.post(
            "/vision",
            json={"image": {"data": "@@not base64@@", "mimeType": "image/jpeg"}},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "EncodingError"


def test_vision_network_failure_maps_to_503() -> None:
    with build_client(FakeGemini(error=NetworkError("offline"))) as client:
        response = client.post(
            "/vision",
            json={"image": {"data": _b64(b"jpg"), "mimeType": "image/jpeg"}},
        )
        assert response.status_code == 503


def test_audio_failure_returns_fallback_record() -> None:
    with build_client(FakeGemini(error=NetworkError("offline"))) as client:
        response = client.post(
            "/audio",
            json={"audio": {"data": _b64(b"webm"), "mimeType": "audio/webm"}},
        )
        assert response.status_code == 200
        assert response.json()["origin"] == "Unknown Source"


def test_video_plan_schema_violation_maps_to_502_with_raw_text() -> None:
    raw = '{"title": "half a plan"}'
    with build_client(FakeGemini(json_text=raw)) as client:
        response = client.post("/video-plan", json={"topic": "om"})
        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "SchemaViolationError"
        assert body["raw_text"] == raw


def test_chat_forwards_history() -> None:
    gemini = FakeGemini()
    with build_client(gemini) as client:
        response = client.post(
            "/chat",
            json={
                "message": "ok",
                "history": [
                    {"role": "user", "text": "hi"},
                    {"role": "model", "text": "hello"},
                ],
            },
        )
        assert response.status_code == 200
        assert response.json() == {"reply": "In many traditions... ✨"}
    assert [turn.text for turn in gemini.turns] == ["hi", "hello", "ok"]


def test_story_image_failure_returns_placeholder() -> None:
    with build_client(FakeGemini(error=NetworkError("offline"))) as client:
        response = client.post("/story/image", json={"prompt": "an owl"})
        assert response.status_code == 200
        assert response.json() == {"imageUrl": DEFAULT_PLACEHOLDER_IMAGE}


def test_speech_starts_playback() -> None:
    output = NullOutput()
    gemini = FakeGemini(audio=[InlinePayload(data=b"\x00\x00" * 24)])
    with build_client(gemini, output) as client:
        response = client.post("/speech", json={"text": "breathe"})
        assert response.status_code == 200
        assert response.json() == {"started": True, "voice": "Fenrir"}
    assert output.started == 1


def test_speech_without_audio_maps_to_502() -> None:
    with build_client(FakeGemini()) as client:
        response = client.post("/speech", json={"text": "breathe"})
        assert response.status_code == 502
        assert response.json()["error"] == "NoAudioDataError"
