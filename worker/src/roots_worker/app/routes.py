from __future__ import annotations

from typing import cast

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from ..services.codec import decode_base64
from ..services.exceptions import (
    AudioCodecError,
    GenerationError,
    NetworkError,
    SchemaViolationError,
)
from ..services.generator import PROFILES
from ..services.orchestrator import CoPilotOrchestrator
from ..services.types import ChatTurn
from .models import (
    AudioAnalysisResult,
    AudioRequest,
    ChatReply,
    ChatRequest,
    MeditationResult,
    SpeechRequest,
    SpeechStatus,
    StoryDraft,
    StoryImageReply,
    StoryImageRequest,
    StoryRequest,
    StoryResult,
    VideoPlanRequest,
    VideoPlanResult,
    VisionRequest,
    VisionResult,
)
from .settings import Settings

router = APIRouter()


def get_copilot(request: Request) -> CoPilotOrchestrator:
    return cast(CoPilotOrchestrator, request.app.state.copilot)


@router.get("/health")
async def health(request: Request) -> dict[str, object]:
    settings = cast(Settings, request.app.state.settings)
    return {
        "status": "ok",
        "analysis_model_id": settings.analysis_model_id,
        "creative_model_id": settings.creative_model_id,
        "image_model_id": settings.image_model_id,
        "speech_model_id": settings.speech_model_id,
        "speech_voice": settings.speech_voice,
        "api_key_configured": settings.api_key is not None,
        "request_kinds": sorted(kind.value for kind in PROFILES),
    }


@router.post("/vision", response_model=VisionResult)
async def analyze_image(payload: VisionRequest, request: Request) -> VisionResult:
    image = decode_base64(payload.image.data)
    return await get_copilot(request).analyze_image(image, payload.image.mime_type)


@router.post("/audio", response_model=AudioAnalysisResult)
async def analyze_audio(payload: AudioRequest, request: Request) -> AudioAnalysisResult:
    audio = decode_base64(payload.audio.data)
    return await get_copilot(request).analyze_audio(audio, payload.audio.mime_type)


@router.post("/chat", response_model=ChatReply)
async def chat(payload: ChatRequest, request: Request) -> ChatReply:
    history = tuple(ChatTurn(role=turn.role, text=turn.text) for turn in payload.history)
    reply = await get_copilot(request).send_chat_message(payload.message, history)
    return ChatReply(reply=reply)


@router.post("/story", response_model=StoryDraft)
async def story(payload: StoryRequest, request: Request) -> StoryDraft:
    return await get_copilot(request).generate_story(payload.topic)


@router.post("/story/illustrated", response_model=StoryResult)
async def illustrated_story(payload: StoryRequest, request: Request) -> StoryResult:
    return await get_copilot(request).create_illustrated_story(payload.topic)


@router.post("/story/image", response_model=StoryImageReply)
async def story_image(payload: StoryImageRequest, request: Request) -> StoryImageReply:
    image_url = await get_copilot(request).generate_story_image(payload.prompt)
    return StoryImageReply(image_url=image_url)


@router.post("/video-plan", response_model=VideoPlanResult)
async def video_plan(payload: VideoPlanRequest, request: Request) -> VideoPlanResult:
    return await get_copilot(request).generate_video_plan(
        payload.topic, payload.reference_image
    )


@router.post("/meditation", response_model=MeditationResult)
async def meditation(request: Request) -> MeditationResult:
    return await get_copilot(request).generate_meditation()


@router.post("/speech", response_model=SpeechStatus)
async def speech(payload: SpeechRequest, request: Request) -> SpeechStatus:
    copilot = get_copilot(request)
    await copilot.generate_speech(payload.text)
    return SpeechStatus(started=True, voice=copilot.speech.voice)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    body: dict[str, object] = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, SchemaViolationError) and exc.raw_text is not None:
        body["raw_text"] = exc.raw_text
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    async def _codec_error(_request: Request, exc: Exception) -> JSONResponse:
        return _error_response(400, exc)

    async def _network_error(_request: Request, exc: Exception) -> JSONResponse:
        return _error_response(503, exc)

    async def _generation_error(_request: Request, exc: Exception) -> JSONResponse:
        return _error_response(502, exc)

    app.add_exception_handler(AudioCodecError, _codec_error)
    app.add_exception_handler(NetworkError, _network_error)
    app.add_exception_handler(GenerationError, _generation_error)
