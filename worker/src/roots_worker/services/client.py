"""Gemini endpoint adapter built on the google-genai SDK."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from loguru import logger

from ..app.settings import Settings
from .exceptions import NetworkError
from .types import ChatRole, ChatTurn, InlinePayload, Part


class GeminiClient:
    """Thin async wrapper exposing the four request shapes the worker needs."""

    def __init__(self, settings: Settings, *, client: Optional[genai.Client] = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            try:
                self._client = genai.Client(api_key=self._settings.api_key)
            except ValueError as exc:
                raise NetworkError(f"Gemini client unavailable: {exc}") from exc
        return self._client

    async def generate_json(
        self,
        *,
        model: str,
        parts: Sequence[Part],
        system_instruction: str,
        schema: Dict[str, Any],
    ) -> Optional[str]:
        config = genai_types.GenerateContentConfig(
            system_instruction=system_instruction,
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = await self._call(
            "generate_json",
            lambda client: client.aio.models.generate_content(
                model=model,
                contents=[_to_content(ChatRole.USER, parts)],
                config=config,
            ),
        )
        return response.text

    async def generate_image(
        self,
        *,
        model: str,
        prompt: str,
        aspect_ratio: str,
    ) -> List[InlinePayload]:
        config = genai_types.GenerateContentConfig(
            image_config=genai_types.ImageConfig(aspect_ratio=aspect_ratio),
        )
        response = await self._call(
            "generate_image",
            lambda client: client.aio.models.generate_content(
                model=model,
                contents=[_to_content(ChatRole.USER, [Part.from_text(prompt)])],
                config=config,
            ),
        )
        return _inline_payloads(response)

    async def synthesize_speech(
        self,
        *,
        model: str,
        text: str,
        voice: str,
    ) -> List[InlinePayload]:
        config = genai_types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=genai_types.SpeechConfig(
                voice_config=genai_types.VoiceConfig(
                    prebuilt_voice_config=genai_types.PrebuiltVoiceConfig(voice_name=voice),
                ),
            ),
        )
        response = await self._call(
            "synthesize_speech",
            lambda client: client.aio.models.generate_content(
                model=model,
                contents=[_to_content(ChatRole.USER, [Part.from_text(text)])],
                config=config,
            ),
        )
        return _inline_payloads(response)

    async def converse(
        self,
        *,
        model: str,
        turns: Sequence[ChatTurn],
        system_instruction: str,
    ) -> Optional[str]:
        """Seed a chat session with every turn but the last, then send the last."""

        if not turns or turns[-1].role != ChatRole.USER:
            raise ValueError("conversation must end with a user turn")
        history = [_to_content(turn.role, [Part.from_text(turn.text)]) for turn in turns[:-1]]
        config = genai_types.GenerateContentConfig(system_instruction=system_instruction)

        async def _send(client: genai.Client) -> Any:
            chat = client.aio.chats.create(model=model, config=config, history=history)
            return await chat.send_message(turns[-1].text)

        response = await self._call("converse", _send)
        return response.text

    async def _call(
        self,
        operation: str,
        request: Callable[[genai.Client], Awaitable[Any]],
    ) -> Any:
        client = self._get_client()
        timeout = self._settings.request_timeout_seconds
        logger.debug("Dispatching {} (timeout={})", operation, timeout)
        try:
            if timeout is None:
                return await request(client)
            return await asyncio.wait_for(request(client), timeout)
        except asyncio.TimeoutError as exc:
            raise NetworkError(f"{operation} timed out after {timeout:.1f}s") from exc
        except (genai_errors.APIError, genai_errors.UnknownApiResponseError, httpx.HTTPError) as exc:
            raise NetworkError(f"{operation} failed: {exc}") from exc


def _to_content(role: ChatRole, parts: Sequence[Part]) -> genai_types.Content:
    converted: List[genai_types.Part] = []
    for part in parts:
        if part.is_binary:
            converted.append(
                genai_types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
            )
        else:
            converted.append(genai_types.Part.from_text(text=part.text))
    return genai_types.Content(role=role.value, parts=converted)


def _inline_payloads(response: Any) -> List[InlinePayload]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return []
    payloads: List[InlinePayload] = []
    for part in candidates[0].content.parts or []:
        inline = part.inline_data
        if inline is not None and inline.data:
            payloads.append(InlinePayload(data=inline.data, mime_type=inline.mime_type))
    return payloads
