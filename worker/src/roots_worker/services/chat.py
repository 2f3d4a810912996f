"""Multi-turn chat against a caller-owned history."""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from ..app.settings import Settings
from . import prompts
from .client import GeminiClient
from .types import ChatHistory, ChatRole, ChatTurn


def append_exchange(history: Sequence[ChatTurn], message: str, reply: str) -> ChatHistory:
    """Return a new history with the user message and the reply appended."""

    return (
        *history,
        ChatTurn(role=ChatRole.USER, text=message),
        ChatTurn(role=ChatRole.MODEL, text=reply),
    )


class ChatOrchestrator:
    """Stateless chat: every call sends the given history plus one new turn.

    Failures never reach the caller; an in-character fallback line is
    returned instead.
    """

    def __init__(self, settings: Settings, client: GeminiClient) -> None:
        self._settings = settings
        self._client = client

    async def send(self, message: str, history: Sequence[ChatTurn] = ()) -> str:
        turns: ChatHistory = (*history, ChatTurn(role=ChatRole.USER, text=message))
        try:
            reply = await self._client.converse(
                model=self._settings.creative_model_id,
                turns=turns,
                system_instruction=prompts.SYSTEM_INSTRUCTION,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Chat request failed, answering with fallback: {}", exc)
            return prompts.CHAT_FALLBACK_REPLY
        if not reply:
            return prompts.CHAT_EMPTY_REPLY
        return reply
