from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

import pytest

from roots_worker.app.settings import Settings
from roots_worker.services import prompts
from roots_worker.services.chat import ChatOrchestrator, append_exchange
from roots_worker.services.exceptions import NetworkError
from roots_worker.services.types import ChatRole, ChatTurn


class ConversationStub:
    def __init__(self, reply: Optional[str] = "Namaste 🌿", error: Optional[BaseException] = None) -> None:
        self.reply = reply
        self.error = error
        self.sent: List[Sequence[ChatTurn]] = []
        self.models: List[str] = []

    async def converse(
        self,
        *,
        model: str,
        turns: Sequence[ChatTurn],
        system_instruction: str,
    ) -> Optional[str]:
        self.sent.append(turns)
        self.models.append(model)
        if self.error is not None:
            raise self.error
        return self.reply


def build_chat(client: ConversationStub) -> ChatOrchestrator:
    return ChatOrchestrator(Settings(api_key="test-key"), client)  # type: ignore[arg-type]


HISTORY = (
    ChatTurn(role=ChatRole.USER, text="hi"),
    ChatTurn(role=ChatRole.MODEL, text="hello"),
)


@pytest.mark.asyncio
async def test_send_carries_history_then_new_message_in_order() -> None:
    client = ConversationStub(reply="peace be with you")
    chat = build_chat(client)

    reply = await chat.send("ok", HISTORY)

    assert reply == "peace be with you"
    (turns,) = client.sent
    assert [(turn.role, turn.text) for turn in turns] == [
        (ChatRole.USER, "hi"),
        (ChatRole.MODEL, "hello"),
        (ChatRole.USER, "ok"),
    ]
    assert client.models == ["gemini-3-pro-preview"]


@pytest.mark.asyncio
async def test_send_leaves_caller_history_untouched() -> None:
    history = list(HISTORY)
    chat = build_chat(ConversationStub())

    await chat.send("ok", history)

    assert history == list(HISTORY)


@pytest.mark.asyncio
async def test_failure_returns_in_character_fallback() -> None:
    chat = build_chat(ConversationStub(error=NetworkError("socket closed")))
    assert await chat.send("ok", HISTORY) == prompts.CHAT_FALLBACK_REPLY


@pytest.mark.asyncio
async def test_empty_reply_returns_meditating_line() -> None:
    chat = build_chat(ConversationStub(reply=""))
    assert await chat.send("ok") == prompts.CHAT_EMPTY_REPLY


@pytest.mark.asyncio
async def test_cancellation_is_not_swallowed() -> None:
    chat = build_chat(ConversationStub(error=asyncio.CancelledError()))
    with pytest.raises(asyncio.CancelledError):
        await chat.send("ok")


def test_append_exchange_returns_new_history() -> None:
    updated = append_exchange(HISTORY, "ok", "indeed")
    assert len(HISTORY) == 2
    assert updated[2:] == (
        ChatTurn(role=ChatRole.USER, text="ok"),
        ChatTurn(role=ChatRole.MODEL, text="indeed"),
    )
