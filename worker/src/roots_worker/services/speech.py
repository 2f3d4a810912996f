"""Speech synthesis and fire-and-forget playback."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, List, Optional, Set

import numpy as np
from loguru import logger

from ..app.models import MeditationResult
from ..app.settings import Settings
from .client import GeminiClient
from .codec import decode_base64, pcm16_to_float_buffer
from .exceptions import AudioCodecError, NoAudioDataError, PlaybackError
from .types import PlayableAudioBuffer


def meditation_script(meditation: MeditationResult) -> str:
    """Join the spoken sections of a meditation with breathing pauses."""

    return f"{meditation.intro} ... {meditation.visualization} ... {meditation.reflection}"


class SoundDeviceOutput:
    """Output graph: buffer -> gain -> default device.

    Every buffer gets its own stream, so overlapping calls play on top of
    each other. Streams are held until their finished callback fires and
    closed later from a caller thread, never from the audio thread.
    """

    def __init__(self, *, device: Optional[int | str] = None) -> None:
        self._device = device
        self._active: Set[Any] = set()
        self._done: List[Any] = []
        self._idle = threading.Condition()

    @property
    def active_streams(self) -> int:
        with self._idle:
            return len(self._active)

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every started stream has finished."""

        with self._idle:
            idle = self._idle.wait_for(lambda: not self._active, timeout)
        self._reap()
        return idle

    def _reap(self) -> None:
        with self._idle:
            finished, self._done = self._done, []
        for stream in finished:
            stream.close()

    def start(self, buffer: PlayableAudioBuffer, gain: float) -> None:
        import sounddevice as sd

        self._reap()
        frames = buffer.interleaved() * np.float32(gain)
        np.clip(frames, -1.0, 1.0, out=frames)
        cursor = 0

        def _callback(outdata: np.ndarray, frame_count: int, _time: Any, status: Any) -> None:
            nonlocal cursor
            if status:
                logger.debug("Output stream status: {}", status)
            chunk = frames[cursor : cursor + frame_count]
            outdata[: len(chunk)] = chunk
            outdata[len(chunk) :] = 0.0
            cursor += len(chunk)
            if len(chunk) < frame_count:
                raise sd.CallbackStop

        def _finished() -> None:
            with self._idle:
                if stream in self._active:
                    self._active.discard(stream)
                    self._done.append(stream)
                self._idle.notify_all()

        try:
            stream = sd.OutputStream(
                samplerate=buffer.sample_rate,
                channels=buffer.channel_count,
                dtype="float32",
                device=self._device,
                callback=_callback,
                finished_callback=_finished,
            )
        except (sd.PortAudioError, OSError) as exc:
            raise PlaybackError(f"audio output unavailable: {exc}") from exc

        with self._idle:
            self._active.add(stream)
        try:
            stream.start()
        except (sd.PortAudioError, OSError) as exc:
            with self._idle:
                self._active.discard(stream)
                self._idle.notify_all()
            stream.close()
            raise PlaybackError(f"audio output failed to start: {exc}") from exc


class SpeechPlaybackPipeline:
    """Requests narration, decodes PCM16 and starts playback."""

    def __init__(
        self,
        settings: Settings,
        client: GeminiClient,
        output: Optional[SoundDeviceOutput] = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._output = output if output is not None else SoundDeviceOutput()

    @property
    def output(self) -> SoundDeviceOutput:
        return self._output

    @property
    def voice(self) -> str:
        return self._settings.speech_voice

    async def synthesize(self, text: str) -> PlayableAudioBuffer:
        payloads = await self._client.synthesize_speech(
            model=self._settings.speech_model_id,
            text=text,
            voice=self._settings.speech_voice,
        )
        if not payloads:
            raise NoAudioDataError("speech response carried no inline audio")

        raw = payloads[0].data
        try:
            pcm = decode_base64(raw) if isinstance(raw, str) else bytes(raw)
            return pcm16_to_float_buffer(
                pcm,
                sample_rate=self._settings.speech_sample_rate,
                channels=self._settings.speech_channels,
            )
        except AudioCodecError as exc:
            raise PlaybackError(f"speech payload could not be decoded: {exc}") from exc

    async def speak(self, text: str) -> None:
        """Return once playback has started, not once it has finished."""

        buffer = await self.synthesize(text)
        logger.debug(
            "Starting playback of {:.2f}s at {} Hz",
            buffer.duration_seconds,
            buffer.sample_rate,
        )
        await asyncio.to_thread(self._output.start, buffer, self._settings.playback_gain)
