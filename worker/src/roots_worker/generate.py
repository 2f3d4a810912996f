"""
CLI entry point to run a one-off request through the co-pilot orchestrator.

Example:
    python -m roots_worker.generate meditation
    python -m roots_worker.generate vision --file lamp.jpg --mime-type image/jpeg
    python -m roots_worker.generate video --prompt "the lotus" --file ref.png
"""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import wave
from pathlib import Path
from typing import Optional

import numpy as np

from .app.settings import Settings
from .services.client import GeminiClient
from .services.orchestrator import CoPilotOrchestrator
from .services.types import Part

KINDS = ("vision", "audio", "chat", "story", "image", "video", "meditation", "speech")


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query the ROOTS co-pilot from the command line.")
    parser.add_argument("kind", choices=KINDS, help="Which operation to run.")
    parser.add_argument("--prompt", default="", help="Topic, message, image prompt or text to speak.")
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Attachment for vision/audio analysis or the video reference image.",
    )
    parser.add_argument(
        "--mime-type",
        default=None,
        help="Attachment MIME type (guessed from the file name when omitted).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="For speech: write a WAV file instead of playing through the speakers.",
    )
    return parser.parse_args(argv)


def _load_attachment(path: Optional[Path], mime_type: Optional[str]) -> Part:
    if path is None:
        raise SystemExit("--file is required for this operation")
    resolved = mime_type or mimetypes.guess_type(path.name)[0]
    if resolved is None:
        raise SystemExit(f"cannot guess MIME type for {path.name}; pass --mime-type")
    return Part.from_bytes(path.read_bytes(), resolved)


def _write_wav(path: Path, samples: np.ndarray, sample_rate: int) -> None:
    frames = np.clip(samples.T, -1.0, 1.0)
    pcm = (frames * 32767.0).astype("<i2")
    with wave.open(str(path), "wb") as wav_file:
        wav_file.setnchannels(samples.shape[0])
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm.tobytes())


async def _run(
    kind: str,
    *,
    prompt: str,
    attachment: Optional[Path] = None,
    mime_type: Optional[str] = None,
    output: Optional[Path] = None,
    copilot: Optional[CoPilotOrchestrator] = None,
) -> None:
    if copilot is None:
        settings = Settings()
        copilot = CoPilotOrchestrator(settings, GeminiClient(settings))

    result: object
    if kind == "vision":
        part = _load_attachment(attachment, mime_type)
        result = await copilot.analyze_image(part.data or b"", part.mime_type or "")
    elif kind == "audio":
        part = _load_attachment(attachment, mime_type)
        result = await copilot.analyze_audio(part.data or b"", part.mime_type or "")
    elif kind == "chat":
        result = {"reply": await copilot.send_chat_message(prompt)}
    elif kind == "story":
        result = await copilot.create_illustrated_story(prompt)
    elif kind == "image":
        result = {"imageUrl": await copilot.generate_story_image(prompt)}
    elif kind == "video":
        reference = _load_attachment(attachment, mime_type) if attachment is not None else None
        result = await copilot.generate_video_plan(prompt, reference)
    elif kind == "meditation":
        result = await copilot.generate_meditation()
    elif output is not None:
        buffer = await copilot.speech.synthesize(prompt)
        _write_wav(output, buffer.samples, buffer.sample_rate)
        result = {"output": str(output), "durationSeconds": round(buffer.duration_seconds, 3)}
    else:
        await copilot.generate_speech(prompt)
        # keep the process alive until the narration has played out
        await asyncio.to_thread(copilot.speech.output.wait_until_idle)
        result = {"started": True, "voice": copilot.speech.voice}

    if hasattr(result, "model_dump"):
        result = result.model_dump(by_alias=True)  # type: ignore[union-attr]
    print(json.dumps(result, indent=2, ensure_ascii=False))


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)
    asyncio.run(
        _run(
            args.kind,
            prompt=args.prompt,
            attachment=args.file,
            mime_type=args.mime_type,
            output=args.output,
        )
    )


if __name__ == "__main__":
    main()
