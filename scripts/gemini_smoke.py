#!/usr/bin/env python3
"""
Quick smoke test against the live Gemini endpoint.

Requests a meditation, synthesises its narration (without playing it) and
asks for an illustration, then prints timings plus whether the image path
fell back to the placeholder so contributors can verify that real calls
succeeded with their API key.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
import time
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "worker" / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a live Gemini smoke test.")
    parser.add_argument(
        "--image-prompt",
        default="a glowing banyan tree at dawn",
        help="Prompt for the illustration request.",
    )
    parser.add_argument(
        "--skip-speech",
        action="store_true",
        help="Skip the text-to-speech request.",
    )
    return parser.parse_args()


def ensure_api_key() -> None:
    if any(os.getenv(name) for name in ("ROOTS_API_KEY", "GEMINI_API_KEY", "API_KEY")):
        return
    print(
        "No API key found. Export ROOTS_API_KEY (or GEMINI_API_KEY) before running the smoke test.",
        file=sys.stderr,
    )
    sys.exit(2)


async def run_smoke(args: argparse.Namespace) -> None:
    from roots_worker.app.settings import Settings
    from roots_worker.services.client import GeminiClient
    from roots_worker.services.orchestrator import CoPilotOrchestrator
    from roots_worker.services.speech import meditation_script

    ensure_api_key()

    settings = Settings()
    copilot = CoPilotOrchestrator(settings, GeminiClient(settings))
    timings: dict[str, float] = {}

    start = time.perf_counter()
    meditation = await copilot.generate_meditation()
    timings["meditation_seconds"] = round(time.perf_counter() - start, 3)

    speech: dict[str, object] = {"skipped": True}
    if not args.skip_speech:
        start = time.perf_counter()
        buffer = await copilot.speech.synthesize(meditation_script(meditation))
        timings["speech_seconds"] = round(time.perf_counter() - start, 3)
        speech = {
            "skipped": False,
            "frames": buffer.frame_count,
            "sample_rate": buffer.sample_rate,
            "duration_seconds": round(buffer.duration_seconds, 3),
        }

    start = time.perf_counter()
    image_url = await copilot.generate_story_image(args.image_prompt)
    timings["image_seconds"] = round(time.perf_counter() - start, 3)
    placeholder = image_url == settings.placeholder_image_url

    payload = {
        "meditation": meditation.model_dump(by_alias=True),
        "speech": speech,
        "image_placeholder": placeholder,
        "image_url_prefix": image_url[:48],
        **timings,
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))

    if placeholder:
        print("Image request degraded to the placeholder.", file=sys.stderr)
        sys.exit(3)
    print("Live Gemini calls succeeded.", file=sys.stderr)


def main() -> None:
    args = parse_args()
    try:
        asyncio.run(run_smoke(args))
    except KeyboardInterrupt:  # pragma: no cover - operator friendly exit
        print("Cancelled smoke test.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
