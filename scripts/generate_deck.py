"""Generate a deck for a topic from the command line.

Usage:
  python scripts/generate_deck.py --topic "History of flight" --presentation <presentationId>
  # print the Slides requests instead of sending them
  python scripts/generate_deck.py --topic "History of flight" --dry-run

Auth:
- OPENAI_API_KEY (or GOOGLE_API_KEY with DECK_PROVIDER=gemini) for generation.
- GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID for images (optional).
- A Google OAuth client secret JSON at the repo root for Slides access.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import replace

from dotenv import load_dotenv

from topicdeck.config import load_settings
from topicdeck.slide_generation.canvas import RecordingCanvas
from topicdeck.slide_generation.errors import EmptyInputError, PipelineError
from topicdeck.slide_generation.pipeline import generate_presentation


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Generate a slide deck from a topic.")
    parser.add_argument("--topic", required=True, help="Free-text topic for the deck")
    parser.add_argument("--presentation", help="Google Slides presentation ID to write into")
    parser.add_argument("--provider", choices=["openai", "gemini"], help="Override DECK_PROVIDER")
    parser.add_argument("--dry-run", action="store_true", help="Print batchUpdate requests instead of sending them")
    parser.add_argument("--no-pacing", action="store_true", help="Skip the rate-limit pauses between slides")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    if args.provider:
        settings = replace(settings, provider=args.provider)
    if args.no_pacing:
        settings = replace(settings, slide_interval=0.0, batch_pause=0.0)

    if args.dry_run:
        canvas = RecordingCanvas()
    else:
        if not args.presentation:
            print("--presentation is required unless --dry-run is given.", file=sys.stderr)
            return 2
        from topicdeck.slide_generation.slides_api import GoogleSlidesCanvas

        canvas = GoogleSlidesCanvas(args.presentation)

    try:
        state = generate_presentation(
            args.topic,
            canvas=canvas,
            on_progress=lambda value: print(f"Progress: {value:.0f}%", file=sys.stderr),
            on_speech_ready=lambda text: print(f"Speech:\n{text}"),
            settings=settings,
        )
    except EmptyInputError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except PipelineError as exc:
        print(f"Generation failed: {exc}", file=sys.stderr)
        return 1

    if state.image_failures:
        print(f"Skipped {len(state.image_failures)} images", file=sys.stderr)
    if args.dry_run:
        print(json.dumps(canvas.requests, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
