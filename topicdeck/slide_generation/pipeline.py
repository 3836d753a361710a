"""Drive materialization across a deck with pacing and progress reporting."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, List, Optional

from topicdeck.agents.deck_agent.generator import generate_deck
from topicdeck.agents.deck_agent.models import Deck
from topicdeck.config import Settings, load_settings

from .canvas import CanvasPort
from .errors import EmptyInputError, ImageResolutionFailure, PipelineError, RunCancelledError
from .image_resolver import ImageResolver
from .image_search import build_image_search
from .materializer import SlideMaterializer
from .models import SlideOutcome

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
SpeechCallback = Callable[[str], None]
ErrorCallback = Callable[[str], None]


@dataclass
class PipelineRunState:
    """Mutable state for one run, owned by the orchestrator."""

    total_slides: int = 0
    progress_fraction: float = 0.0
    current_slide_index: Optional[int] = None
    speech_accumulator: List[str] = field(default_factory=list)
    progress_history: List[float] = field(default_factory=list)
    image_failures: List[ImageResolutionFailure] = field(default_factory=list)
    outcomes: List[SlideOutcome] = field(default_factory=list)

    def append_speech(self, text: str) -> None:
        self.speech_accumulator.append(text)

    def record_image_failure(self, failure: ImageResolutionFailure) -> None:
        self.image_failures.append(failure)

    def report_progress(self, fraction: float) -> float:
        # progress never moves backwards
        clamped = max(0.0, min(100.0, float(fraction)))
        self.progress_fraction = max(self.progress_fraction, clamped)
        self.progress_history.append(self.progress_fraction)
        return self.progress_fraction

    @property
    def transcript(self) -> str:
        return "\n".join(self.speech_accumulator)


class PipelineOrchestrator:
    def __init__(
        self,
        materializer: SlideMaterializer,
        canvas: CanvasPort,
        *,
        slide_interval: float = 5.0,
        batch_size: int = 20,
        batch_pause: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.materializer = materializer
        self.canvas = canvas
        self.slide_interval = slide_interval
        self.batch_size = batch_size
        self.batch_pause = batch_pause
        self.sleep = sleep
        self.cancel_event = cancel_event

    def run(
        self,
        deck: Deck,
        on_progress: ProgressCallback,
        on_speech_ready: SpeechCallback,
    ) -> PipelineRunState:
        """Materialize every slide in order.

        Progress depends only on the slide count. The final progress report is
        always 100, including for an empty deck.
        """

        total = len(deck.slides)
        state = PipelineRunState(total_slides=total)

        def _progress(value: float) -> None:
            on_progress(state.report_progress(value))

        for index, slide in enumerate(deck.slides):
            if self.cancel_event is not None and self.cancel_event.is_set():
                logger.info("Run cancelled before slide %d/%d", index + 1, total)
                raise RunCancelledError(index, total)

            state.current_slide_index = index
            outcome = self.materializer.materialize(
                slide,
                self.canvas,
                append_speech=state.append_speech,
                on_image_failure=state.record_image_failure,
            )
            state.outcomes.append(outcome)
            _progress(min(100.0, 100.0 * (index + 1) / total))

            self.sleep(self.slide_interval)
            if self.batch_size and (index + 1) % self.batch_size == 0:
                logger.info(
                    "Reached %d slides, waiting for %.0f seconds...",
                    index + 1,
                    self.batch_pause,
                )
                self.sleep(self.batch_pause)

        if state.speech_accumulator:
            on_speech_ready(state.transcript)

        _progress(100.0)
        logger.info(
            "Finished deck: %d slides, %d images skipped",
            total,
            len(state.image_failures),
        )
        return state


def build_resolver(
    settings: Settings,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[ImageResolver]:
    search = build_image_search(settings.search_api_key, settings.search_engine_id)
    if search is None:
        return None
    return ImageResolver(
        search,
        timeout=settings.image_timeout,
        retries=settings.image_retries,
        initial_delay=settings.image_backoff,
        max_candidates=settings.max_image_candidates,
        sleep=sleep,
    )


def generate_presentation(
    topic: str,
    *,
    canvas: CanvasPort,
    on_progress: ProgressCallback,
    on_speech_ready: SpeechCallback,
    on_error: Optional[ErrorCallback] = None,
    generator: Optional[Callable[[str], Deck]] = None,
    resolver: Optional[ImageResolver] = None,
    settings: Optional[Settings] = None,
    sleep: Callable[[float], None] = time.sleep,
    cancel_event: Optional[threading.Event] = None,
) -> PipelineRunState:
    """Generate a deck for ``topic`` and render it onto ``canvas``.

    Deck-level failures are reported once through ``on_error`` and re-raised.
    A blank topic fails before any network call.
    """

    try:
        cleaned = (topic or "").strip()
        if not cleaned:
            logger.info("No user input provided")
            raise EmptyInputError()

        settings = settings or load_settings()
        if resolver is None:
            resolver = build_resolver(settings, sleep=sleep)

        if generator is None:
            generator = partial(generate_deck, settings=settings)
        deck = generator(cleaned)
        orchestrator = PipelineOrchestrator(
            SlideMaterializer(resolver),
            canvas,
            slide_interval=settings.slide_interval,
            batch_size=settings.batch_size,
            batch_pause=settings.batch_pause,
            sleep=sleep,
            cancel_event=cancel_event,
        )
        return orchestrator.run(deck, on_progress, on_speech_ready)
    except RunCancelledError:
        raise
    except PipelineError as exc:
        logger.error("Deck generation failed: %s", exc)
        if on_error is not None:
            on_error(f"Error: {exc}")
        raise


__all__ = [
    "PipelineOrchestrator",
    "PipelineRunState",
    "build_resolver",
    "generate_presentation",
]
