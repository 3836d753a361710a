from __future__ import annotations

import threading

import pytest

from topicdeck.agents.deck_agent.models import Deck
from topicdeck.slide_generation.errors import (
    EmptyInputError,
    MaterializationError,
    RunCancelledError,
    SchemaValidationError,
)
from topicdeck.slide_generation.materializer import SlideMaterializer
from topicdeck.slide_generation.pipeline import PipelineOrchestrator, PipelineRunState, generate_presentation

from conftest import make_deck


class SpyMaterializer(SlideMaterializer):
    def __init__(self) -> None:
        super().__init__(None)
        self.titles = []

    def materialize(self, slide, canvas, **kwargs):
        self.titles.append(slide.title)
        return super().materialize(slide, canvas, **kwargs)


def _run(deck, canvas, sleeper, **kwargs):
    progress, speeches = [], []
    materializer = SpyMaterializer()
    orchestrator = PipelineOrchestrator(materializer, canvas, sleep=sleeper, **kwargs)
    state = orchestrator.run(deck, progress.append, speeches.append)
    return state, materializer, progress, speeches


def test_slides_run_in_order_with_progress(canvas, sleeper):
    state, materializer, progress, speeches = _run(make_deck(3), canvas, sleeper)

    assert materializer.titles == ["Slide 0", "Slide 1", "Slide 2"]
    assert progress == pytest.approx([100 / 3, 200 / 3, 100.0, 100.0])
    assert progress == sorted(progress)
    assert progress[-1] == 100
    assert len(speeches) == 1
    assert speeches[0].split("\n")[0] == "Speech 0 line one."
    assert state.speech_accumulator == [slide.speech for slide in make_deck(3).slides]
    assert state.transcript == speeches[0]


def test_transcript_has_one_entry_per_slide(canvas, sleeper):
    deck = Deck(slides=[s.model_copy(update={"speech": f"say {i}"}) for i, s in enumerate(make_deck(4).slides)])

    _, _, _, speeches = _run(deck, canvas, sleeper)

    assert speeches == ["say 0\nsay 1\nsay 2\nsay 3"]


def test_empty_deck_finishes_immediately(canvas, sleeper):
    state, materializer, progress, speeches = _run(Deck(slides=[]), canvas, sleeper)

    assert progress == [100.0]
    assert speeches == []
    assert materializer.titles == []
    assert sleeper.calls == []
    assert state.transcript == ""


def test_pacing_pauses_between_slides_and_every_twentieth(canvas, sleeper):
    _run(make_deck(41), canvas, sleeper)

    assert sleeper.calls.count(5.0) == 41
    assert sleeper.calls.count(10.0) == 2
    # the long pause follows the regular pause of slides 20 and 40
    assert sleeper.calls[19:21] == [5.0, 10.0]
    assert sleeper.calls[40:42] == [5.0, 10.0]


def test_text_failure_aborts_run(canvas, sleeper):
    canvas.fail_text = True

    with pytest.raises(MaterializationError):
        _run(make_deck(2), canvas, sleeper)


def test_cancel_stops_before_next_slide(canvas, sleeper):
    cancel = threading.Event()
    progress = []

    def on_progress(value):
        progress.append(value)
        cancel.set()

    orchestrator = PipelineOrchestrator(SpyMaterializer(), canvas, sleep=sleeper, cancel_event=cancel)
    with pytest.raises(RunCancelledError) as exc:
        orchestrator.run(make_deck(3), on_progress, lambda _: None)

    assert exc.value.completed_slides == 1
    assert progress == pytest.approx([100 / 3])


def test_run_state_progress_never_decreases():
    state = PipelineRunState(total_slides=2)
    assert state.report_progress(50) == 50
    assert state.report_progress(20) == 50
    assert state.report_progress(150) == 100
    assert state.progress_history == [50, 50, 100]


def test_blank_topic_never_calls_generator(canvas, settings):
    calls, errors = [], []

    with pytest.raises(EmptyInputError):
        generate_presentation(
            "   ",
            canvas=canvas,
            on_progress=lambda _: None,
            on_speech_ready=lambda _: None,
            on_error=errors.append,
            generator=calls.append,
            settings=settings,
        )

    assert calls == []
    assert canvas.calls == []
    assert len(errors) == 1


def test_schema_failure_skips_materialization(canvas, settings, sleeper):
    errors = []

    def bad_generator(topic):
        raise SchemaValidationError(["slides: Field required"])

    with pytest.raises(SchemaValidationError):
        generate_presentation(
            "volcanoes",
            canvas=canvas,
            on_progress=lambda _: None,
            on_speech_ready=lambda _: None,
            on_error=errors.append,
            generator=bad_generator,
            settings=settings,
            sleep=sleeper,
        )

    assert canvas.calls == []
    assert errors == ["Error: Deck validation failed:\n- slides: Field required"]


def test_generate_presentation_trims_topic_and_runs(canvas, settings, sleeper):
    topics, progress, speeches = [], [], []

    def generator(topic):
        topics.append(topic)
        return make_deck(2)

    state = generate_presentation(
        "  volcanoes \n",
        canvas=canvas,
        on_progress=progress.append,
        on_speech_ready=speeches.append,
        generator=generator,
        settings=settings,
        sleep=sleeper,
    )

    assert topics == ["volcanoes"]
    assert progress[-1] == 100
    assert len(canvas.calls_of("page")) == 2
    assert state.total_slides == 2
