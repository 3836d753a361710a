"""Shared fakes for the deck pipeline tests."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from topicdeck.agents.deck_agent.models import Deck, Slide
from topicdeck.config import Settings
from topicdeck.slide_generation.models import PageDimensions, Placement

PAGE = PageDimensions(width=800.0, height=600.0)


class FakeCanvas:
    """Records canvas calls; image URLs listed in ``failing_urls`` raise."""

    def __init__(self, page: PageDimensions = PAGE) -> None:
        self.page = page
        self.calls: List[tuple] = []
        self.failing_urls: Dict[str, int] = {}  # url -> remaining failures (-1 = always)
        self.fail_text = False
        self.deleted: List[str] = []
        self._seq = 0

    def _next_id(self, kind: str) -> str:
        self._seq += 1
        return f"{kind}_{self._seq}"

    def page_dimensions(self) -> PageDimensions:
        return self.page

    def create_page(self, background_color: str, title: str) -> str:
        self.calls.append(("page", background_color, title))
        return self._next_id("page")

    def create_text_element(self, text, placement, *, font_size=None, bold=False) -> str:
        if self.fail_text:
            raise RuntimeError("canvas unavailable")
        self.calls.append(("text", text, placement, font_size, bold))
        return self._next_id("text")

    def create_embedded_image_element(self, url: str, placement: Placement) -> str:
        self.calls.append(("image_attempt", url, placement))
        remaining = self.failing_urls.get(url, 0)
        if remaining:
            if remaining > 0:
                self.failing_urls[url] = remaining - 1
            raise RuntimeError(f"cannot embed {url}")
        return self._next_id("image")

    def delete_element(self, element_id: str) -> None:
        self.deleted.append(element_id)

    def calls_of(self, kind: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == kind]


class FakeSearch:
    def __init__(self, results: Optional[Dict[str, List[str]]] = None, error: Optional[Exception] = None) -> None:
        self.results = results or {}
        self.error = error
        self.queries: List[str] = []

    def search(self, query: str) -> List[str]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results.get(query, []))


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_slide(index: int = 0, *, images: Optional[List[str]] = None, bullets: Optional[List[str]] = None) -> Slide:
    return Slide(
        title=f"Slide {index}",
        speech=f"Speech {index} line one.\nLine two.\nLine three.",
        bullet_points=bullets if bullets is not None else [f"Point {index}a", f"Point {index}b"],
        image_descriptions=images if images is not None else [],
        notes=f"Notes {index}",
        background_color="#FDF6E3",
        duration_hint="1 minute",
    )


def make_deck(count: int, **kwargs) -> Deck:
    return Deck(slides=[make_slide(i, **kwargs) for i in range(count)])


@pytest.fixture
def canvas() -> FakeCanvas:
    return FakeCanvas()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="test-key")
