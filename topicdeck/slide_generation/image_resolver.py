"""Find an image for a description and place the first candidate that works."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Union

from .canvas import CanvasPort
from .errors import ImageResolutionFailure
from .image_search import MAX_RESULTS, ImageSearch
from .models import PlacedImage, Placement
from .resilience import retry_with_backoff, with_timeout

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_RETRIES = 3
DEFAULT_INITIAL_DELAY = 1.0

ResolutionResult = Union[PlacedImage, ImageResolutionFailure]


class ImageResolver:
    def __init__(
        self,
        search: ImageSearch,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        max_candidates: int = MAX_RESULTS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.search = search
        self.timeout = timeout
        self.retries = retries
        self.initial_delay = initial_delay
        self.max_candidates = max_candidates
        self.sleep = sleep

    def _candidates(self, description: str) -> List[str]:
        urls = with_timeout(lambda: self.search.search(description), self.timeout)
        return list(urls or [])[: self.max_candidates]

    def _place(self, canvas: CanvasPort, url: str, slot: Placement) -> str:
        def _discard(element_id: str) -> None:
            logger.info("Removing image %s placed after its deadline", element_id)
            canvas.delete_element(element_id)

        def _attempt() -> str:
            return with_timeout(
                lambda: canvas.create_embedded_image_element(url, slot),
                self.timeout,
                on_late_result=_discard,
            )

        return retry_with_backoff(
            _attempt,
            retries=self.retries,
            initial_delay=self.initial_delay,
            sleep=self.sleep,
            label=f"image placement for {url}",
        )

    def resolve(self, description: str, slot: Placement, canvas: CanvasPort) -> ResolutionResult:
        """Place one image for ``description`` at ``slot``.

        Never raises for search or placement problems; returns an
        ``ImageResolutionFailure`` instead so the slide can go on without it.
        """

        try:
            candidates = self._candidates(description)
        except Exception as exc:
            logger.warning("Image search failed for %r: %s", description, exc)
            return ImageResolutionFailure(description, f"search failed: {exc}")

        logger.info("Found %d image URLs for description %r", len(candidates), description)
        if not candidates:
            return ImageResolutionFailure(description, "no search results")

        attempted: List[str] = []
        for rank, url in enumerate(candidates):
            attempted.append(url)
            logger.debug("Attempting image %d/%d: %s", rank + 1, len(candidates), url)
            try:
                element_id = self._place(canvas, url, slot)
            except Exception as exc:
                logger.warning("Failed to add image from URL %s: %s", url, exc)
                continue
            logger.info("Added image from URL %s", url)
            return PlacedImage(
                description=description,
                url=url,
                element_id=element_id,
                placement=slot,
                candidate_rank=rank,
            )

        logger.warning("Failed to add any image for %r", description)
        return ImageResolutionFailure(description, "all candidates failed", tuple(attempted))


__all__ = ["ImageResolver", "ResolutionResult"]
