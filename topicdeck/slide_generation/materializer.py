"""Turn one validated slide into canvas elements."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from topicdeck.agents.deck_agent.models import Slide

from .canvas import CanvasPort
from .errors import ImageResolutionFailure, MaterializationError
from .geometry import TITLE_FONT_SIZE, bullet_placement, format_bullets, image_placement, title_placement
from .image_resolver import ImageResolver
from .models import SlideOutcome

logger = logging.getLogger(__name__)


class SlideMaterializer:
    """Places title, bullets and images for a slide.

    Page and text failures raise ``MaterializationError``; image failures are
    logged and reported through ``on_image_failure`` only.
    """

    def __init__(self, resolver: Optional[ImageResolver] = None) -> None:
        self.resolver = resolver

    def materialize(
        self,
        slide: Slide,
        canvas: CanvasPort,
        *,
        append_speech: Callable[[str], None],
        on_image_failure: Optional[Callable[[ImageResolutionFailure], None]] = None,
    ) -> SlideOutcome:
        logger.info("Adding slide: %s", slide.title)
        try:
            page = canvas.page_dimensions()
            page_id = canvas.create_page(slide.background_color, slide.title)
            canvas.create_text_element(
                slide.title,
                title_placement(page),
                font_size=TITLE_FONT_SIZE,
                bold=True,
            )
            points = format_bullets(slide.bullet_points)
            logger.debug("Adding bullet points: %s", points)
            canvas.create_text_element(points, bullet_placement(page))
        except Exception as exc:
            raise MaterializationError(f"Failed to place text for slide {slide.title!r}: {exc}") from exc

        append_speech(slide.speech)
        outcome = SlideOutcome(title=slide.title, page_id=page_id)

        count = len(slide.image_descriptions)
        for index, description in enumerate(slide.image_descriptions):
            slot = image_placement(page, index, count)
            if self.resolver is None:
                result = ImageResolutionFailure(description, "image search not configured")
            else:
                try:
                    result = self.resolver.resolve(description, slot, canvas)
                except Exception as exc:
                    logger.exception("Error processing image description %r", description)
                    result = ImageResolutionFailure(description, str(exc))

            if isinstance(result, ImageResolutionFailure):
                outcome.failed_descriptions.append(description)
                if on_image_failure is not None:
                    on_image_failure(result)
            else:
                outcome.placed_images.append(result)

        # The canvas has no speaker-notes target yet; notes are carried on the outcome only.
        logger.debug("Notes: %s", slide.notes)
        outcome.notes = slide.notes
        return outcome


__all__ = ["SlideMaterializer"]
