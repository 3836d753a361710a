"""Fixed layout for generated slides.

Every position is a fraction of the page dimensions, queried once per run.
"""

from __future__ import annotations

from .models import PageDimensions, Placement

TITLE_FONT_SIZE = 48
TITLE_WIDTH_RATIO = 0.7
TITLE_TOP_RATIO = 0.1
BULLET_WIDTH_RATIO = 0.5
BULLET_TOP_RATIO = 0.4
TEXT_HEIGHT_RATIO = 0.2
IMAGE_TOP_RATIO = 0.6
BULLET_GLYPH = "•"


def _centered(page: PageDimensions, width: float, top: float, height: float) -> Placement:
    return Placement(left=page.width / 2 - width / 2, top=top, width=width, height=height)


def title_placement(page: PageDimensions) -> Placement:
    width = page.width * TITLE_WIDTH_RATIO
    return _centered(page, width, page.height * TITLE_TOP_RATIO, page.height * TEXT_HEIGHT_RATIO)


def bullet_placement(page: PageDimensions) -> Placement:
    width = page.width * BULLET_WIDTH_RATIO
    return _centered(page, width, page.height * BULLET_TOP_RATIO, page.height * TEXT_HEIGHT_RATIO)


def image_size(page: PageDimensions) -> float:
    return page.width * BULLET_WIDTH_RATIO / 3


def image_center_x(page: PageDimensions, index: int, count: int) -> float:
    if count == 1:
        return page.width / 2
    if count == 2:
        return page.width / 4 if index == 0 else page.width * 3 / 4
    # three images sit at 1/4, 2/4, 3/4; more spread out the same way
    return page.width * (index + 1) / (count + 1)


def image_placement(page: PageDimensions, index: int, count: int) -> Placement:
    """Square slot for image ``index`` of ``count`` on one slide."""

    if count < 1:
        raise ValueError("count must be >= 1")
    if not 0 <= index < count:
        raise ValueError(f"index {index} out of range for {count} images")

    size = image_size(page)
    if count >= 4:
        size = min(size, page.width / (count + 1) * 0.9)
    center_x = image_center_x(page, index, count)
    return Placement(
        left=center_x - size / 2,
        top=page.height * IMAGE_TOP_RATIO,
        width=size,
        height=size,
    )


def format_bullets(points) -> str:
    return "\n".join(f"{BULLET_GLYPH} {point}" for point in points)


__all__ = [
    "BULLET_GLYPH",
    "TITLE_FONT_SIZE",
    "bullet_placement",
    "format_bullets",
    "image_center_x",
    "image_placement",
    "image_size",
    "title_placement",
]
