from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class PageDimensions:
    width: float
    height: float
    unit: str = "PT"


@dataclass(frozen=True)
class Placement:
    left: float
    top: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2


@dataclass(frozen=True)
class PlacedImage:
    description: str
    url: str
    element_id: str
    placement: Placement
    candidate_rank: int  # 0-based position in the search results


@dataclass
class SlideOutcome:
    title: str
    page_id: str
    placed_images: List[PlacedImage] = field(default_factory=list)
    failed_descriptions: List[str] = field(default_factory=list)
    notes: Optional[str] = None
