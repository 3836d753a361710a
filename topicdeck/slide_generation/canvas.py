"""Canvas port used by the materializer, plus an in-memory implementation."""

from __future__ import annotations

import threading
import uuid
from typing import Dict, List, Optional, Protocol, runtime_checkable

from .adapter import (
    delete_request,
    image_request,
    new_object_id,
    page_requests,
    text_box_requests,
)
from .models import PageDimensions, Placement


DEFAULT_PAGE = PageDimensions(width=720.0, height=405.0)


@runtime_checkable
class CanvasPort(Protocol):
    def page_dimensions(self) -> PageDimensions: ...

    def create_page(self, background_color: str, title: str) -> str: ...

    def create_text_element(
        self,
        text: str,
        placement: Placement,
        *,
        font_size: Optional[float] = None,
        bold: bool = False,
    ) -> str: ...

    def create_embedded_image_element(self, url: str, placement: Placement) -> str: ...

    def delete_element(self, element_id: str) -> None: ...


class _SlideCursor:
    """Tracks the current page and hands out object IDs for its elements."""

    def __init__(self, run_prefix: Optional[str] = None) -> None:
        self.run_prefix = run_prefix or uuid.uuid4().hex[:8]
        self.slide_seq = 0
        self.page_id: Optional[str] = None
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

    def next_page(self) -> str:
        with self._lock:
            self.slide_seq += 1
            self._counters = {}
            self.page_id = new_object_id(self.run_prefix, self.slide_seq, "page")
            return self.page_id

    def next_element(self, kind: str) -> tuple[str, str]:
        with self._lock:
            if self.page_id is None:
                raise RuntimeError("create_page must be called before adding elements")
            index = self._counters.get(kind, 0)
            self._counters[kind] = index + 1
            return self.page_id, new_object_id(self.run_prefix, self.slide_seq, kind, index)


class RecordingCanvas:
    """Canvas that only records the Slides requests it would send.

    Used for dry runs; ``requests`` can be replayed later with a real
    ``batchUpdate``.
    """

    def __init__(self, page: PageDimensions = DEFAULT_PAGE, *, run_prefix: Optional[str] = None) -> None:
        self.page = page
        self.requests: List[dict] = []
        self.pages: List[dict] = []
        self.elements: Dict[str, dict] = {}
        self._cursor = _SlideCursor(run_prefix)

    def page_dimensions(self) -> PageDimensions:
        return self.page

    def create_page(self, background_color: str, title: str) -> str:
        page_id = self._cursor.next_page()
        self.requests.extend(page_requests(page_id, background_color))
        self.pages.append({"objectId": page_id, "title": title, "backgroundColor": background_color})
        return page_id

    def create_text_element(
        self,
        text: str,
        placement: Placement,
        *,
        font_size: Optional[float] = None,
        bold: bool = False,
    ) -> str:
        page_id, object_id = self._cursor.next_element("text")
        self.requests.extend(
            text_box_requests(object_id, page_id, text, placement, font_size=font_size, bold=bold)
        )
        self.elements[object_id] = {"type": "TEXT", "pageId": page_id, "text": text, "placement": placement}
        return object_id

    def create_embedded_image_element(self, url: str, placement: Placement) -> str:
        page_id, object_id = self._cursor.next_element("image")
        self.requests.append(image_request(object_id, page_id, url, placement))
        self.elements[object_id] = {"type": "IMAGE", "pageId": page_id, "url": url, "placement": placement}
        return object_id

    def delete_element(self, element_id: str) -> None:
        self.requests.append(delete_request(element_id))
        self.elements.pop(element_id, None)


__all__ = ["CanvasPort", "DEFAULT_PAGE", "RecordingCanvas"]
