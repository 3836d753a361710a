"""Image search backends returning ranked image URLs for a description."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import HttpRequest

from .errors import TransportError

logger = logging.getLogger(__name__)

MAX_RESULTS = 5


class ImageSearch(Protocol):
    def search(self, query: str) -> List[str]: ...


class GoogleImageSearch:
    """Google Custom Search JSON API restricted to image results."""

    def __init__(
        self,
        api_key: str,
        engine_id: str,
        *,
        max_results: int = MAX_RESULTS,
        service: object | None = None,
    ) -> None:
        if not api_key or not engine_id:
            raise ValueError("api_key and engine_id are required for image search")
        self.api_key = api_key
        self.engine_id = engine_id
        self.max_results = max_results
        self._service = service

    def _get_service(self) -> object:
        if self._service is None:
            # fresh connection per request; abandoned searches may still be in flight
            def _build_request(_http, *args, **kwargs):
                return HttpRequest(httplib2.Http(), *args, **kwargs)

            self._service = build(
                "customsearch",
                "v1",
                developerKey=self.api_key,
                requestBuilder=_build_request,
                cache_discovery=False,
            )
        return self._service

    def search(self, query: str) -> List[str]:
        try:
            data = (
                self._get_service()
                .cse()
                .list(q=query, cx=self.engine_id, searchType="image", num=self.max_results)
                .execute()
            )
        except HttpError as exc:
            body = exc.content.decode("utf-8", errors="replace") if exc.content else ""
            raise TransportError(exc.resp.status, body, service="image search") from exc

        items = data.get("items") or []
        urls = [item["link"] for item in items[: self.max_results] if item.get("link")]
        logger.debug("Image search %r returned %d URLs", query, len(urls))
        return urls


def build_image_search(api_key: Optional[str], engine_id: Optional[str]) -> Optional[GoogleImageSearch]:
    if not api_key or not engine_id:
        logger.warning("Image search credentials missing; slides will be generated without images")
        return None
    return GoogleImageSearch(api_key, engine_id)


__all__ = ["GoogleImageSearch", "ImageSearch", "MAX_RESULTS", "build_image_search"]
