from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Sequence

import google_auth_httplib2
import httplib2
from dotenv import load_dotenv
from google_auth_oauthlib.flow import InstalledAppFlow
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.http import HttpRequest

from .adapter import delete_request, image_request, page_requests, text_box_requests
from .canvas import _SlideCursor
from .models import PageDimensions, Placement

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/presentations"]
_DEFAULT_CLIENT_SECRET_NAME = "client_secret.json"
_DEFAULT_TOKEN_NAME = "token.json"
_EMU_PER_PT = 12700


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _default_token_path() -> Path:
    env_path = os.environ.get("GOOGLE_SLIDES_TOKEN_FILE")
    if env_path:
        return Path(env_path)
    return _repo_root() / _DEFAULT_TOKEN_NAME


def _find_client_secret() -> Optional[Path]:
    env_path = os.environ.get("GOOGLE_CLIENT_SECRET_FILE")
    if env_path and Path(env_path).exists():
        return Path(env_path)
    for pattern in ("client_secret_*.json", _DEFAULT_CLIENT_SECRET_NAME, "credentials.json"):
        for candidate in _repo_root().glob(pattern):
            if candidate.exists():
                return candidate
    return None


def _refresh_if_needed(creds: Credentials, token_path: Path | None = None) -> Credentials:
    if creds.expired and creds.refresh_token:
        creds.refresh(Request())
        if token_path:
            token_path.write_text(creds.to_json(), encoding="utf-8")
    return creds


def _load_credentials(token_path: Path, client_secret_path: Path) -> Credentials:
    creds: Optional[Credentials] = None
    if token_path.exists():
        try:
            creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
        except ValueError:
            logger.warning("Ignoring unreadable token file %s", token_path)
            creds = None
    if creds and creds.valid:
        return creds
    if creds and creds.expired and creds.refresh_token:
        return _refresh_if_needed(creds, token_path)
    flow = InstalledAppFlow.from_client_secrets_file(str(client_secret_path), SCOPES)
    refreshed = flow.run_local_server(port=0)
    token_path.write_text(refreshed.to_json(), encoding="utf-8")
    return refreshed


def resolve_credentials(
    *,
    token_path: Path | None = None,
    client_secret_path: Path | None = None,
    credentials_dict: Optional[dict] = None,
    credentials_obj: Optional[Credentials] = None,
) -> Credentials:
    load_dotenv()
    creds: Optional[Credentials] = None
    if credentials_obj:
        creds = credentials_obj
    elif credentials_dict:
        creds = Credentials(**credentials_dict)
    else:
        token = token_path or _default_token_path()
        client_secret = client_secret_path or _find_client_secret()
        if not client_secret or not client_secret.exists():
            raise FileNotFoundError(
                "Google OAuth client secret not found. Set GOOGLE_CLIENT_SECRET_FILE or place client_secret_*.json at repo root."
            )
        creds = _load_credentials(token, client_secret)
        token_path = token
    if not creds:
        raise RuntimeError("Unable to obtain Google Slides credentials")
    return _refresh_if_needed(creds, token_path)


def build_slides_service(creds: Credentials) -> object:
    """Build a Slides client whose requests each get their own HTTP connection.

    httplib2 connections are not thread-safe, and timed-out calls keep running
    on their worker thread while the next call starts.
    """

    def _build_request(_http, *args, **kwargs):
        fresh = google_auth_httplib2.AuthorizedHttp(creds, http=httplib2.Http())
        return HttpRequest(fresh, *args, **kwargs)

    authorized = google_auth_httplib2.AuthorizedHttp(creds, http=httplib2.Http())
    return build("slides", "v1", http=authorized, requestBuilder=_build_request, cache_discovery=False)


def send_batch_requests(
    presentation_id: str,
    requests: Sequence[dict],
    *,
    service: object | None = None,
    credentials_obj: Optional[Credentials] = None,
) -> dict:
    if not presentation_id:
        raise ValueError("presentation_id is required")
    if not requests:
        raise ValueError("requests must be a non-empty sequence")
    if service is None:
        service = build_slides_service(resolve_credentials(credentials_obj=credentials_obj))
    body = {"requests": list(requests)}
    response = service.presentations().batchUpdate(presentationId=presentation_id, body=body).execute()
    return json.loads(json.dumps(response))


class GoogleSlidesCanvas:
    """Canvas backed by an existing Google Slides presentation.

    Each canvas operation is one ``batchUpdate`` call, so a failed image never
    rolls back the text already placed on the slide.
    """

    def __init__(
        self,
        presentation_id: str,
        *,
        service: object | None = None,
        credentials_obj: Optional[Credentials] = None,
        credentials_dict: Optional[dict] = None,
        run_prefix: Optional[str] = None,
    ) -> None:
        if not presentation_id:
            raise ValueError("presentation_id is required")
        self.presentation_id = presentation_id
        if service is None:
            creds = resolve_credentials(credentials_obj=credentials_obj, credentials_dict=credentials_dict)
            service = build_slides_service(creds)
        self._service = service
        self._cursor = _SlideCursor(run_prefix)
        self._page: Optional[PageDimensions] = None

    def _send(self, requests: Sequence[dict]) -> dict:
        logger.debug("batchUpdate %s with %d requests", self.presentation_id, len(requests))
        return send_batch_requests(self.presentation_id, requests, service=self._service)

    def page_dimensions(self) -> PageDimensions:
        if self._page is None:
            presentation = (
                self._service.presentations()
                .get(presentationId=self.presentation_id, fields="pageSize")
                .execute()
            )
            size = presentation.get("pageSize") or {}
            width = size.get("width") or {}
            height = size.get("height") or {}
            divisor = _EMU_PER_PT if (width.get("unit") or "EMU") == "EMU" else 1
            self._page = PageDimensions(
                width=float(width.get("magnitude", 0)) / divisor,
                height=float(height.get("magnitude", 0)) / divisor,
            )
            logger.info(
                "Presentation %s page size: %.0fx%.0f PT",
                self.presentation_id,
                self._page.width,
                self._page.height,
            )
        return self._page

    def create_page(self, background_color: str, title: str) -> str:
        page_id = self._cursor.next_page()
        logger.debug("Creating page %s for %r", page_id, title)
        self._send(page_requests(page_id, background_color))
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
        self._send(text_box_requests(object_id, page_id, text, placement, font_size=font_size, bold=bold))
        return object_id

    def create_embedded_image_element(self, url: str, placement: Placement) -> str:
        page_id, object_id = self._cursor.next_element("image")
        self._send([image_request(object_id, page_id, url, placement)])
        return object_id

    def delete_element(self, element_id: str) -> None:
        self._send([delete_request(element_id)])


__all__ = [
    "GoogleSlidesCanvas",
    "build_slides_service",
    "resolve_credentials",
    "send_batch_requests",
]
