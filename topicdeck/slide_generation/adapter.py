"""Builders for Google Slides ``batchUpdate`` request payloads."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from .models import Placement

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


def new_object_id(run_prefix: str, slide_seq: int, kind: str, index: int = 0) -> str:
    return f"d_{run_prefix}_{slide_seq}_{kind}_{index}"


def parse_hex_color(value: str) -> Optional[Dict[str, float]]:
    """Return a Slides ``rgbColor`` for ``#RRGGBB`` / ``#RGB``, else ``None``."""

    match = _HEX_COLOR.match((value or "").strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    red, green, blue = (int(digits[i : i + 2], 16) / 255 for i in (0, 2, 4))
    return {"red": red, "green": green, "blue": blue}


def _element_properties(page_id: str, placement: Placement) -> dict:
    return {
        "pageObjectId": page_id,
        "size": {
            "width": {"magnitude": placement.width, "unit": "PT"},
            "height": {"magnitude": placement.height, "unit": "PT"},
        },
        "transform": {
            "scaleX": 1,
            "scaleY": 1,
            "translateX": placement.left,
            "translateY": placement.top,
            "unit": "PT",
        },
    }


def page_requests(page_id: str, background_color: str) -> List[dict]:
    requests: List[dict] = [
        {
            "createSlide": {
                "objectId": page_id,
                "slideLayoutReference": {"predefinedLayout": "BLANK"},
            }
        }
    ]
    rgb = parse_hex_color(background_color)
    if rgb is None:
        logger.warning("Unsupported background color %r; keeping the default fill", background_color)
        return requests
    requests.append(
        {
            "updatePageProperties": {
                "objectId": page_id,
                "pageProperties": {
                    "pageBackgroundFill": {"solidFill": {"color": {"rgbColor": rgb}}},
                },
                "fields": "pageBackgroundFill.solidFill.color",
            }
        }
    )
    return requests


def text_box_requests(
    object_id: str,
    page_id: str,
    text: str,
    placement: Placement,
    *,
    font_size: Optional[float] = None,
    bold: bool = False,
) -> List[dict]:
    requests: List[dict] = [
        {
            "createShape": {
                "objectId": object_id,
                "shapeType": "TEXT_BOX",
                "elementProperties": _element_properties(page_id, placement),
            }
        }
    ]
    if not text:
        return requests
    requests.append(
        {
            "insertText": {
                "objectId": object_id,
                "insertionIndex": 0,
                "text": text,
            }
        }
    )
    style: dict = {}
    fields: List[str] = []
    if font_size is not None:
        style["fontSize"] = {"magnitude": font_size, "unit": "PT"}
        fields.append("fontSize")
    if bold:
        style["bold"] = True
        fields.append("bold")
    if fields:
        requests.append(
            {
                "updateTextStyle": {
                    "objectId": object_id,
                    "textRange": {"type": "ALL"},
                    "style": style,
                    "fields": ",".join(fields),
                }
            }
        )
    return requests


def image_request(object_id: str, page_id: str, url: str, placement: Placement) -> dict:
    return {
        "createImage": {
            "objectId": object_id,
            "url": url,
            "elementProperties": _element_properties(page_id, placement),
        }
    }


def delete_request(object_id: str) -> dict:
    return {"deleteObject": {"objectId": object_id}}


__all__ = [
    "delete_request",
    "image_request",
    "new_object_id",
    "page_requests",
    "parse_hex_color",
    "text_box_requests",
]
