from __future__ import annotations

import pytest

from topicdeck.slide_generation.adapter import page_requests, parse_hex_color, text_box_requests
from topicdeck.slide_generation.canvas import RecordingCanvas
from topicdeck.slide_generation.models import Placement
from topicdeck.slide_generation.slides_api import GoogleSlidesCanvas

SLOT = Placement(left=10, top=20, width=100, height=50)


class _Call:
    def __init__(self, result):
        self._result = result

    def execute(self):
        return self._result


class FakePresentations:
    def __init__(self, page_size):
        self.page_size = page_size
        self.batches = []

    def get(self, presentationId, fields=None):
        return _Call({"pageSize": self.page_size})

    def batchUpdate(self, presentationId, body):
        self.batches.append((presentationId, body["requests"]))
        return _Call({"presentationId": presentationId, "replies": [{} for _ in body["requests"]]})


class FakeSlidesService:
    def __init__(self, page_size):
        self._presentations = FakePresentations(page_size)

    def presentations(self):
        return self._presentations


def test_parse_hex_color():
    assert parse_hex_color("#FF0000") == {"red": 1.0, "green": 0.0, "blue": 0.0}
    assert parse_hex_color("fff") == {"red": 1.0, "green": 1.0, "blue": 1.0}
    assert parse_hex_color("light blue") is None


def test_page_without_usable_color_keeps_default_background():
    requests = page_requests("page_1", "sky")
    assert [next(iter(r)) for r in requests] == ["createSlide"]


def test_empty_text_only_creates_the_box():
    requests = text_box_requests("t1", "page_1", "", SLOT, font_size=12)
    assert [next(iter(r)) for r in requests] == ["createShape"]


def test_recording_canvas_tracks_requests():
    canvas = RecordingCanvas(run_prefix="run1")
    page_id = canvas.create_page("#FFFFFF", "Intro")
    title_id = canvas.create_text_element("Intro", SLOT, font_size=48, bold=True)
    image_id = canvas.create_embedded_image_element("https://example.com/a.png", SLOT)
    canvas.delete_element(image_id)

    assert page_id == "d_run1_1_page_0"
    assert title_id == "d_run1_1_text_0"
    kinds = [next(iter(r)) for r in canvas.requests]
    assert kinds == [
        "createSlide",
        "updatePageProperties",
        "createShape",
        "insertText",
        "updateTextStyle",
        "createImage",
        "deleteObject",
    ]
    style = canvas.requests[4]["updateTextStyle"]
    assert style["fields"] == "fontSize,bold"
    assert image_id not in canvas.elements


def test_recording_canvas_requires_a_page_first():
    with pytest.raises(RuntimeError):
        RecordingCanvas().create_text_element("orphan", SLOT)


def test_google_canvas_reads_page_size_in_points():
    service = FakeSlidesService(
        {"width": {"magnitude": 9144000, "unit": "EMU"}, "height": {"magnitude": 5143500, "unit": "EMU"}}
    )
    canvas = GoogleSlidesCanvas("pres-1", service=service)

    page = canvas.page_dimensions()

    assert page.width == pytest.approx(720.0)
    assert page.height == pytest.approx(405.0)


def test_google_canvas_sends_one_batch_per_operation():
    service = FakeSlidesService({"width": {"magnitude": 720, "unit": "PT"}, "height": {"magnitude": 405, "unit": "PT"}})
    canvas = GoogleSlidesCanvas("pres-1", service=service, run_prefix="abc")

    canvas.create_page("#FDF6E3", "Intro")
    canvas.create_text_element("Intro", SLOT, font_size=48, bold=True)
    image_id = canvas.create_embedded_image_element("https://example.com/a.png", SLOT)

    batches = service.presentations().batches
    assert len(batches) == 3
    assert all(presentation_id == "pres-1" for presentation_id, _ in batches)
    image_request = batches[2][1][0]["createImage"]
    assert image_request["objectId"] == image_id
    assert image_request["elementProperties"]["pageObjectId"] == "d_abc_1_page_0"
    assert image_request["elementProperties"]["transform"]["translateX"] == 10


def test_google_canvas_requires_presentation_id():
    with pytest.raises(ValueError):
        GoogleSlidesCanvas("", service=FakeSlidesService({}))
