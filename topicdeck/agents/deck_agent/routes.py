"""Flask blueprint exposing the deck generator UI."""

from __future__ import annotations

import logging
import time
from textwrap import dedent
from typing import Optional

from flask import Blueprint, current_app, jsonify, render_template_string, request, session
from google.oauth2.credentials import Credentials

from topicdeck.config import load_settings
from topicdeck.slide_generation.canvas import CanvasPort, RecordingCanvas
from topicdeck.slide_generation.pipeline import generate_presentation
from topicdeck.slide_generation.slides_api import GoogleSlidesCanvas

from .runs import RunInProgressError, RunRecord, RunRegistry

logger = logging.getLogger(__name__)

deck_bp = Blueprint("deck", __name__, url_prefix="/deck")


_PAGE = dedent(
    """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="utf-8" />
        <title>Topic to Deck</title>
        <style>
            body { font-family: system-ui, Arial, sans-serif; margin: 24px; max-width: 720px; }
            input[type=text] { width: 100%; padding: 6px; }
            label { font-weight: 600; display:block; margin-top: 12px; }
            progress { width: 100%; margin-top: 16px; }
            .speech { background: #f7f7f9; border: 1px solid #ddd; padding: 8px; margin-top: 12px; white-space: pre-wrap; }
            .error { color: #b00020; }
        </style>
        <script>
        let pollTimer = null;
        async function poll(runId){
            const res = await fetch('{{ url_for("deck.run_status", run_id="RUN") }}'.replace('RUN', runId));
            const run = await res.json();
            document.getElementById('progress').value = run.progress;
            document.getElementById('speech').textContent = run.transcript;
            document.getElementById('error').textContent = run.error || '';
            if(run.status === 'running' || run.status === 'pending'){
                pollTimer = setTimeout(() => poll(runId), 1000);
            }
        }
        async function startRun(e){
            e.preventDefault();
            const topic = document.getElementById('topic').value.trim();
            const presentationId = document.getElementById('presId').value.trim();
            if(!topic){ return; }
            const res = await fetch('{{ url_for("deck.start_run") }}', {
                method: 'POST', headers: { 'Content-Type': 'application/json' },
                body: JSON.stringify({ topic, presentationId })
            });
            const payload = await res.json();
            if(!res.ok){ document.getElementById('error').textContent = payload.error; return; }
            clearTimeout(pollTimer);
            poll(payload.runId);
        }
        </script>
    </head>
    <body>
        <h2>Generate a deck</h2>
        <form onsubmit="startRun(event)">
            <label for="topic">Topic</label>
            <input id="topic" type="text" placeholder="Enter your topic here" />
            <label for="presId">Presentation ID</label>
            <input id="presId" type="text" value="{{ presentation_id or '' }}" />
            <p><button type="submit">Generate slides</button></p>
        </form>
        <progress id="progress" max="100" value="0"></progress>
        <div id="error" class="error"></div>
        <div class="speech"><strong>Speech:</strong><br /><span id="speech"></span></div>
    </body>
    </html>
    """
)


def _registry() -> RunRegistry:
    registry = current_app.extensions.get("topicdeck_runs")
    if registry is None:
        registry = RunRegistry(max_finished=current_app.config.get("DECK_MAX_RUNS", 50))
        current_app.extensions["topicdeck_runs"] = registry
    return registry


def _session_credentials() -> Optional[Credentials]:
    creds_data = session.get("credentials") or {}
    if not creds_data:
        return None
    try:
        return Credentials(**creds_data)
    except TypeError:
        logger.warning("Stored session credentials are malformed")
        return None


def _default_canvas_factory(presentation_id: Optional[str], creds: Optional[Credentials]) -> CanvasPort:
    if current_app.config.get("DECK_DRY_RUN"):
        return RecordingCanvas()
    return GoogleSlidesCanvas(presentation_id, credentials_obj=creds)


@deck_bp.route("", methods=["GET"])
@deck_bp.route("/", methods=["GET"])
def deck_page():
    return render_template_string(_PAGE, presentation_id=request.args.get("presentationId"))


@deck_bp.route("/runs", methods=["POST"])
def start_run():
    data = request.get_json(force=True, silent=True) or {}
    topic = (data.get("topic") or "").strip()
    presentation_id = (data.get("presentationId") or "").strip() or None
    dry_run = bool(current_app.config.get("DECK_DRY_RUN"))

    if not topic:
        return jsonify({"error": "No user input provided"}), 400
    if not presentation_id and not dry_run:
        return jsonify({"error": "presentationId is required"}), 400

    creds = _session_credentials()
    if creds is None and not dry_run:
        return jsonify({"error": "Sign in with Google to write to Slides"}), 401

    config = current_app.config
    canvas_factory = config.get("DECK_CANVAS_FACTORY") or _default_canvas_factory
    generator = config.get("DECK_GENERATOR")
    settings = config.get("DECK_SETTINGS") or load_settings()
    sleep = config.get("DECK_SLEEP") or time.sleep
    try:
        canvas = canvas_factory(presentation_id, creds)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:
        logger.exception("Unable to open the Slides canvas")
        return jsonify({"error": f"Unable to open presentation: {exc}"}), 500

    def _runner(record: RunRecord) -> None:
        state = generate_presentation(
            record.topic,
            canvas=canvas,
            on_progress=record.set_progress,
            on_speech_ready=record.set_transcript,
            on_error=record.set_error,
            generator=generator,
            settings=settings,
            sleep=sleep,
            cancel_event=record.cancel_event,
        )
        record.image_failures = [failure.description for failure in state.image_failures]

    try:
        record = _registry().start(topic, _runner, presentation_id=presentation_id)
    except RunInProgressError as exc:
        return jsonify({"error": str(exc)}), 409

    logger.info("Started deck run %s for topic %r", record.run_id, topic)
    return jsonify({"runId": record.run_id, "status": record.status}), 202


@deck_bp.route("/runs/<run_id>", methods=["GET"])
def run_status(run_id: str):
    record = _registry().get(run_id)
    if record is None:
        return jsonify({"error": f"Unknown run {run_id}"}), 404
    return jsonify(record.to_dict())


@deck_bp.route("/runs/<run_id>/cancel", methods=["POST"])
def cancel_run(run_id: str):
    registry = _registry()
    if registry.get(run_id) is None:
        return jsonify({"error": f"Unknown run {run_id}"}), 404
    return jsonify({"runId": run_id, "cancelled": registry.cancel(run_id)})


__all__ = ["deck_bp"]
