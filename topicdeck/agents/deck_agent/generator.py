"""Ask the configured LLM for a deck and validate what comes back."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, List, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from openai import APIError, APIStatusError, OpenAI
from pydantic import ValidationError

from topicdeck.config import Settings, load_settings
from topicdeck.slide_generation.errors import (
    EmptyInputError,
    GenerationConfigError,
    SchemaValidationError,
    TransportError,
)

from .models import Deck
from .prompts import RESPONSE_FORMAT_NAME, SYSTEM_PROMPT

logger = logging.getLogger(__name__)

_PROVIDERS = ("openai", "gemini")


def _extract_json_payload(text: str) -> str:
    """Strip Markdown fences around a JSON payload."""

    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
        if cleaned.lower().startswith("json"):
            cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        cleaned = cleaned.rsplit("```", 1)[0]
    return cleaned.strip()


def _validation_issues(exc: ValidationError) -> List[str]:
    issues: List[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        issues.append(f"{location}: {error.get('msg')}")
    return issues


def parse_deck(text: Optional[str]) -> Deck:
    """Validate raw model output against the Deck contract; never coerces."""

    payload = _extract_json_payload(text or "")
    if not payload:
        raise SchemaValidationError(["response did not include any content"])
    try:
        return Deck.model_validate_json(payload)
    except ValidationError as exc:
        logger.error("LLM returned invalid deck payload: %s", exc)
        raise SchemaValidationError(_validation_issues(exc)) from exc


@lru_cache(maxsize=None)
def _build_openai_client(api_key: str, timeout: float) -> OpenAI:
    # no SDK retries: a failed generation is surfaced to the caller as-is
    return OpenAI(api_key=api_key, timeout=timeout, max_retries=0)


def _message_text(content: Any) -> str:
    if isinstance(content, list):
        return "".join(getattr(part, "text", "") for part in content)
    return content or ""


def _invoke_openai(topic: str, model_name: str, settings: Settings) -> Deck:
    if not settings.openai_api_key:
        raise GenerationConfigError("OPENAI_API_KEY must be set to call OpenAI models.")
    client = _build_openai_client(settings.openai_api_key, settings.generation_timeout)
    try:
        response = client.chat.completions.create(
            model=model_name,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": topic},
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": RESPONSE_FORMAT_NAME,
                    "schema": Deck.response_schema(),
                    "strict": True,
                },
            },
        )
    except APIStatusError as exc:
        logger.error("OpenAI chat completion failed with status %s", exc.status_code)
        raise TransportError(exc.status_code, exc.response.text, service="OpenAI") from exc
    except APIError as exc:
        logger.error("OpenAI chat completion failed: %s", exc)
        raise TransportError(None, str(exc), service="OpenAI") from exc

    if not response.choices:
        raise SchemaValidationError(["response did not include any choices"])
    message = response.choices[0].message
    refusal = getattr(message, "refusal", None)
    if refusal:
        raise SchemaValidationError([f"model refused: {refusal}"])
    return parse_deck(_message_text(message.content))


def _gemini_system_instruction() -> str:
    """System prompt with the Deck schema embedded, keyed by wire names."""

    schema_json = json.dumps(Deck.response_schema(), indent=2)
    return (
        f"{SYSTEM_PROMPT}\n\n"
        "# Response Schema\n"
        "Reply with one JSON object that validates against this schema. "
        "Use exactly these property names and no others.\n"
        f"```json\n{schema_json}\n```\n"
    )


@lru_cache(maxsize=None)
def _build_gemini_model(api_key: str, model_name: str, system_instruction: str) -> genai.GenerativeModel:
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name, system_instruction=system_instruction)


def _invoke_gemini(topic: str, model_name: str, settings: Settings) -> Deck:
    if not settings.google_api_key:
        raise GenerationConfigError("GOOGLE_API_KEY must be set to call Gemini.")
    model = _build_gemini_model(settings.google_api_key, model_name, _gemini_system_instruction())
    try:
        raw = model.generate_content(
            topic,
            generation_config={"response_mime_type": "application/json"},
            request_options={"timeout": settings.generation_timeout},
        )
    except google_exceptions.GoogleAPIError as exc:
        logger.error("Gemini invocation failed: %s", exc)
        raise TransportError(getattr(exc, "code", None), str(exc), service="Gemini") from exc

    try:
        text = raw.text
    except ValueError as exc:
        # raised by the SDK when the candidate was blocked or empty
        raise SchemaValidationError([f"response did not include text output: {exc}"]) from exc
    return parse_deck(text)


def generate_deck(
    topic: str,
    *,
    provider: Optional[str] = None,
    model_name: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Deck:
    """Generate a validated deck for ``topic`` with one LLM call."""

    topic = (topic or "").strip()
    if not topic:
        raise EmptyInputError()

    settings = settings or load_settings()
    chosen = (provider or settings.provider).lower()
    if chosen not in _PROVIDERS:
        raise GenerationConfigError(f"Unknown deck provider {chosen!r}; expected one of {_PROVIDERS}")

    logger.info("Generating deck for topic %r with %s", topic, chosen)
    if chosen == "gemini":
        deck = _invoke_gemini(topic, model_name or settings.gemini_model, settings)
    else:
        deck = _invoke_openai(topic, model_name or settings.openai_model, settings)

    logger.info("Generated deck with %d slides", len(deck.slides))
    return deck


__all__ = ["generate_deck", "parse_deck"]
