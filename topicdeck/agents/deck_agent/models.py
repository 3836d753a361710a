"""Pydantic models that shape the generated deck."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Slide(BaseModel):
    """One generated slide; immutable once validated, sequences included."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    title: str = Field(description="Slide heading.")
    speech: str = Field(description="Narration for the presenter, at least three lines.")
    bullet_points: Tuple[str, ...] = Field(description="Short points shown on the slide, in order.")
    image_descriptions: Tuple[str, ...] = Field(
        alias="image",
        description="One description of the image subject per bullet point; never a URL.",
    )
    notes: str = Field(description="Speaker notes.")
    background_color: str = Field(description="Light background color as a #RRGGBB hex code.")
    duration_hint: str = Field(alias="duration", description="Suggested time to spend on the slide.")


class Deck(BaseModel):
    """Top-level container; slide order is presentation order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    slides: Tuple[Slide, ...]

    @classmethod
    def response_schema(cls) -> Dict[str, Any]:
        """JSON schema for structured-output requests, keyed by wire names."""

        return cls.model_json_schema(by_alias=True)


__all__ = ["Deck", "Slide"]
