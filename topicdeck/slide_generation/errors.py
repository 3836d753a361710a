"""Exceptions raised by the deck generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


class PipelineError(Exception):
    """Base class for every pipeline failure."""


class EmptyInputError(PipelineError, ValueError):
    """Raised when the topic is blank after trimming."""

    def __init__(self, message: str = "Topic must not be empty") -> None:
        super().__init__(message)


class GenerationConfigError(PipelineError, RuntimeError):
    """Raised when a provider cannot be configured (missing key, unknown name)."""


class TransportError(PipelineError):
    """A language-model or image-search call failed at the network layer."""

    def __init__(self, status: Optional[int], body: str, *, service: str = "service") -> None:
        self.status = status
        self.body = body
        self.service = service
        super().__init__(f"{service} request failed! status: {status}, body: {body}")


class SchemaValidationError(PipelineError):
    """The generated payload does not conform to the Deck contract."""

    def __init__(self, issues: Iterable[str]):
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid deck payload"]
        super().__init__(self._format())

    def _format(self) -> str:
        lines = ["Deck validation failed:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)


class OperationTimeoutError(PipelineError, TimeoutError):
    """A bounded operation exceeded its deadline and was abandoned."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f"Request timed out after {seconds:g}s")


class MaterializationError(PipelineError):
    """A page or text placement failed; the canvas is considered unusable."""


class RunCancelledError(PipelineError):
    """The caller cancelled an in-flight run between slides."""

    def __init__(self, completed_slides: int, total_slides: int) -> None:
        self.completed_slides = completed_slides
        self.total_slides = total_slides
        super().__init__(f"Run cancelled after {completed_slides}/{total_slides} slides")


@dataclass(frozen=True)
class ImageResolutionFailure:
    """Soft failure: no candidate for ``description`` could be placed.

    Returned by the image resolver rather than raised; it never aborts a run.
    """

    description: str
    reason: str
    attempted_urls: tuple[str, ...] = ()


__all__ = [
    "EmptyInputError",
    "GenerationConfigError",
    "ImageResolutionFailure",
    "MaterializationError",
    "OperationTimeoutError",
    "PipelineError",
    "RunCancelledError",
    "SchemaValidationError",
    "TransportError",
]
