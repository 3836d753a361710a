from .errors import (
    EmptyInputError,
    GenerationConfigError,
    ImageResolutionFailure,
    MaterializationError,
    OperationTimeoutError,
    PipelineError,
    RunCancelledError,
    SchemaValidationError,
    TransportError,
)
from .models import PageDimensions, PlacedImage, Placement, SlideOutcome
from .geometry import bullet_placement, format_bullets, image_placement, title_placement
from .resilience import retry_with_backoff, with_timeout
from .canvas import CanvasPort, RecordingCanvas
from .image_search import GoogleImageSearch, ImageSearch
from .image_resolver import ImageResolver
from .materializer import SlideMaterializer

__all__ = [
    "CanvasPort",
    "EmptyInputError",
    "GenerationConfigError",
    "GoogleImageSearch",
    "ImageResolutionFailure",
    "ImageResolver",
    "ImageSearch",
    "MaterializationError",
    "OperationTimeoutError",
    "PageDimensions",
    "PipelineError",
    "PlacedImage",
    "Placement",
    "RecordingCanvas",
    "RunCancelledError",
    "SchemaValidationError",
    "SlideMaterializer",
    "SlideOutcome",
    "TransportError",
    "bullet_placement",
    "format_bullets",
    "image_placement",
    "retry_with_backoff",
    "title_placement",
    "with_timeout",
]
