"""epublifier — turn an ordered list of web pages into one EPUB."""

from epublifier.book.models import BookSpec
from epublifier.errors import (
    AssemblyError,
    EpublifierError,
    ExtractionError,
    FetchError,
    SanitizationError,
    ValidationError,
    WriteError,
)
from epublifier.pipeline import BookPipeline, PipelineState, create_book

__all__ = [
    "AssemblyError",
    "BookPipeline",
    "BookSpec",
    "EpublifierError",
    "ExtractionError",
    "FetchError",
    "PipelineState",
    "SanitizationError",
    "ValidationError",
    "WriteError",
    "create_book",
]
