"""Error taxonomy for the book pipeline.

Every stage of the pipeline raises its own subclass of
:class:`EpublifierError`, so callers can tell *where* a run failed from the
exception type (or its ``stage`` attribute) alone.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union


class EpublifierError(Exception):
    """Base class for every error raised by the pipeline."""

    stage = "pipeline"

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url

    def __str__(self) -> str:
        message = super().__str__()
        if self.url:
            return f"[{self.stage}] {message} ({self.url})"
        return f"[{self.stage}] {message}"


class ValidationError(EpublifierError):
    """One or more required :class:`~epublifier.book.models.BookSpec` fields are missing."""

    stage = "validate"

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = tuple(fields)
        super().__init__("missing required field(s): " + ", ".join(self.fields))


class FetchError(EpublifierError):
    stage = "fetch"


class ExtractionError(EpublifierError):
    stage = "extract"


class SanitizationError(EpublifierError):
    stage = "sanitize"


class AssemblyError(EpublifierError):
    stage = "assemble"


class WriteError(EpublifierError):
    """The finished book could not be written to *path*."""

    stage = "write"

    def __init__(self, message: str, path: Union[str, Path, None] = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        message = Exception.__str__(self)
        if self.path:
            return f"[{self.stage}] {message} ({self.path})"
        return f"[{self.stage}] {message}"
