from __future__ import annotations
from typing import Iterable, List


class BBoxOverlayError(Exception):
    """Base class for ingestion failures."""


class PayloadParseError(BBoxOverlayError):
    """Input text is not valid JSON; the whole batch is rejected."""


class EntryError(BBoxOverlayError):
    """A single entry is structurally invalid; only that entry is skipped."""


class EmptyBatchError(BBoxOverlayError):
    """The payload parsed but no entry survived normalization."""

    def __init__(self, message: str, warnings: Iterable[str] = ()):
        super().__init__(message)
        self.warnings: List[str] = list(warnings)
