from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from typing import List

from .entries import BoundingBox, normalize_entry
from .errors import EmptyBatchError, EntryError, PayloadParseError
from .metadata import extract_metadata

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


@dataclass
class ParsedBatch:
    source: str
    boxes: List[BoundingBox] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def skip_message(entry_index: int, reason: str) -> str:
    return f"Skipped entry {entry_index + 1}: {reason}"


def parse_payload(raw_text: str, source: str) -> ParsedBatch:
    """
    Decode one JSON payload (a single entry or a list of entries) into
    canonical boxes. Bad entries are skipped and reported; the batch only
    fails as a whole on invalid JSON or when nothing survives.
    """
    try:
        payload = json.loads(raw_text, parse_constant=_reject_constant)
    except ValueError as e:
        raise PayloadParseError(f"Invalid JSON ({source}): {e}") from e
    except RecursionError as e:
        raise PayloadParseError(f"Invalid JSON ({source}): nesting too deep") from e

    entries = payload if isinstance(payload, list) else [payload]
    batch = ParsedBatch(source=source)

    for idx, entry in enumerate(entries):
        try:
            box = normalize_entry(entry, source, idx)
        except EntryError as e:
            batch.warnings.append(skip_message(idx, str(e)))
            continue
        box.metadata = extract_metadata(entry, box.image_name)
        batch.boxes.append(box)

    logger.debug("Parsed %d of %d entries from %s", len(batch.boxes), len(entries), source)

    if not batch.boxes:
        raise EmptyBatchError(f"No valid bounding boxes found in {source}.", batch.warnings)
    return batch
