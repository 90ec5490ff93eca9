from __future__ import annotations
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .entries import IMAGE_NAME, AliasedField
from .geometry import to_finite

S3_KEY = AliasedField.of("s3Key", "s3Key", "s3_key", "key")
TIMESTAMP = AliasedField.of("timestamp", "timestamp", "time", "captured_at")
DETECTED_AT = AliasedField.of("detected_at", "detected_at", "detectedAt")


@dataclass(frozen=True)
class Metadata:
    image: Optional[str] = None
    s3_key: Optional[str] = None
    timestamp: Optional[str] = None
    detected_at: Optional[str] = None
    detected_at_raw: Optional[str] = None

    def is_empty(self) -> bool:
        return all(_is_blank(getattr(self, f.name)) for f in fields(self))

    def to_dict(self) -> dict:
        return {
            "image": self.image,
            "s3Key": self.s3_key,
            "timestamp": self.timestamp,
            "detected_at": self.detected_at,
            "detected_at_raw": self.detected_at_raw,
        }


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def microseconds_to_iso(value: Any) -> Optional[str]:
    '''
    Interpret a numeric value as microseconds since the Unix epoch.
    The unit is assumed, not marked in the data.
    '''
    number = to_finite(value)
    if number is None:
        return None
    millis = number / 1000
    try:
        moment = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def extract_metadata(entry: Mapping[str, Any], fallback_image: Optional[str] = None) -> Optional[Metadata]:
    """
    Pull auxiliary fields out of a raw entry.

    Returns None when the entry carries none of image/s3Key/timestamp/
    detected_at, so empty fragments never reach a merge table.
    """
    if not isinstance(entry, Mapping):
        return None

    image = IMAGE_NAME.resolve(entry)
    s3_key = S3_KEY.resolve(entry)
    timestamp = TIMESTAMP.resolve(entry)
    detected_raw = DETECTED_AT.resolve(entry)

    if all(v is None for v in (image, s3_key, timestamp, detected_raw)):
        return None

    return Metadata(
        image=_text(image) if image is not None else fallback_image,
        s3_key=_text(s3_key),
        timestamp=_text(timestamp),
        detected_at=microseconds_to_iso(detected_raw),
        detected_at_raw=_text(detected_raw),
    )


def merge_metadata(primary: Optional[Metadata], secondary: Optional[Metadata]) -> Optional[Metadata]:
    """
    Field-level merge: a field of primary is kept unless blank, in which
    case secondary fills it. Returns None when the result holds nothing.
    """
    if primary is None or primary.is_empty():
        merged = secondary
    elif secondary is None:
        merged = primary
    else:
        updates = {}
        for f in fields(Metadata):
            if _is_blank(getattr(primary, f.name)) and not _is_blank(getattr(secondary, f.name)):
                updates[f.name] = getattr(secondary, f.name)
        merged = replace(primary, **updates) if updates else primary

    if merged is None or merged.is_empty():
        return None
    return merged
