"""
Abstract interfaces for bbox-overlay services.
These interfaces define contracts for the service components so the
session can be wired with test doubles.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional
from pathlib import Path

from ..core.registry import ImageSource
from ..core.metadata import Metadata
from ..core.render import RenderPlan


class ILogger(ABC):
    """Interface for logging operations."""

    @abstractmethod
    def debug(self, message: str, **kwargs) -> None:
        """Log a debug message."""
        pass

    @abstractmethod
    def info(self, message: str, **kwargs) -> None:
        """Log an info message."""
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs) -> None:
        """Log a warning message."""
        pass

    @abstractmethod
    def error(self, message: str, exception: Optional[Exception] = None, **kwargs) -> None:
        """Log an error message."""
        pass

    def log_performance(self, operation: str, duration_ms: float, **kwargs) -> None:
        """Log how long an operation took, at debug level."""
        self.debug(f"Performance: {operation} took {duration_ms:.2f}ms", **kwargs)


class IConfigService(ABC):
    """Interface for configuration management."""

    @abstractmethod
    def load_config(self) -> Dict[str, Any]:
        """Return the active configuration as a plain dict."""
        pass

    @abstractmethod
    def save_config(self, config: Dict[str, Any]) -> bool:
        """Validate, apply and persist a configuration dict."""
        pass

    @abstractmethod
    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a specific setting value."""
        pass

    @abstractmethod
    def set_setting(self, key: str, value: Any) -> None:
        """Set a specific setting value."""
        pass


class IEventBus(ABC):
    """Interface for event-driven communication between components."""

    @abstractmethod
    def subscribe(self, event_type: str, handler: Callable) -> None:
        pass

    @abstractmethod
    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        pass

    @abstractmethod
    def publish(self, event_type: str, data: Any = None) -> None:
        pass


class IAnnotationSession(ABC):
    """Interface for the annotation session (images, boxes, merge tables)."""

    @abstractmethod
    def load_images(self, sources: Iterable[ImageSource]) -> None:
        """Replace the loaded image batch."""
        pass

    @abstractmethod
    def ingest_text(self, raw_text: str, source_label: str) -> Any:
        """Parse one JSON payload and append its boxes."""
        pass

    @abstractmethod
    def ingest_files(self, paths: Iterable[Path]) -> List[Any]:
        """Ingest annotation files in order."""
        pass

    @abstractmethod
    def metadata_for_image(self, index: int) -> Optional[Metadata]:
        """Combined metadata for a loaded image."""
        pass

    @abstractmethod
    def render_plan(self) -> RenderPlan:
        """Data for the overlay renderer and the box list."""
        pass


# Event types for the event bus
class Events:
    """Event types published by the session."""

    IMAGES_LOADED = "images.loaded"
    IMAGES_CLEARED = "images.cleared"
    BOXES_INGESTED = "boxes.ingested"
    BOXES_CLEARED = "boxes.cleared"
    SESSION_CLEARED = "session.cleared"
    RESOLUTION_COMPLETED = "resolution.completed"
    DIAGNOSTICS_REPORTED = "diagnostics.reported"
