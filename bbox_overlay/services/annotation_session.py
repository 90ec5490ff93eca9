"""
Annotation session for bbox-overlay.
Owns the image registry, the box list and the metadata merge tables, and
re-resolves every box whenever any of them changes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
import itertools
import time

from cachetools import LRUCache

from .interfaces import IAnnotationSession, IConfigService, IEventBus, ILogger, Events
from ..core.entries import BoundingBox
from ..core.errors import EmptyBatchError, PayloadParseError
from ..core.ingest import parse_payload
from ..core.merge_store import MetadataMergeStore
from ..core.metadata import Metadata
from ..core.palette import DEFAULT_FILL_ALPHA, DEFAULT_PALETTE, color_for, hex_to_rgba
from ..core.registry import ImageRegistry, ImageSource
from ..core.render import BoxSummary, ImageView, OverlayRect, RenderPlan
from ..core.resolver import Resolution, resolve_image

NOTHING_TO_PARSE = "Nothing to parse. Paste JSON before loading."


@dataclass
class IngestionResult:
    """Outcome of one ingestion call, for the diagnostics surface."""
    source: str
    added: List[BoundingBox] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.added)


class AnnotationSession(IAnnotationSession):
    """Single-threaded session state; every mutation ends with a resolution pass."""

    def __init__(self, logger: ILogger, config_service: IConfigService,
                 event_bus: Optional[IEventBus] = None):
        self._logger = logger
        self._config_service = config_service
        self._event_bus = event_bus

        self._registry = ImageRegistry()
        self._generation = 0
        self._boxes: List[BoundingBox] = []
        self._uids = itertools.count()
        self._merge_store = MetadataMergeStore()
        self._resolution_cache: LRUCache = LRUCache(
            maxsize=config_service.get_setting("resolution_cache_size", 4096)
        )

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------
    @property
    def registry(self) -> ImageRegistry:
        return self._registry

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def boxes(self) -> Tuple[BoundingBox, ...]:
        return tuple(self._boxes)

    @property
    def merge_store(self) -> MetadataMergeStore:
        return self._merge_store

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    def load_images(self, sources: Iterable[ImageSource]) -> None:
        # build fully before swapping so a pass never sees a partial batch
        registry = ImageRegistry.from_sources(sources)
        self._replace_registry(registry)
        self._logger.info("Loaded images", count=len(registry))
        self._publish(Events.IMAGES_LOADED, registry)
        self.resolve_all()

    def clear_images(self) -> None:
        self._replace_registry(ImageRegistry())
        self._logger.info("Cleared images")
        self._publish(Events.IMAGES_CLEARED)
        self.resolve_all()

    def _replace_registry(self, registry: ImageRegistry) -> None:
        self._registry = registry
        self._generation += 1
        self._resolution_cache.clear()

    # ------------------------------------------------------------------
    # Boxes
    # ------------------------------------------------------------------
    def ingest_text(self, raw_text: str, source_label: str) -> IngestionResult:
        """
        Parse one payload and append its valid boxes. Never raises for bad
        input; failures come back in the result.
        """
        result = IngestionResult(source=source_label)
        try:
            batch = parse_payload(raw_text, source_label)
        except PayloadParseError as e:
            result.error = str(e)
            self._logger.warning("Rejected payload", source=source_label, reason=str(e))
            return self._report(result)
        except EmptyBatchError as e:
            result.error = str(e)
            result.warnings = e.warnings
            self._logger.warning("No boxes in payload", source=source_label, skipped=len(e.warnings))
            return self._report(result)

        config = self._config_service
        palette = config.get_setting("palette", DEFAULT_PALETTE)
        alpha = config.get_setting("fill_alpha", DEFAULT_FILL_ALPHA)

        start = len(self._boxes)
        for offset, box in enumerate(batch.boxes):
            box.uid = next(self._uids)
            box.color = color_for(start + offset, palette)
            box.fill = hex_to_rgba(box.color, alpha)
            self._boxes.append(box)
            self._merge_store.ingest(box.metadata, box.image_name, box.image_index)

        result.added = list(batch.boxes)
        result.warnings = list(batch.warnings)
        if batch.warnings:
            result.error = " ".join(batch.warnings)
            for warning in batch.warnings:
                self._logger.warning(warning, source=source_label)

        self._logger.info("Ingested boxes", source=source_label, added=len(batch.boxes),
                          skipped=len(batch.warnings))
        self.resolve_all()
        self._publish(Events.BOXES_INGESTED, result)
        return self._report(result)

    def ingest_pasted(self, raw_text: str) -> IngestionResult:
        label = self._config_service.get_setting("pasted_source_label", "pasted JSON")
        if not raw_text or not raw_text.strip():
            return self._report(IngestionResult(source=label, error=NOTHING_TO_PARSE))
        return self.ingest_text(raw_text.strip(), label)

    def ingest_files(self, paths: Iterable[Path]) -> List[IngestionResult]:
        """Ingest annotation files strictly in the order given."""
        results = []
        for path in paths:
            path = Path(path)
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                message = f"Could not read {path.name}: {e}"
                self._logger.error(message)
                results.append(self._report(IngestionResult(source=path.name, error=message)))
                continue
            results.append(self.ingest_text(text, path.name))
        return results

    def clear_boxes(self) -> None:
        self._boxes = []
        self._merge_store.clear()
        self._resolution_cache.clear()
        self._logger.info("Cleared boxes")
        self._publish(Events.BOXES_CLEARED)
        self.resolve_all()

    def clear_session(self) -> None:
        self.clear_images()
        self.clear_boxes()
        self._publish(Events.SESSION_CLEARED)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def _resolve(self, box: BoundingBox) -> Optional[Resolution]:
        cache_key = (box.uid, self._generation)
        if cache_key in self._resolution_cache:
            return self._resolution_cache[cache_key]
        resolution = resolve_image(box.image_name, box.image_index, self._registry)
        self._resolution_cache[cache_key] = resolution
        return resolution

    def resolve_all(self) -> int:
        """Recompute every box's target against the current registry; returns matches."""
        started = time.perf_counter()
        self._merge_store.begin_pass()

        matched = 0
        for box in self._boxes:
            box.dynamic_warnings = []
            resolution = self._resolve(box)
            box.matched = resolution is not None
            if resolution is None:
                box.resolved_image_name = None
                box.resolved_image_index = None
                continue

            matched += 1
            box.resolved_image_name = resolution.image.name
            box.resolved_image_index = resolution.image.index
            if resolution.note:
                box.dynamic_warnings.append(resolution.note)
            self._merge_store.attach(box.metadata, resolution.image)

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._logger.log_performance(
            "resolution pass", elapsed_ms,
            boxes=len(self._boxes), matched=matched, generation=self._generation,
        )
        self._publish(Events.RESOLUTION_COMPLETED, {"boxes": len(self._boxes), "matched": matched})
        return matched

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------
    def metadata_for_image(self, index: int) -> Optional[Metadata]:
        image = self._registry.at(index)
        if image is None:
            return None
        return self._merge_store.combined(image)

    def boxes_for_image(self, index: int) -> List[BoundingBox]:
        return [b for b in self._boxes if b.matched and b.resolved_image_index == index]

    def render_plan(self) -> RenderPlan:
        views = {
            image.index: ImageView(
                index=image.index,
                name=image.name,
                byte_size=image.byte_size,
                metadata=self._merge_store.combined(image),
            )
            for image in self._registry
        }
        summaries = []
        for position, box in enumerate(self._boxes, start=1):
            if box.matched and box.resolved_image_index in views:
                views[box.resolved_image_index].overlays.append(OverlayRect.for_box(box, position))
            summaries.append(BoxSummary.for_box(box, position))
        return RenderPlan(images=list(views.values()), boxes=summaries)

    def _report(self, result: IngestionResult) -> IngestionResult:
        self._publish(Events.DIAGNOSTICS_REPORTED, result)
        return result

    def _publish(self, event_type: str, data=None) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event_type, data)
