from __future__ import annotations
from typing import Dict, Optional

from .metadata import Metadata, merge_metadata
from .registry import Image, normalize_name


class MetadataMergeStore:
    """
    Metadata fragments keyed by normalized image name and by image index.

    Ingested fragments persist until clear(). Fragments merged while
    resolving are rebuilt on every pass via begin_pass(), so entries keyed
    by an index of a replaced image batch do not survive the replacement.
    """

    def __init__(self):
        self._ingested_by_name: Dict[str, Metadata] = {}
        self._ingested_by_index: Dict[int, Metadata] = {}
        self.by_name: Dict[str, Metadata] = {}
        self.by_index: Dict[int, Metadata] = {}

    @staticmethod
    def _merge_into(table: Dict, key, metadata: Optional[Metadata]) -> None:
        if key is None or metadata is None:
            return
        merged = merge_metadata(table.get(key), metadata)
        if merged is not None:
            table[key] = merged

    def ingest(self, metadata: Optional[Metadata], image_name: Optional[str],
               image_index: Optional[int]) -> None:
        if metadata is None or metadata.is_empty():
            return
        name_key = normalize_name(metadata.image or image_name)
        for by_name, by_index in ((self._ingested_by_name, self._ingested_by_index),
                                  (self.by_name, self.by_index)):
            self._merge_into(by_name, name_key, metadata)
            self._merge_into(by_index, image_index, metadata)

    def begin_pass(self) -> None:
        self.by_name = dict(self._ingested_by_name)
        self.by_index = dict(self._ingested_by_index)

    def attach(self, metadata: Optional[Metadata], image: Image) -> None:
        '''Merge a resolved box's metadata under its target image.'''
        if metadata is None or metadata.is_empty():
            return
        self._merge_into(self.by_name, normalize_name(image.name), metadata)
        self._merge_into(self.by_index, image.index, metadata)

    def combined(self, image: Image) -> Optional[Metadata]:
        return merge_metadata(
            self.by_index.get(image.index),
            self.by_name.get(normalize_name(image.name)),
        )

    def clear(self) -> None:
        self._ingested_by_name.clear()
        self._ingested_by_index.clear()
        self.by_name.clear()
        self.by_index.clear()
