from bbox_overlay.core.merge_store import MetadataMergeStore
from bbox_overlay.core.metadata import Metadata
from bbox_overlay.core.registry import Image


def test_ingest_keys_by_name_and_index():
    store = MetadataMergeStore()
    store.ingest(Metadata(image="A.jpg", s3_key="k"), "A.jpg", 3)
    assert store.by_name["a.jpg"].s3_key == "k"
    assert store.by_index[3].s3_key == "k"


def test_first_write_wins_per_field():
    store = MetadataMergeStore()
    store.ingest(Metadata(image="a.jpg", s3_key="first"), "a.jpg", None)
    store.ingest(Metadata(image="a.jpg", s3_key="second", timestamp="t"), "a.jpg", None)
    assert store.by_name["a.jpg"] == Metadata(image="a.jpg", s3_key="first", timestamp="t")
    assert store.by_index == {}


def test_empty_metadata_is_ignored():
    store = MetadataMergeStore()
    store.ingest(None, "a.jpg", 0)
    store.ingest(Metadata(), "a.jpg", 0)
    assert store.combined(Image(0, "a.jpg")) is None


def test_combined_prefers_index_entry():
    store = MetadataMergeStore()
    store.ingest(Metadata(s3_key="by-index"), None, 0)
    store.ingest(Metadata(image="a.jpg", s3_key="by-name", timestamp="t"), None, None)
    combined = store.combined(Image(0, "a.jpg"))
    assert combined.s3_key == "by-index"
    assert combined.timestamp == "t"
    assert combined.image == "a.jpg"


def test_attach_populates_other_table_until_next_pass():
    store = MetadataMergeStore()
    meta = Metadata(s3_key="k")
    store.ingest(meta, None, 1)
    store.begin_pass()
    store.attach(meta, Image(1, "b.jpg"))
    assert store.by_name["b.jpg"].s3_key == "k"

    store.begin_pass()
    assert "b.jpg" not in store.by_name
    assert store.by_index[1].s3_key == "k"


def test_clear():
    store = MetadataMergeStore()
    store.ingest(Metadata(s3_key="k"), "a.jpg", 0)
    store.clear()
    store.begin_pass()
    assert store.by_name == {} and store.by_index == {}
