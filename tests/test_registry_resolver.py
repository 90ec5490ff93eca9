from bbox_overlay.core.registry import Image, ImageRegistry, ImageSource, normalize_name
from bbox_overlay.core.resolver import ONLY_IMAGE_NOTE, resolve_image


def registry(*names):
    return ImageRegistry.from_sources(ImageSource(name=n, byte_size=1) for n in names)


def test_normalize_name():
    assert normalize_name("  Photo.JPG ") == "photo.jpg"
    assert normalize_name("   ") is None
    assert normalize_name(None) is None


def test_registry_groups_duplicates_in_load_order():
    reg = registry("a.jpg", "b.jpg", "A.jpg ")
    assert [img.index for img in reg.named("A.JPG")] == [0, 2]
    assert reg.named("missing.jpg") == ()
    assert reg.names() == ["a.jpg", "b.jpg"]


def test_registry_names_missing_images():
    reg = ImageRegistry.from_sources([ImageSource(name=None), ImageSource(name="", byte_size=-5)])
    assert [img.name for img in reg] == ["image-1", "image-2"]
    assert reg.at(1).byte_size == 0
    assert reg.at(2) is None
    assert reg.at(-1) is None


def test_name_match_is_case_insensitive():
    res = resolve_image("A.JPG", None, registry("a.jpg", "b.jpg"))
    assert res.image.index == 0
    assert res.note is None


def test_name_plus_index_picks_exact_duplicate():
    reg = registry("dup.jpg", "other.jpg", "dup.jpg")
    assert resolve_image("dup.jpg", 2, reg).image.index == 2


def test_name_with_unrelated_index_falls_back_to_first_in_group():
    reg = registry("dup.jpg", "other.jpg", "dup.jpg")
    assert resolve_image("dup.jpg", 1, reg).image.index == 0
    assert resolve_image("dup.jpg", 9, reg).image.index == 0


def test_index_only():
    reg = registry("a.jpg", "b.jpg")
    assert resolve_image(None, 1, reg).image.name == "b.jpg"


def test_unknown_name_uses_index():
    reg = registry("a.jpg", "b.jpg")
    assert resolve_image("zzz.jpg", 1, reg).image.index == 1


def test_out_of_range_index_does_not_match():
    reg = registry("a.jpg", "b.jpg")
    assert resolve_image(None, 2, reg) is None
    assert resolve_image(None, -1, reg) is None


def test_single_image_heuristic():
    res = resolve_image(None, None, registry("only.png"))
    assert res.image.index == 0
    assert res.note == ONLY_IMAGE_NOTE


def test_single_image_heuristic_requires_no_name():
    assert resolve_image("other.png", None, registry("only.png")) is None
    assert resolve_image("   ", None, registry("only.png")).note == ONLY_IMAGE_NOTE


def test_single_image_heuristic_loses_to_valid_index():
    res = resolve_image(None, 0, registry("only.png"))
    assert res.note is None


def test_no_images_no_match():
    assert resolve_image(None, None, ImageRegistry()) is None
    assert resolve_image("a.jpg", 0, ImageRegistry()) is None


def test_image_is_value_type():
    assert Image(0, "a.jpg", 1) == Image(0, "a.jpg", 1)
