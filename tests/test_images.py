"""Image asset lifecycle: upload with renditions, delete, image-set replacement."""
from unittest.mock import patch

import pytest

from apps.core.exceptions import InvalidInput, NotFound, StorageError
from apps.catalog.images import ImageUpload, asset_base_path, product_base_path
from apps.catalog.models import Product
from apps.catalog.payloads import ImageInstruction

pytestmark = pytest.mark.django_db


def _blob_names(blob_store, org_id, product_id):
    names = []
    for asset_id in blob_store.list_folders(product_base_path(org_id, product_id)):
        names.extend(blob_store.list_by_prefix(asset_base_path(org_id, product_id, asset_id)))
    return names


def _assert_sorted_and_unique(images):
    orders = [image["display_order"] for image in images]
    assert orders == sorted(orders)
    asset_ids = [image["asset_id"] for image in images]
    assert len(asset_ids) == len(set(asset_ids))


def test_add_image_stores_original_and_renditions(image_manager, blob_store, make_product, png_upload):
    make_product()

    product = image_manager.add_image("o1", "p1", png_upload())

    assert len(product.images) == 1
    asset = product.images[0]
    assert asset["asset_id"].startswith("IMG-")
    assert asset["alt_text"] == "Aspirin image"
    assert asset["display_order"] == 0
    for key in ("original_url", "thumbnail_url", "medium_url", "large_url"):
        assert asset[key]

    names = blob_store.list_by_prefix(asset_base_path("o1", "p1", asset["asset_id"]))
    assert sorted(name.rsplit("/", 1)[1] for name in names) == [
        "large_1200x1200.png",
        "medium_600x600.png",
        "original.png",
        "thumbnail_200x200.png",
    ]


def test_add_empty_image_fails_without_side_effects(image_manager, blob_store, make_product):
    make_product()
    before = Product.objects.get(product_id="p1").as_dict()

    with pytest.raises(InvalidInput):
        image_manager.add_image("o1", "p1", ImageUpload(data=b"", content_type="image/png"))

    assert _blob_names(blob_store, "o1", "p1") == []
    assert Product.objects.get(product_id="p1").as_dict() == before


def test_add_unreadable_image_is_invalid_input(image_manager, make_product):
    make_product()

    with pytest.raises(InvalidInput):
        image_manager.add_image("o1", "p1", ImageUpload(data=b"not an image", filename="x.png"))


def test_add_image_to_unknown_product(image_manager, png_upload):
    with pytest.raises(NotFound):
        image_manager.add_image("o1", "missing", png_upload())


def test_images_stay_sorted_by_display_order(image_manager, make_product, png_upload):
    make_product()

    image_manager.add_image("o1", "p1", png_upload(), display_order=5)
    image_manager.add_image("o1", "p1", png_upload(), display_order=1)
    product = image_manager.add_image("o1", "p1", png_upload(), display_order=3)

    assert [image["display_order"] for image in product.images] == [1, 3, 5]
    _assert_sorted_and_unique(product.images)


def test_delete_image_removes_every_blob_of_the_asset(image_manager, blob_store, make_product, png_upload):
    make_product()
    product = image_manager.add_image("o1", "p1", png_upload())
    kept = image_manager.add_image("o1", "p1", png_upload(), display_order=1).images[1]["asset_id"]
    asset_id = product.images[0]["asset_id"]

    product = image_manager.delete_image("o1", "p1", asset_id)

    assert blob_store.list_by_prefix(asset_base_path("o1", "p1", asset_id)) == []
    assert [image["asset_id"] for image in product.images] == [kept]
    assert len(blob_store.list_by_prefix(asset_base_path("o1", "p1", kept))) == 4


def test_delete_unknown_asset_changes_nothing(image_manager, make_product, png_upload):
    make_product()
    image_manager.add_image("o1", "p1", png_upload())

    with patch.object(image_manager.repository, "save") as save:
        product = image_manager.delete_image("o1", "p1", "IMG-unknown")

    save.assert_not_called()
    assert len(product.images) == 1


def test_delete_save_failure_leaves_stale_metadata(image_manager, blob_store, make_product, png_upload):
    make_product()
    asset_id = image_manager.add_image("o1", "p1", png_upload()).images[0]["asset_id"]

    with patch.object(image_manager.repository, "save", side_effect=StorageError("boom")):
        with pytest.raises(StorageError):
            image_manager.delete_image("o1", "p1", asset_id)

    # Blobs are gone but the stored product still references the asset
    assert blob_store.list_by_prefix(asset_base_path("o1", "p1", asset_id)) == []
    stored = Product.objects.get(product_id="p1")
    assert [image["asset_id"] for image in stored.images] == [asset_id]


def test_failed_rendition_upload_leaves_orphans(image_manager, blob_store, make_product, png_upload):
    make_product()
    real_put = blob_store.put
    calls = []

    def flaky_put(path, data, content_type):
        calls.append(path)
        if len(calls) == 3:
            raise StorageError("upload failed")
        return real_put(path, data, content_type)

    with patch.object(blob_store, "put", side_effect=flaky_put):
        with pytest.raises(StorageError):
            image_manager.add_image("o1", "p1", png_upload())

    assert len(_blob_names(blob_store, "o1", "p1")) == 2
    assert Product.objects.get(product_id="p1").images == []


def test_replace_image_set(image_manager, blob_store, make_product, png_upload):
    make_product()
    first = image_manager.add_image("o1", "p1", png_upload(), display_order=0).images[0]["asset_id"]
    product = image_manager.add_image("o1", "p1", png_upload(), display_order=1)
    second = [image["asset_id"] for image in product.images if image["asset_id"] != first][0]

    product = image_manager.replace_image_set("o1", "p1", [
        ImageInstruction(asset_id=first, delete=True),
        ImageInstruction(asset_id=second, alt_text="side view", display_order=7),
        ImageInstruction(alt_text="new front", display_order=2),
    ], [png_upload()])

    assert [image["display_order"] for image in product.images] == [2, 7]
    assert product.images[0]["alt_text"] == "new front"
    assert product.images[1]["asset_id"] == second
    assert product.images[1]["alt_text"] == "side view"
    assert blob_store.list_by_prefix(asset_base_path("o1", "p1", first)) == []
    _assert_sorted_and_unique(product.images)

    stored = Product.objects.get(product_id="p1")
    assert stored.images == product.images


def test_replace_pairs_files_by_client_id(image_manager, make_product, png_upload):
    make_product()

    product = image_manager.replace_image_set("o1", "p1", [
        ImageInstruction(alt_text="back", display_order=1, client_id="back.png"),
        ImageInstruction(alt_text="front", display_order=0, client_id="front.png"),
    ], [png_upload(client_id="front.png", filename="front.png"), png_upload(client_id="back.png", filename="back.png")])

    assert [(image["alt_text"], image["display_order"]) for image in product.images] == [("front", 0), ("back", 1)]


def test_replace_defaults_for_files_without_instructions(image_manager, make_product, png_upload):
    make_product()
    image_manager.add_image("o1", "p1", png_upload(), display_order=4)

    product = image_manager.replace_image_set("o1", "p1", [], [png_upload()])

    assert len(product.images) == 2
    assert product.images[1]["display_order"] == 5
    assert product.images[1]["alt_text"] == "Aspirin image 2"


def test_replace_with_unreadable_file_deletes_nothing(image_manager, blob_store, make_product, png_upload):
    make_product()
    asset_id = image_manager.add_image("o1", "p1", png_upload()).images[0]["asset_id"]

    with pytest.raises(InvalidInput):
        image_manager.replace_image_set("o1", "p1", [ImageInstruction(asset_id=asset_id, delete=True)],
                                        [ImageUpload(data=b"garbage", filename="bad.png")])

    assert len(blob_store.list_by_prefix(asset_base_path("o1", "p1", asset_id))) == 4


def test_editing_one_of_two_equal_orders_keeps_insertion_order(image_manager, make_product, png_upload):
    make_product()
    first = image_manager.add_image("o1", "p1", png_upload(), display_order=0).images[0]["asset_id"]
    product = image_manager.add_image("o1", "p1", png_upload(), display_order=0)
    second = product.images[1]["asset_id"]

    product = image_manager.replace_image_set("o1", "p1", [ImageInstruction(asset_id=second, alt_text="relabelled")], [])

    assert [image["asset_id"] for image in product.images] == [first, second]
    assert product.images[1]["alt_text"] == "relabelled"


def test_delete_wins_over_update_of_the_same_asset(image_manager, blob_store, make_product, png_upload):
    make_product()
    asset_id = image_manager.add_image("o1", "p1", png_upload()).images[0]["asset_id"]

    product = image_manager.replace_image_set("o1", "p1", [
        ImageInstruction(asset_id=asset_id, alt_text="renamed"),
        ImageInstruction(asset_id=asset_id, delete=True),
    ], [])

    assert product.images == []
    assert blob_store.list_by_prefix(asset_base_path("o1", "p1", asset_id)) == []


def test_oversized_image_is_invalid_input(image_manager, blob_store, make_product, png_upload):
    make_product()

    with patch("PIL.Image.MAX_IMAGE_PIXELS", 100):
        with pytest.raises(InvalidInput):
            image_manager.add_image("o1", "p1", png_upload())

    assert _blob_names(blob_store, "o1", "p1") == []
