"""Orphan image sweep."""
from unittest.mock import patch

import pytest

from apps.catalog.images import asset_base_path
from apps.catalog.models import Product
from apps.core.tasks.maintenance import sweep_orphan_image_blobs

pytestmark = pytest.mark.django_db


@pytest.fixture
def swept_storage(blob_store):
    with patch("apps.core.storage.default_storage", blob_store.storage):
        yield blob_store


@pytest.fixture
def no_grace_period(settings):
    settings.STOREFRONT = {**settings.STOREFRONT, "ORPHAN_SWEEP_MIN_AGE": 0}


def test_sweep_removes_unreferenced_assets(swept_storage, no_grace_period, image_manager, make_product, png_upload):
    make_product()
    kept = image_manager.add_image("o1", "p1", png_upload()).images[0]["asset_id"]
    swept_storage.put(asset_base_path("o1", "p1", "IMG-orphan") + "original.png", b"x", "image/png")
    swept_storage.put(asset_base_path("o1", "gone", "IMG-old") + "original.png", b"x", "image/png")

    result = sweep_orphan_image_blobs.delay().get()

    assert result == {"deleted_assets": 2, "deleted_blobs": 2, "skipped_recent": 0}
    assert len(swept_storage.list_by_prefix(asset_base_path("o1", "p1", kept))) == 4
    assert swept_storage.list_by_prefix(asset_base_path("o1", "p1", "IMG-orphan")) == []


def test_sweep_is_idempotent(swept_storage, no_grace_period, make_product):
    make_product()
    swept_storage.put(asset_base_path("o1", "p1", "IMG-orphan") + "original.png", b"x", "image/png")

    first = sweep_orphan_image_blobs("o1")
    second = sweep_orphan_image_blobs("o1")

    assert first["deleted_assets"] == 1
    assert second == {"deleted_assets": 0, "deleted_blobs": 0, "skipped_recent": 0}


def test_sweep_keeps_recent_unreferenced_assets(swept_storage, make_product):
    make_product()
    swept_storage.put(asset_base_path("o1", "p1", "IMG-fresh") + "original.png", b"x", "image/png")

    result = sweep_orphan_image_blobs("o1")

    assert result == {"deleted_assets": 0, "deleted_blobs": 0, "skipped_recent": 1}
    assert len(swept_storage.list_by_prefix(asset_base_path("o1", "p1", "IMG-fresh"))) == 1


def test_sweep_during_upload_leaves_new_asset_intact(swept_storage, image_manager, make_product, png_upload):
    make_product()
    real_save = image_manager.repository.save
    sweep_results = []

    def save_after_sweep(product):
        sweep_results.append(sweep_orphan_image_blobs("o1"))
        return real_save(product)

    with patch.object(image_manager.repository, "save", side_effect=save_after_sweep):
        asset_id = image_manager.add_image("o1", "p1", png_upload()).images[0]["asset_id"]

    assert sweep_results[0]["deleted_assets"] == 0
    assert Product.objects.get(product_id="p1").images[0]["asset_id"] == asset_id
    assert len(swept_storage.list_by_prefix(asset_base_path("o1", "p1", asset_id))) == 4
