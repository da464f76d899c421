from celery import shared_task
from django.utils import timezone
from datetime import timedelta
import logging

logger = logging.getLogger(__name__)

IMAGES_ROOT = "images"


def _referenced_assets(org_id: str, product_id: str):
    from apps.catalog.repository import CatalogRepository

    product = CatalogRepository().get_by_id(org_id, product_id)
    if product is None:
        return set()
    return {image.get("asset_id") for image in product.images or []}


def _is_settled(blob_store, prefix: str, cutoff) -> bool:
    """False while the folder has blobs written after ``cutoff`` (an upload may still be saving)."""
    latest = blob_store.latest_modified(prefix)
    if latest is None:
        return True
    if timezone.is_naive(latest):
        latest = timezone.make_aware(latest)
    return latest <= cutoff


@shared_task
def sweep_orphan_image_blobs(org_id=None):
    """
    Delete asset folders no product image points at: leftovers of failed
    uploads and of deleted products. Folders younger than
    ORPHAN_SWEEP_MIN_AGE seconds are left for a later run. Safe to run repeatedly.
    """
    from apps.catalog.images import asset_base_path
    from apps.core.conf import storefront_setting
    from apps.core.storage import BlobStore

    blob_store = BlobStore()
    cutoff = timezone.now() - timedelta(seconds=storefront_setting("ORPHAN_SWEEP_MIN_AGE"))
    try:
        org_ids = [org_id] if org_id else blob_store.list_folders(IMAGES_ROOT)
        deleted_assets = 0
        deleted_blobs = 0
        skipped_recent = 0

        for org in org_ids:
            for product_id in blob_store.list_folders(f"{IMAGES_ROOT}/{org}"):
                referenced = _referenced_assets(org, product_id)
                for asset_id in blob_store.list_folders(f"{IMAGES_ROOT}/{org}/{product_id}"):
                    if asset_id in referenced:
                        continue
                    prefix = asset_base_path(org, product_id, asset_id)
                    if not _is_settled(blob_store, prefix, cutoff):
                        skipped_recent += 1
                        logger.debug(f"Skipping recent unreferenced asset {asset_id} of product {product_id}")
                        continue
                    removed = blob_store.delete_prefix(prefix)
                    if not removed:
                        continue
                    deleted_blobs += removed
                    deleted_assets += 1
                    logger.info(f"Removed orphaned image asset {asset_id} of product {product_id} (org {org})")

        result = {"deleted_assets": deleted_assets, "deleted_blobs": deleted_blobs, "skipped_recent": skipped_recent}
        logger.info(f"Orphan image sweep completed: {result}")
        return result
    except Exception as e:
        logger.error(f"Orphan image sweep failed: {str(e)}")
        raise
