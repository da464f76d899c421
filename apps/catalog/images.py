"""
Image asset lifecycle for storefront products.

Each asset is stored as the original upload plus resized renditions under
``images/{org}/{product}/{asset}/``. Blob writes and the product save are not
transactional: a failed rendition upload leaves orphan blobs, and deletions
remove blobs before the product record is saved. Orphans are collected by
``apps.core.tasks.maintenance.sweep_orphan_image_blobs``.
"""
import io
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from PIL import Image, UnidentifiedImageError

from apps.core.conf import storefront_setting
from apps.core.exceptions import InvalidInput, NotFound, StorageError
from apps.core.storage import BlobStore
from apps.core.utils import new_id, is_blank
from apps.catalog.models import Product
from apps.catalog.payloads import ImageInstruction
from apps.catalog.repository import CatalogRepository

logger = logging.getLogger(__name__)

IMAGE_FORMAT_MAP = {
    ".jpg": ("image/jpeg", "JPEG"),
    ".jpeg": ("image/jpeg", "JPEG"),
    ".png": ("image/png", "PNG"),
    ".gif": ("image/gif", "GIF"),
    ".webp": ("image/webp", "WEBP"),
}
DEFAULT_EXTENSION = ".jpg"


@dataclass
class ImageUpload:
    data: bytes
    content_type: Optional[str] = None
    filename: Optional[str] = None
    client_id: Optional[str] = None


def asset_base_path(org_id: str, product_id: str, asset_id: str) -> str:
    return f"images/{org_id}/{product_id}/{asset_id}/"


def product_base_path(org_id: str, product_id: str) -> str:
    return f"images/{org_id}/{product_id}/"


def sort_images(images: List[Dict]) -> List[Dict]:
    """Stable sort by display_order; equal orders keep insertion order."""
    return sorted(images, key=lambda image: image.get("display_order") or 0)


def next_display_order(images: List[Dict]) -> int:
    if not images:
        return 0
    return max(image.get("display_order") or 0 for image in images) + 1


def _file_extension(upload: ImageUpload) -> str:
    if upload.filename and "." in upload.filename:
        extension = os.path.splitext(upload.filename)[1].lower()
        if extension in IMAGE_FORMAT_MAP:
            return extension
    for extension, (content_type, _) in IMAGE_FORMAT_MAP.items():
        if content_type == upload.content_type:
            return extension
    return DEFAULT_EXTENSION


def _open_image(upload: ImageUpload) -> Image.Image:
    if not upload.data:
        raise InvalidInput("Image file cannot be empty.")
    try:
        image = Image.open(io.BytesIO(upload.data))
        image.load()
    except Image.DecompressionBombError as e:
        raise InvalidInput("Uploaded image is too large.") from e
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidInput("Uploaded file is not a readable image.") from e
    return image


def render_rendition(image: Image.Image, size, pil_format: str) -> bytes:
    """Resize to fit inside ``size`` keeping the aspect ratio."""
    rendition = image.copy()
    rendition.thumbnail(size, Image.LANCZOS)
    if pil_format == "JPEG" and rendition.mode not in ("RGB", "L"):
        rendition = rendition.convert("RGB")
    buffer = io.BytesIO()
    rendition.save(buffer, format=pil_format)
    return buffer.getvalue()


class ImageAssetManager:

    def __init__(self, repository: Optional[CatalogRepository] = None,
                 blob_store: Optional[BlobStore] = None):
        self.repository = repository or CatalogRepository()
        self.blob_store = blob_store or BlobStore()

    def _get_product(self, org_id: str, product_id: str) -> Product:
        product = self.repository.get_by_id(org_id, product_id)
        if product is None:
            raise NotFound(f"Storefront Product with ID {product_id} not found.")
        return product

    def _store_asset(self, org_id: str, product_id: str, upload: ImageUpload,
                     image: Image.Image, alt_text: str, display_order: int) -> Dict:
        """Upload the original and every rendition sequentially; no rollback on failure."""
        asset_id = new_id("IMG")
        base_path = asset_base_path(org_id, product_id, asset_id)
        extension = _file_extension(upload)
        content_type, pil_format = IMAGE_FORMAT_MAP[extension]

        asset = {
            "asset_id": asset_id,
            "original_url": self.blob_store.put(
                f"{base_path}original{extension}", upload.data, upload.content_type or content_type
            ),
        }
        for name, (width, height) in storefront_setting("IMAGE_RENDITIONS"):
            try:
                data = render_rendition(image, (width, height), pil_format)
            except (OSError, ValueError) as e:
                logger.error(f"Rendition {name} failed for asset {asset_id}; uploaded blobs left as orphans")
                raise StorageError(f"Failed to generate {name} image") from e
            try:
                asset[f"{name}_url"] = self.blob_store.put(
                    f"{base_path}{name}_{width}x{height}{extension}", data, content_type
                )
            except StorageError:
                logger.error(f"Upload of {name} rendition failed for asset {asset_id}; uploaded blobs left as orphans")
                raise

        asset["alt_text"] = alt_text
        asset["display_order"] = display_order
        logger.info(f"Stored image asset {asset_id} for product {product_id} (org {org_id})")
        return asset

    def _delete_asset_blobs(self, org_id: str, product_id: str, asset_id: str) -> None:
        deleted = self.blob_store.delete_prefix(asset_base_path(org_id, product_id, asset_id))
        logger.info(f"Image asset {asset_id} and {deleted} associated files deleted for product {product_id}")

    def add_image(
        self,
        org_id: str,
        product_id: str,
        upload: ImageUpload,
        alt_text: Optional[str] = None,
        display_order: int = 0,
    ) -> Product:
        image = _open_image(upload)
        product = self._get_product(org_id, product_id)

        if is_blank(alt_text):
            alt_text = f"{product.product_name} image"
        asset = self._store_asset(org_id, product_id, upload, image, alt_text, display_order)

        product.images = sort_images(list(product.images or []) + [asset])
        return self.repository.save(product)

    def delete_image(self, org_id: str, product_id: str, asset_id: str) -> Product:
        """Remove one asset; blobs are deleted before the product is saved."""
        product = self._get_product(org_id, product_id)
        images = list(product.images or [])
        remaining = [image for image in images if image.get("asset_id") != asset_id]

        if len(remaining) == len(images):
            logger.warning(f"Image asset {asset_id} not found in product {product_id}. No files deleted.")
            return product

        self._delete_asset_blobs(org_id, product_id, asset_id)
        product.images = remaining
        return self.repository.save(product)

    def apply_image_instructions(
        self,
        product: Product,
        instructions: List[ImageInstruction],
        files: List[ImageUpload],
    ) -> Product:
        """
        Apply delete/update/new instructions and upload ``files`` onto
        ``product.images`` without saving the product.

        New files pair with new-image instructions by client_id when the caller
        supplies them, otherwise by position.
        """
        org_id, product_id = product.organization_id, product.product_id

        # Decode every upload before touching storage
        decoded = [
            (index, upload, _open_image(upload))
            for index, upload in enumerate(files) if upload.data
        ]
        skipped = len(files) - len(decoded)
        if skipped:
            logger.warning(f"Skipped {skipped} empty image files for product {product_id}")

        current = [dict(image) for image in (product.images or [])]
        known = {image["asset_id"] for image in current}
        new_instructions = [ins for ins in instructions if ins.asset_id is None and not ins.delete]
        for instruction in instructions:
            if instruction.asset_id is not None and instruction.asset_id not in known:
                logger.debug(f"Ignoring instruction for unknown asset {instruction.asset_id}")

        # Deletes win over any update naming the same asset
        to_delete = {ins.asset_id for ins in instructions if ins.delete and ins.asset_id in known}
        updates: Dict[str, List[ImageInstruction]] = {}
        for instruction in instructions:
            if instruction.asset_id in known and instruction.asset_id not in to_delete:
                updates.setdefault(instruction.asset_id, []).append(instruction)

        for asset_id in to_delete:
            self._delete_asset_blobs(org_id, product_id, asset_id)

        # Patch in place so equal display orders keep their insertion order
        images: List[Dict] = []
        for image in current:
            if image["asset_id"] in to_delete:
                continue
            for instruction in updates.get(image["asset_id"], []):
                if not is_blank(instruction.alt_text):
                    image["alt_text"] = instruction.alt_text
                if instruction.display_order is not None:
                    image["display_order"] = instruction.display_order
            images.append(image)

        by_client_id = {ins.client_id: ins for ins in new_instructions if ins.client_id}
        for position, upload, image in decoded:
            if by_client_id:
                metadata = by_client_id.get(upload.client_id)
            else:
                metadata = new_instructions[position] if position < len(new_instructions) else None

            if metadata is not None and not is_blank(metadata.alt_text):
                alt_text = metadata.alt_text
            else:
                alt_text = f"{product.product_name} image {len(images) + 1}"
            if metadata is not None and metadata.display_order is not None:
                display_order = metadata.display_order
            else:
                display_order = next_display_order(images)

            images.append(self._store_asset(org_id, product_id, upload, image, alt_text, display_order))

        product.images = sort_images(images)
        return product

    def replace_image_set(
        self,
        org_id: str,
        product_id: str,
        instructions: List[ImageInstruction],
        files: List[ImageUpload],
    ) -> Product:
        product = self._get_product(org_id, product_id)
        self.apply_image_instructions(product, instructions, files)
        return self.repository.save(product)
