from apps.core.tasks.maintenance import sweep_orphan_image_blobs

__all__ = ["sweep_orphan_image_blobs"]
