"""
Business logic for events and images kept in Blob Storage.
"""

import asyncio
import logging
from typing import Any, Dict, List

from shared.blob_client import BlobStorageService
from shared.mappers import blob_to_image, sort_by_recency

logger = logging.getLogger(__name__)


def event_folder(entry: Dict[str, Any]) -> str:
    """Folder holding an event's images: ``folder``, else the event ``id``."""
    return entry.get("folder") or entry.get("id") or ""


class BlobGalleryService(BlobStorageService):
    """Service class for the blob-backed gallery."""

    async def _with_image_count(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        try:
            count = await asyncio.to_thread(self.count_images, event_folder(entry))
        except Exception as e:
            logger.error(f"Error counting images for {entry.get('id')}: {str(e)}")
            count = 0
        return {**entry, "imageCount": count}

    async def list_events(self) -> List[Dict]:
        """
        List the events of ``_index.json`` with their image counts.

        Counts are computed concurrently; a failed count is reported as 0
        instead of failing the listing.

        Returns:
            Index entries, each with an added ``imageCount``
        """
        entries = []
        for entry in self.read_index():
            if not isinstance(entry, dict) or not event_folder(entry):
                logger.warning(f"Skipping index entry without id or folder: {entry}")
                continue
            entries.append(entry)

        return list(await asyncio.gather(*(self._with_image_count(e) for e in entries)))

    async def list_images(self, folder: str) -> List[Dict]:
        """
        List the images of an event folder with signed read URLs.

        Args:
            folder: Event folder name

        Returns:
            Images, most recently modified first
        """
        images = []
        for blob in self.list_image_blobs(folder):
            image = blob_to_image(blob, self.generate_read_url(blob.name))
            if image is not None:
                images.append(image)

        logger.info(f"Found {len(images)} images in folder {folder}")
        return [image.to_dict() for image in sort_by_recency(images)]
