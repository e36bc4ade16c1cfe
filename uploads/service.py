"""
Business logic for uploading event images to Blob Storage.

Images arrive base64 encoded (bare or as data URLs), typically sent by the
Copilot Studio agent when a user shares photos of an event.
"""

import base64
import binascii
import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

from azure.storage.blob import ContentSettings

from shared.blob_client import BlobStorageService
from shared.errors import NotFoundError
from shared.images import base_name, content_type_for

logger = logging.getLogger(__name__)


def generate_file_name() -> str:
    """Unique name for an image uploaded without one."""
    return f"image_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.jpg"


def image_payload(image: Any) -> Tuple[Optional[str], Optional[str]]:
    """
    Split an upload entry into (encoded data, file name).

    Entries are ``{data|base64string, fileName?}`` objects or bare strings.
    """
    if isinstance(image, str):
        return image, None
    if isinstance(image, dict):
        return image.get("data") or image.get("base64string"), image.get("fileName")
    return None, None


def decode_image_data(data: Optional[str]) -> bytes:
    """
    Decode a data URL (``data:image/jpeg;base64,...``) or bare base64 text.

    Missing ``=`` padding and the URL-safe alphabet (``-``/``_``) are accepted.

    Raises:
        ValueError: If there is nothing to decode or the text is not base64
    """
    if not data or not isinstance(data, str):
        raise ValueError("no image data")

    if data.startswith("data:"):
        if "," not in data:
            raise ValueError("malformed data URL")
        data = data.split(",", 1)[1]

    text = "".join(data.split()).replace("-", "+").replace("_", "/").rstrip("=")
    text += "=" * (-len(text) % 4)

    try:
        content = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("invalid base64 data")

    if not content:
        raise ValueError("no image data")
    return content


class UploadService(BlobStorageService):
    """Service class for event image uploads."""

    def find_event(self, event_id: str) -> Dict[str, Any]:
        """
        Find an event in ``_index.json`` by id or folder.

        Raises:
            NotFoundError: If the event (or the index) does not exist
        """
        try:
            events = self.read_index()
        except NotFoundError as e:
            logger.error(f"Error checking event: {str(e)}")
            raise NotFoundError(f"Event {event_id} does not exist in _index.json")

        for event in events:
            if not isinstance(event, dict):
                continue
            keys = [str(event[k]) for k in ("id", "folder") if event.get(k) is not None]
            if str(event_id) in keys:
                return event

        raise NotFoundError(f"Event {event_id} does not exist in _index.json")

    def upload_image(self, folder: str, image: Any) -> Dict[str, Any]:
        """
        Upload a single image to ``{folder}/{fileName}``.

        Raises:
            ValueError: If the image data cannot be decoded
        """
        data, file_name = image_payload(image)
        content = decode_image_data(data)

        final_name = base_name(file_name) if file_name else ""
        final_name = final_name or generate_file_name()
        blob_name = f"{folder}/{final_name}"

        self.container.upload_blob(
            name=blob_name,
            data=content,
            overwrite=True,
            content_settings=ContentSettings(content_type=content_type_for(final_name))
        )

        return {
            "success": True,
            "fileName": final_name,
            "blobName": blob_name,
            "url": self.blob_url(blob_name),
        }

    async def upload_images(self, event_id: str, images: List[Any]) -> Dict[str, Any]:
        """
        Upload a batch of images for an event, one at a time.

        A failed image is recorded and the batch continues.

        Args:
            event_id: Event id or folder as listed in ``_index.json``
            images: Upload entries

        Returns:
            Summary with ``uploaded``/``total`` counts, results and errors

        Raises:
            NotFoundError: If the event does not exist
        """
        event = self.find_event(event_id)
        folder = event.get("folder") or event.get("id")

        logger.info(f"Uploading {len(images)} images for event {event_id}")

        results = []
        errors = []
        for index, image in enumerate(images, start=1):
            try:
                result = self.upload_image(folder, image)
                results.append(result)
                logger.info(f"Image {index} uploaded: {result['fileName']}")
            except Exception as e:
                error_msg = f"Error uploading image {index}: {str(e)}"
                logger.error(error_msg)
                errors.append(error_msg)

        summary = {
            "success": len(results) > 0,
            "uploaded": len(results),
            "total": len(images),
            "results": results,
            "message": f"Uploaded {len(results)} of {len(images)} images",
        }
        if errors:
            summary["errors"] = errors
        return summary
