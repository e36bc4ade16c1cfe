"""
Mapping from provider schemas to the gallery wire models.

- Dataverse row    -> GalleryEvent
- Graph drive item -> GalleryImage (delegated and app-only variants)
- Blob + SAS URL   -> GalleryImage

Mappers return None for records without a usable URL; callers drop them.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .images import caption_for, is_image_file, base_name
from .models import GalleryEvent, GalleryImage

DOWNLOAD_URL_KEY = "@microsoft.graph.downloadUrl"

DATAVERSE_EVENT_FIELDS = [
    "cr15b_mesheventid",
    "cr15b_name",
    "cr15b_date",
    "cr15b_description",
    "cr15b_galleryurl",
    "cr15b_type",
]


def dataverse_row_to_event(row: Dict[str, Any]) -> GalleryEvent:
    """Map a ``cr15b_meshevents`` row. Image counts are computed later, by the gallery."""
    return GalleryEvent(
        id=row.get("cr15b_mesheventid"),
        name=row.get("cr15b_name"),
        date=row.get("cr15b_date"),
        description=row.get("cr15b_description") or "",
        gallery_url=row.get("cr15b_galleryurl") or "",
        type=row.get("cr15b_type") or "Evento",
        image_count=0,
    )


def _thumbnail_url(item: Dict[str, Any], sizes: Iterable[str]) -> Optional[str]:
    thumbnails = item.get("thumbnails") or []
    if not thumbnails:
        return None
    first = thumbnails[0] or {}
    for size in sizes:
        url = (first.get(size) or {}).get("url")
        if url:
            return url
    return None


def _graph_image(item: Dict[str, Any], url: Optional[str], thumbnail: Optional[str]) -> Optional[GalleryImage]:
    name = item.get("name") or ""
    if not url or not is_image_file(name):
        return None
    return GalleryImage(
        id=item.get("id"),
        name=name,
        url=url,
        thumbnail=thumbnail or url,
        caption=caption_for(name),
        size=item.get("size"),
        last_modified=item.get("lastModifiedDateTime"),
    )


def graph_item_to_image_delegated(item: Dict[str, Any]) -> Optional[GalleryImage]:
    """
    Drive item fetched with the user's delegated token.

    url: download URL, else webUrl. thumbnail: large, medium, else download URL.
    """
    download_url = item.get(DOWNLOAD_URL_KEY)
    thumbnail = _thumbnail_url(item, ("large", "medium")) or download_url
    return _graph_image(item, download_url or item.get("webUrl"), thumbnail)


def graph_item_to_image_app_only(item: Dict[str, Any]) -> Optional[GalleryImage]:
    """
    Drive item fetched with an app-only token.

    url: download URL only. thumbnail: large, else download URL.
    """
    download_url = item.get(DOWNLOAD_URL_KEY)
    thumbnail = _thumbnail_url(item, ("large",)) or download_url
    return _graph_image(item, download_url, thumbnail)


def blob_to_image(blob: Any, signed_url: Optional[str]) -> Optional[GalleryImage]:
    """Map a listed blob (BlobProperties) and its signed read URL."""
    if not signed_url:
        return None
    file_name = base_name(blob.name)
    return GalleryImage(
        id=blob.name,
        name=file_name,
        url=signed_url,
        thumbnail=signed_url,
        caption=caption_for(file_name),
        size=getattr(blob, "size", None),
        last_modified=getattr(blob, "last_modified", None),
    )


def _recency_key(image: GalleryImage) -> datetime:
    value = image.last_modified
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            value = None
    if not isinstance(value, datetime):
        return datetime.min.replace(tzinfo=timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def sort_by_recency(images: List[GalleryImage]) -> List[GalleryImage]:
    """Most recently modified first."""
    return sorted(images, key=_recency_key, reverse=True)
