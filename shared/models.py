"""
Wire models exposed to the gallery UI.

Field names on the wire are camelCase; ``to_dict`` produces them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union


@dataclass
class GalleryEvent:
    id: str
    name: str
    date: Optional[str]
    description: str = ""
    gallery_url: str = ""
    type: str = "Evento"
    image_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "description": self.description,
            "galleryUrl": self.gallery_url,
            "type": self.type,
            "imageCount": self.image_count,
        }


@dataclass
class GalleryImage:
    id: str
    name: str
    url: str
    thumbnail: str
    caption: str
    size: Optional[int] = None
    last_modified: Union[datetime, str, None] = None

    def to_dict(self) -> Dict[str, Any]:
        last_modified = self.last_modified
        if isinstance(last_modified, datetime):
            last_modified = last_modified.isoformat()
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "thumbnail": self.thumbnail,
            "caption": self.caption,
            "size": self.size,
            "lastModified": last_modified,
        }
