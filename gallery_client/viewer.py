"""
Presentation logic of the gallery: search, event cards, deep links and the
lightbox viewer.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

TYPE_ICONS = {
    "Team Building": "🏃‍♂️",
    "Workshop": "🎓",
    "Festa": "🎉",
    "Conferenza": "🎤",
    "Networking": "🤝",
}
DEFAULT_ICON = "📅"

ITALIAN_MONTHS = [
    "gennaio", "febbraio", "marzo", "aprile", "maggio", "giugno",
    "luglio", "agosto", "settembre", "ottobre", "novembre", "dicembre",
]


def filter_events(events: List[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    """
    Events whose name, description or type contains ``term`` (case-insensitive).
    An empty term matches everything.
    """
    needle = (term or "").lower()
    return [
        event for event in events
        if needle in str(event.get("name") or "").lower()
        or needle in str(event.get("description") or "").lower()
        or needle in str(event.get("type") or "").lower()
    ]


def format_event_date(value: Optional[str]) -> str:
    """Long Italian date, e.g. ``15 settembre 2024``. Unparseable input is returned as is."""
    if not value:
        return ""
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed: date = datetime.fromisoformat(text).date()
    except ValueError:
        return value
    return f"{parsed.day} {ITALIAN_MONTHS[parsed.month - 1]} {parsed.year}"


def event_card(event: Dict[str, Any]) -> Dict[str, Any]:
    """Data shown on an event card."""
    return {
        "id": event.get("id"),
        "icon": TYPE_ICONS.get(event.get("type"), DEFAULT_ICON),
        "title": event.get("name"),
        "date": format_event_date(event.get("date")),
        "description": event.get("description") or "",
        "photos": f"{event.get('imageCount', 0)} foto",
        "type": event.get("type"),
    }


def find_deep_linked_event(events: List[Dict[str, Any]], url_or_query: str) -> Optional[Dict[str, Any]]:
    """Event named by the ``event`` query parameter of a page URL or query string."""
    query = urlparse(url_or_query).query if "://" in url_or_query else url_or_query.lstrip("?")
    event_id = (parse_qs(query).get("event") or [None])[0]
    if not event_id:
        return None
    return next((event for event in events if event.get("id") == event_id), None)


class Lightbox:
    """Full-size image viewer bounded to the current image list."""

    def __init__(self, images: Optional[List[Dict[str, Any]]] = None):
        self.images = list(images or [])
        self.index = 0
        self.is_open = False

    @property
    def current(self) -> Optional[Dict[str, Any]]:
        if not self.is_open:
            return None
        return self.images[self.index]

    @property
    def counter(self) -> str:
        return f"{self.index + 1} di {len(self.images)}"

    def open(self, index: int) -> Dict[str, Any]:
        if index < 0 or index >= len(self.images):
            raise IndexError(f"No image at position {index}")
        self.index = index
        self.is_open = True
        return self.images[index]

    def close(self) -> None:
        self.is_open = False

    def next(self) -> Optional[Dict[str, Any]]:
        if self.is_open and self.index < len(self.images) - 1:
            self.open(self.index + 1)
        return self.current

    def previous(self) -> Optional[Dict[str, Any]]:
        if self.is_open and self.index > 0:
            self.open(self.index - 1)
        return self.current

    def handle_key(self, key: str) -> bool:
        """Keyboard navigation while open. Returns True when the key was handled."""
        if not self.is_open:
            return False
        if key == "Escape":
            self.close()
        elif key == "ArrowLeft":
            self.previous()
        elif key == "ArrowRight":
            self.next()
        else:
            return False
        return True
