# Gallery client: calls the gallery proxies and holds the page state
from .client import GalleryApiClient, GalleryLoadError
from .session import GallerySession
from .viewer import Lightbox, filter_events, event_card, find_deep_linked_event, format_event_date

__all__ = [
    "GalleryApiClient",
    "GalleryLoadError",
    "GallerySession",
    "Lightbox",
    "filter_events",
    "event_card",
    "find_deep_linked_event",
    "format_event_date",
]
