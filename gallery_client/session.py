"""
Sequential gallery flow: wait for auth, load events, open an event, load its
images, browse them in the lightbox.
"""

import logging
from typing import Any, Dict, List, Optional

from .client import GalleryApiClient, GalleryLoadError
from .viewer import Lightbox, filter_events, find_deep_linked_event

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
READY = "ready"
ERROR = "error"

BLOB_SOURCE = "blob"
DATAVERSE_SOURCE = "dataverse"


class GallerySession:
    """
    State of one gallery page.

    ``source`` selects the backing proxies: ``blob`` (blob-events /
    blob-images) or ``dataverse`` (events / SharePoint event images).
    """

    def __init__(self, client: GalleryApiClient, source: str = BLOB_SOURCE):
        if source not in (BLOB_SOURCE, DATAVERSE_SOURCE):
            raise ValueError(f"Unknown gallery source: {source}")
        self.client = client
        self.source = source
        self.principal: Optional[Dict[str, Any]] = None
        self.events: List[Dict[str, Any]] = []
        self.events_state = IDLE
        self.current_event: Optional[Dict[str, Any]] = None
        self.images: List[Dict[str, Any]] = []
        self.images_state = IDLE
        self.lightbox = Lightbox()

    async def start(self, page_query: str = "", max_auth_attempts: int = 20, auth_interval: float = 0.5) -> None:
        """Wait for auth, load events, then open the deep-linked event if any."""
        self.principal = await self.client.wait_for_auth(max_auth_attempts, auth_interval)
        await self.load_events()

        if page_query and self.events:
            event = find_deep_linked_event(self.events, page_query)
            if event:
                logger.info(f"Deep link detected, opening event: {event.get('id')}")
                await self.select_event(event)
            else:
                logger.warning(f"Event not found for deep link: {page_query}")

    async def load_events(self) -> None:
        self.events_state = LOADING
        try:
            if self.source == BLOB_SOURCE:
                self.events = await self.client.list_blob_events()
            else:
                self.events = await self.client.list_dataverse_events()
            self.events_state = READY
        except GalleryLoadError as e:
            logger.error(f"Error loading events: {e}")
            self.events_state = ERROR

    def search(self, term: str) -> List[Dict[str, Any]]:
        """Client-side filter of the loaded events."""
        return filter_events(self.events, term)

    async def select_event(self, event: Dict[str, Any]) -> None:
        self.current_event = event
        await self.load_images()

    async def load_images(self) -> None:
        self.images = []
        self.lightbox = Lightbox()
        self.images_state = LOADING
        try:
            if self.source == BLOB_SOURCE:
                self.images = await self.client.list_blob_images(self.current_event.get("folder") or self.current_event["id"])
            else:
                self.images = await self.client.list_sharepoint_images(self.current_event)
            self.lightbox = Lightbox(self.images)
            self.images_state = READY
        except GalleryLoadError as e:
            logger.error(f"Error loading images: {e}")
            self.images_state = ERROR

    def show_event_selector(self) -> None:
        self.current_event = None
        self.images = []
        self.lightbox = Lightbox()
        self.images_state = IDLE
