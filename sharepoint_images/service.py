"""
Business logic for gallery images stored in SharePoint document libraries.

Two entry points share the same Graph sequence (site -> drive -> folder ->
children) but differ in identity and mapping:

- shared folder links are read with the user's delegated token (OBO) and
  fall back to the item's webUrl when no download URL is returned;
- event gallery URLs are read with an app-only token and keep only items
  that have a download URL.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from shared.config import GRAPH_DEFAULT_SCOPE, GRAPH_FILES_SCOPE
from shared.graph_client import GraphClient
from shared.mappers import (
    graph_item_to_image_delegated, graph_item_to_image_app_only, sort_by_recency
)
from shared.models import GalleryImage
from shared.sharepoint_url import SharePointLocation, parse_share_link, parse_site_url
from shared.token_broker import acquire_token_on_behalf_of, acquire_app_token

logger = logging.getLogger(__name__)


class SharePointImageService:
    """Service class for SharePoint image listings."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http_client = http_client

    async def _list_folder_items(self, access_token: str, location: SharePointLocation) -> List[Dict[str, Any]]:
        async with GraphClient(access_token, http_client=self.http_client) as graph:
            site_id = await graph.get_site_id(location.host, location.site)
            drive_id = await graph.get_default_drive_id(site_id)
            folder_id = await graph.get_folder_id(drive_id, location.drive_path)
            return await graph.list_children(drive_id, folder_id)

    async def _list_images(
        self,
        access_token: str,
        location: SharePointLocation,
        mapper: Callable[[Dict[str, Any]], Optional[GalleryImage]]
    ) -> List[Dict]:
        logger.info(f"SharePoint location: host={location.host} site={location.site} folder={location.folder_path}")
        items = await self._list_folder_items(access_token, location)

        images = [image for image in (mapper(item) for item in items) if image is not None]
        logger.info(f"Found {len(images)} images in SharePoint")
        return [image.to_dict() for image in sort_by_recency(images)]

    async def list_shared_folder_images(self, user_assertion: str, share_url: str) -> List[Dict]:
        """
        List images of a shared folder link on behalf of the signed-in user.

        Raises:
            SharePointUrlError: If the link cannot be parsed
            UnauthorizedError: If no assertion is supplied
            TokenExchangeError: If the On-Behalf-Of exchange fails
            UpstreamError: If a Graph call fails
        """
        location = parse_share_link(share_url)
        token = acquire_token_on_behalf_of(user_assertion, [GRAPH_FILES_SCOPE])
        return await self._list_images(token["access_token"], location, graph_item_to_image_delegated)

    async def list_gallery_images(self, gallery_url: str) -> List[Dict]:
        """
        List images of an event gallery URL with the application identity.

        Raises:
            SharePointUrlError: If the URL cannot be parsed
            TokenExchangeError: If the client credential request fails
            UpstreamError: If a Graph call fails
        """
        location = parse_site_url(gallery_url)
        token = acquire_app_token([GRAPH_DEFAULT_SCOPE])
        return await self._list_images(token["access_token"], location, graph_item_to_image_app_only)
