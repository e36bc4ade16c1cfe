"""
HTTP client for the gallery endpoints.

Used by the gallery session to call the proxies in sequence. All methods are
async; any non-2xx answer becomes a GalleryLoadError, since the gallery only
distinguishes "loaded" from "could not load".
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)

AUTH_ME_PATH = "/.auth/me"


class GalleryLoadError(Exception):
    """Raised when events or images could not be loaded."""
    pass


class GalleryApiClient:
    """
    Client for the gallery proxies of a Static Web App.

    A session can be passed in; otherwise one is opened per call.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.headers = headers or {}

    async def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        session = self.session or aiohttp.ClientSession()
        try:
            async with session.get(url, params=params, headers=self.headers) as response:
                if response.status < 200 or response.status >= 300:
                    raise GalleryLoadError(f"HTTP error! status: {response.status}")
                return await response.json()
        except aiohttp.ClientError as e:
            raise GalleryLoadError(f"Request to {path} failed: {e}") from e
        finally:
            if self.session is None:
                await session.close()

    async def wait_for_auth(self, max_attempts: int = 20, interval: float = 0.5) -> Optional[Dict[str, Any]]:
        """
        Poll the platform auth endpoint until a client principal shows up.

        Returns:
            The client principal, or None after ``max_attempts`` polls
        """
        for attempt in range(max_attempts):
            try:
                auth_data = await self._get_json(AUTH_ME_PATH)
                principal = (auth_data or {}).get("clientPrincipal") if isinstance(auth_data, dict) else None
                if principal:
                    logger.info(f"waitForAuth: user authenticated {principal.get('userDetails')}")
                    return principal
            except (GalleryLoadError, ValueError) as e:
                logger.warning(f"waitForAuth: error reading auth state: {e}")

            if attempt < max_attempts - 1:
                await asyncio.sleep(interval)

        logger.warning("waitForAuth: could not determine authentication state")
        return None

    async def list_blob_events(self) -> List[Dict[str, Any]]:
        events = await self._get_json("/api/blob-events")
        logger.info(f"Events loaded from Blob Storage: {len(events)}")
        return events

    async def list_blob_images(self, folder: str) -> List[Dict[str, Any]]:
        images = await self._get_json("/api/blob-images", params={"folder": folder})
        logger.info(f"Images loaded: {len(images)}")
        return images

    async def list_dataverse_events(self) -> List[Dict[str, Any]]:
        return await self._get_json("/api/events")

    async def list_sharepoint_images(self, event: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Images of a Dataverse event, read from its SharePoint gallery URL."""
        return await self._get_json(
            f"/api/events/{event['id']}/images",
            params={"galleryUrl": event.get("galleryUrl") or ""}
        )
