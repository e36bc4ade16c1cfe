"""
Minimal async Microsoft Graph client for SharePoint document libraries.

Responsibilities:
 - Resolve a SharePoint site (host + site name) to its site ID.
 - Resolve the site's default document library (drive).
 - Resolve a folder inside the drive, or its root.
 - List a folder's children with thumbnails.

Any non-2xx answer raises UpstreamError carrying Graph's status and payload.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import GRAPH_BASE_URL
from .errors import UpstreamError

logger = logging.getLogger(__name__)

CHILDREN_PAGE_SIZE = 100


def encode_drive_path(path: str) -> str:
    """Percent-encode each segment of a drive-relative path."""
    return "/".join(quote(p, safe="") for p in path.strip("/").split("/") if p)


class GraphClient:
    """Thin wrapper over the Graph endpoints the gallery needs."""

    def __init__(
        self,
        access_token: str,
        base_url: str = GRAPH_BASE_URL,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.base = base_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "GraphClient":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Perform a GET and raise a descriptive error on failure."""
        try:
            response = await self._client.get(url, params=params, headers=self.headers)
        except httpx.HTTPError as e:
            logger.error(f"Graph request failed: {e}")
            raise UpstreamError(f"Graph request failed: {e}")

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            logger.error(f"Graph GET failed {response.status_code}: {payload}")
            raise UpstreamError(
                f"Graph GET failed with status {response.status_code}",
                status_code=response.status_code,
                payload=payload
            )

        return response.json()

    async def get_site_id(self, host: str, site: str) -> str:
        """Return the site ID for ``https://{host}/sites/{site}``."""
        data = await self._get(f"{self.base}/sites/{host}:/sites/{quote(site, safe='')}")
        logger.info(f"Site ID resolved: {data.get('id')}")
        return data["id"]

    async def get_default_drive_id(self, site_id: str) -> str:
        """Return the ID of the site's default document library."""
        data = await self._get(f"{self.base}/sites/{site_id}/drive")
        return data["id"]

    async def get_folder_id(self, drive_id: str, folder_path: str = "") -> str:
        """Return the item ID of a folder in the drive, or of the drive root."""
        if folder_path.strip("/"):
            url = f"{self.base}/drives/{drive_id}/root:/{encode_drive_path(folder_path)}"
        else:
            url = f"{self.base}/drives/{drive_id}/root"
        data = await self._get(url)
        logger.info(f"Folder ID resolved: {data.get('id')}")
        return data["id"]

    async def list_children(self, drive_id: str, item_id: str) -> List[Dict[str, Any]]:
        """List a folder's children (raw Graph drive items) with thumbnails expanded."""
        data = await self._get(
            f"{self.base}/drives/{drive_id}/items/{item_id}/children",
            params={"$expand": "thumbnails", "$top": str(CHILDREN_PAGE_SIZE)}
        )
        return data.get("value", [])
