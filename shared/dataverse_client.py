"""
Async client for the Dataverse Web API (OData v4).
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import get_dataverse_url, DATAVERSE_API_VERSION
from .errors import UpstreamError

logger = logging.getLogger(__name__)


class DataverseClient:
    """Issues OData queries with a delegated bearer token."""

    def __init__(
        self,
        access_token: str,
        environment_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.base = f"{(environment_url or get_dataverse_url()).rstrip('/')}/api/data/v{DATAVERSE_API_VERSION}"
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
            "Content-Type": "application/json; charset=utf-8",
            "Prefer": 'odata.include-annotations="*"',
        }
        self._client = http_client

    async def query(
        self,
        entity_set: str,
        select: List[str],
        order_by: Optional[str] = None,
        filter_expr: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Run a single GET against an entity set.

        Returns:
            The ``value`` rows of the OData response

        Raises:
            UpstreamError: On transport failure or a non-2xx status
        """
        params = {"$select": ",".join(select)}
        if order_by:
            params["$orderby"] = order_by
        if filter_expr:
            params["$filter"] = filter_expr

        url = f"{self.base}/{entity_set}"
        client = self._client or httpx.AsyncClient(timeout=30.0)
        try:
            response = await client.get(url, params=params, headers=self.headers)
        except httpx.HTTPError as e:
            logger.error(f"Dataverse request failed: {e}")
            raise UpstreamError(f"Dataverse request failed: {e}")
        finally:
            if self._client is None:
                await client.aclose()

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            logger.error(f"Dataverse query failed {response.status_code}: {payload}")
            raise UpstreamError(
                f"Dataverse query failed with status {response.status_code}",
                status_code=response.status_code,
                payload=payload
            )

        return response.json().get("value", [])
