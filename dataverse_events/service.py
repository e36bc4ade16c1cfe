"""
Business logic for events read from Dataverse.
"""

import logging
from typing import Dict, List, Optional

import httpx

from shared.config import get_dataverse_scope, get_dataverse_table
from shared.dataverse_client import DataverseClient
from shared.mappers import DATAVERSE_EVENT_FIELDS, dataverse_row_to_event
from shared.token_broker import acquire_token_on_behalf_of

logger = logging.getLogger(__name__)

ACTIVE_FILTER = "statecode eq 0"
ORDER_BY = "cr15b_date desc"


class DataverseEventService:
    """Service class for the Dataverse events proxy."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http_client = http_client

    async def list_events(self, user_assertion: str) -> List[Dict]:
        """
        List active events, newest first, on behalf of the signed-in user.

        Args:
            user_assertion: The caller's access token

        Returns:
            Events in the gallery wire shape (imageCount is always 0)

        Raises:
            UnauthorizedError: If no assertion is supplied
            TokenExchangeError: If the On-Behalf-Of exchange fails
            UpstreamError: If Dataverse rejects the query
        """
        token = acquire_token_on_behalf_of(user_assertion, [get_dataverse_scope()])

        client = DataverseClient(token["access_token"], http_client=self.http_client)
        rows = await client.query(
            get_dataverse_table(),
            select=DATAVERSE_EVENT_FIELDS,
            order_by=ORDER_BY,
            filter_expr=ACTIVE_FILTER
        )

        logger.info(f"Retrieved {len(rows)} events from Dataverse")
        return [dataverse_row_to_event(row).to_dict() for row in rows]
