"""
Blob Storage access for the event-photos container.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import (
    BlobServiceClient,
    ContainerClient,
    BlobSasPermissions,
    generate_blob_sas,
)

from .config import get_storage_connection_string
from .errors import ConfigurationError, NotFoundError
from .images import is_image_file

logger = logging.getLogger(__name__)

CONTAINER_NAME = "event-photos"
INDEX_BLOB_NAME = "_index.json"
SAS_EXPIRY_MINUTES = 60

# Singleton instance, rebuilt if the connection string changes
_blob_service_client: Optional[Tuple[str, BlobServiceClient]] = None


def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """Split ``Key=Value;Key=Value`` into a dict. Values may contain '='."""
    settings = {}
    for part in connection_string.split(";"):
        if not part.strip() or "=" not in part:
            continue
        key, value = part.split("=", 1)
        settings[key.strip()] = value.strip()
    return settings


def get_account_credentials(connection_string: str) -> Tuple[str, str]:
    """
    Get the storage account name and shared key from a connection string.

    Raises:
        ConfigurationError: If either is missing (SAS signing needs both)
    """
    settings = parse_connection_string(connection_string)
    account_name = settings.get("AccountName")
    account_key = settings.get("AccountKey")
    if not account_name or not account_key:
        raise ConfigurationError("Storage connection string has no AccountName/AccountKey")
    return account_name, account_key


def get_blob_service_client(connection_string: Optional[str] = None) -> BlobServiceClient:
    """
    Get the Blob service client singleton.

    Returns:
        BlobServiceClient instance
    """
    global _blob_service_client

    connection_string = connection_string or get_storage_connection_string()
    if _blob_service_client is None or _blob_service_client[0] != connection_string:
        client = BlobServiceClient.from_connection_string(connection_string)
        _blob_service_client = (connection_string, client)
        logger.info("Blob service client initialized")

    return _blob_service_client[1]


def get_container_client(connection_string: Optional[str] = None) -> ContainerClient:
    """Get the client of the event-photos container."""
    return get_blob_service_client(connection_string).get_container_client(CONTAINER_NAME)


def folder_prefix(folder: str) -> str:
    cleaned = (folder or "").strip().strip("/")
    return f"{cleaned}/" if cleaned else ""


class BlobStorageService:
    """
    Base service class for the event-photos container.
    Provides index, listing and signing utilities.
    """

    def __init__(self, container: Optional[ContainerClient] = None):
        self.connection_string = get_storage_connection_string()
        self.container = container or get_container_client(self.connection_string)

    def read_index(self) -> List[Dict[str, Any]]:
        """
        Download and parse ``_index.json``.

        Returns:
            The ``events`` list of the index

        Raises:
            NotFoundError: If the index blob does not exist
            ValueError: If the index is not valid JSON or has no events list
        """
        try:
            content = self.container.get_blob_client(INDEX_BLOB_NAME).download_blob().readall()
        except ResourceNotFoundError:
            raise NotFoundError(f"{INDEX_BLOB_NAME} not found in container {CONTAINER_NAME}")

        if isinstance(content, bytes):
            content = content.decode("utf-8")
        data = json.loads(content)

        events = data.get("events") if isinstance(data, dict) else None
        if not isinstance(events, list):
            raise ValueError(f"{INDEX_BLOB_NAME} has no events list")
        return events

    def list_image_blobs(self, folder: str) -> List[Any]:
        """
        List image blobs directly under a folder prefix.

        The directory marker (a blob named exactly like the prefix) and
        non-image files are skipped.
        """
        prefix = folder_prefix(folder)
        return [
            blob for blob in self.container.list_blobs(name_starts_with=prefix)
            if blob.name != prefix and is_image_file(blob.name)
        ]

    def count_images(self, folder: str) -> int:
        return len(self.list_image_blobs(folder))

    def blob_url(self, blob_name: str) -> str:
        return f"{self.container.url.rstrip('/')}/{quote(blob_name)}"

    def generate_read_url(self, blob_name: str, now: Optional[datetime] = None) -> str:
        """
        Build a read-only SAS URL for a blob, valid for SAS_EXPIRY_MINUTES.

        Raises:
            ConfigurationError: If the connection string carries no shared key
        """
        account_name, account_key = get_account_credentials(self.connection_string)
        now = now or datetime.now(timezone.utc)

        sas_token = generate_blob_sas(
            account_name=account_name,
            container_name=CONTAINER_NAME,
            blob_name=blob_name,
            account_key=account_key,
            permission=BlobSasPermissions(read=True),
            start=now,
            expiry=now + timedelta(minutes=SAS_EXPIRY_MINUTES),
        )
        return f"{self.blob_url(blob_name)}?{sas_token}"
