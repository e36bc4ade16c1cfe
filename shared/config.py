"""
Environment configuration for the gallery functions.
"""

import os
from typing import Optional

from .errors import ConfigurationError

DEFAULT_TENANT_ID = "b00367e2-193a-4f48-94de-7245d45c0947"
DEFAULT_DATAVERSE_URL = "https://org4bd35fe5.crm4.dynamics.com"
DEFAULT_DATAVERSE_TABLE = "cr15b_meshevents"
DATAVERSE_API_VERSION = "9.2"

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GRAPH_DEFAULT_SCOPE = "https://graph.microsoft.com/.default"
GRAPH_FILES_SCOPE = "https://graph.microsoft.com/Files.Read.All"


def _required(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise ConfigurationError(f"{name} environment variable not set")
    return value


def get_tenant_id() -> str:
    """Get the Entra ID tenant, falling back to the gallery tenant."""
    return os.environ.get("AZURE_TENANT_ID") or DEFAULT_TENANT_ID


def get_authority() -> str:
    """Get the MSAL authority URL for the configured tenant."""
    return f"https://login.microsoftonline.com/{get_tenant_id()}"


def get_client_id() -> str:
    """Get the application (client) ID used for On-Behalf-Of exchanges."""
    return _required("AZURE_CLIENT_ID")


def get_client_secret() -> str:
    """Get the client secret used for On-Behalf-Of exchanges."""
    return _required("AZURE_CLIENT_SECRET")


def get_app_client_id() -> str:
    """Get the client ID of the app-only (client credential) registration."""
    return _required("DATAVERSE_CLIENT_ID")


def get_app_client_secret() -> str:
    """Get the client secret of the app-only registration."""
    return _required("DATAVERSE_CLIENT_SECRET")


def get_storage_connection_string() -> str:
    """Get the Blob Storage connection string."""
    value = os.environ.get("STORAGE_CONNECTION_STRING")
    if not value:
        raise ConfigurationError("Storage connection string not configured")
    return value


def get_dataverse_url() -> str:
    """Get the Dataverse environment URL (no trailing slash)."""
    return (os.environ.get("DATAVERSE_URL") or DEFAULT_DATAVERSE_URL).rstrip("/")


def get_dataverse_table() -> str:
    """Get the Dataverse entity set holding the events."""
    return os.environ.get("DATAVERSE_TABLE") or DEFAULT_DATAVERSE_TABLE


def get_dataverse_scope() -> str:
    """Get the delegated Dataverse scope requested through On-Behalf-Of."""
    return f"{get_dataverse_url()}/user_impersonation"


def get_log_level(default: str = "INFO") -> str:
    return (os.environ.get("LOG_LEVEL") or default).upper()


def get_environment_name() -> Optional[str]:
    return os.environ.get("AZURE_FUNCTIONS_ENVIRONMENT", "Development")
