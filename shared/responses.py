"""
Standard HTTP response helpers for consistent, CORS-open API responses.
"""

import json
from typing import Any, Optional, Dict, List, Union
import azure.functions as func


DEFAULT_ALLOWED_HEADERS = ["Content-Type"]


def json_serialize(obj: Any) -> str:
    """
    Serialize object to JSON, handling datetime and UUID types.
    """
    import datetime
    import uuid

    def default_serializer(o):
        if isinstance(o, (datetime.datetime, datetime.date)):
            return o.isoformat()
        if isinstance(o, uuid.UUID):
            return str(o)
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    return json.dumps(obj, default=default_serializer)


def cors_headers(
    methods: List[str],
    allowed_headers: Optional[List[str]] = None
) -> Dict[str, str]:
    """
    Build the permissive CORS headers sent with every response.

    Args:
        methods: HTTP methods the endpoint serves (OPTIONS is always added)
        allowed_headers: Request headers the browser may send

    Returns:
        Header dictionary
    """
    allow_methods = [m.upper() for m in methods]
    if "OPTIONS" not in allow_methods:
        allow_methods.append("OPTIONS")

    return {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": ", ".join(allow_methods),
        "Access-Control-Allow-Headers": ", ".join(allowed_headers or DEFAULT_ALLOWED_HEADERS),
    }


def preflight_response(headers: Dict[str, str]) -> func.HttpResponse:
    """
    Answer a CORS preflight: 200, no body, regardless of authentication.
    """
    return func.HttpResponse(
        status_code=200,
        headers=headers
    )


def success_response(
    data: Union[Dict, List, Any],
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a successful JSON response.

    Args:
        data: Response data to serialize
        status_code: HTTP status code (default: 200)
        headers: Optional additional headers

    Returns:
        Azure Functions HttpResponse
    """
    response_headers = {
        "Content-Type": "application/json",
        **(headers or {})
    }

    return func.HttpResponse(
        json_serialize(data),
        status_code=status_code,
        mimetype="application/json",
        headers=response_headers
    )


def error_response(
    error: str,
    message: str,
    status_code: int = 400,
    details: Any = None,
    hint: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create an error JSON response shaped as {error, message, details?, hint?}.

    Args:
        error: Short error title
        message: Human readable message
        status_code: HTTP status code (default: 400)
        details: Optional provider payload kept for diagnostics
        hint: Optional remediation hint
        headers: Optional additional headers

    Returns:
        Azure Functions HttpResponse with error details
    """
    error_body = {
        "error": error,
        "message": message,
    }

    if details is not None:
        error_body["details"] = details
    if hint:
        error_body["hint"] = hint

    response_headers = {
        "Content-Type": "application/json",
        **(headers or {})
    }

    return func.HttpResponse(
        json_serialize(error_body),
        status_code=status_code,
        mimetype="application/json",
        headers=response_headers
    )


def not_found_response(
    resource: str = "Resource",
    message: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a 404 Not Found response.
    """
    return error_response(
        f"{resource} not found",
        message or f"{resource} not found",
        status_code=404,
        headers=headers
    )


def unauthorized_response(
    message: str = "Authentication required",
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a 401 Unauthorized response.
    """
    return error_response("Missing token", message, status_code=401, headers=headers)


def validation_error_response(
    error: str,
    message: str,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a 400 response for a missing or malformed required field.
    """
    return error_response(error, message, status_code=400, headers=headers)


def configuration_error_response(
    message: str,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a 500 response for missing server configuration.
    """
    return error_response("Missing configuration", message, status_code=500, headers=headers)


def upstream_error_response(
    error: str,
    exc: Any,
    hint: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Relay a provider failure (UpstreamError) with its status and payload.
    """
    return error_response(
        error,
        str(exc),
        status_code=exc.response_status,
        details=exc.payload,
        hint=hint,
        headers=headers
    )


def token_exchange_error_response(
    error: str,
    exc: Any,
    hint: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Relay an Entra ID refusal (TokenExchangeError) unmodified.

    Refused grants are 401 so the client can prompt a new login; anything
    else from the token service is a 502.
    """
    return error_response(
        error,
        str(exc),
        status_code=401 if exc.is_grant_failure else 502,
        details=exc.result,
        hint=hint,
        headers=headers
    )


def internal_error_response(
    error: str,
    message: str = "Internal server error",
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a 500 Internal Server Error response.
    """
    return error_response(error, message, status_code=500, headers=headers)
