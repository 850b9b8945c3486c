"""Error types and classification of traversal failures."""

from dataclasses import dataclass
from typing import Optional

import requests


INVALID_CREDENTIALS_MESSAGE = "Invalid credentials: check the BMC username and password."
GENERIC_HINT = "Please check if the arguments are correct or the server status."


class SessionError(RuntimeError):
    """Raised when the BMC accepts a login but hands back no usable session."""


class ConfigError(ValueError):
    """Raised when connection parameters cannot be resolved."""


@dataclass
class TraversalError:
    """A classified failure: either an HTTP error response or a local/transport one."""

    kind: str
    message: str
    status_code: Optional[int] = None


def _extended_resolution(response: requests.Response) -> Optional[str]:
    # Redfish error body: {"error": {"@Message.ExtendedInfo": [{"Resolution": ...}]}}
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not isinstance(error, dict):
        return None
    info = error.get("@Message.ExtendedInfo")
    if not info or not isinstance(info, list) or not isinstance(info[0], dict):
        return None
    return info[0].get("Resolution")


def classify_http_error(response: requests.Response) -> TraversalError:
    """
    Turn an HTTP error response into a TraversalError.

    Args:
        response: The failed response

    Returns:
        TraversalError of kind "http"
    """
    status = response.status_code
    if status == 401:
        message = INVALID_CREDENTIALS_MESSAGE
    else:
        message = _extended_resolution(response) or f"HTTP status code {status}"
    return TraversalError(kind="http", message=message, status_code=status)


def classify_exception(exc: BaseException) -> TraversalError:
    """Turn a local or transport exception into a TraversalError."""
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return classify_http_error(exc.response)
    return TraversalError(kind="transport", message=f"{exc}. {GENERIC_HINT}")
