"""Redfish HTTP client for BMC communication."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import requests
from urllib3.exceptions import InsecureRequestWarning


logger = logging.getLogger(__name__)

AUTH_TOKEN_HEADER = "X-Auth-Token"
DEFAULT_HTTPS_PORT = 443


class RedfishClient:
    """Client for talking to a BMC's Redfish service with a session token."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_HTTPS_PORT,
        verify_ssl: bool = True,
        original_host: Optional[str] = None,
    ) -> None:
        """
        Initialize Redfish client.

        Args:
            host: BMC hostname or IP address (or localhost if tunneled)
            port: HTTPS port (default: 443)
            verify_ssl: Whether to verify SSL certificates
            original_host: Original BMC host for Host header (when tunneling)
        """
        self.host = host
        self.port = port
        self.verify_ssl = verify_ssl
        self.original_host = original_host or host
        self.root_url = f"https://{host}:{port}"
        self.base_url = f"{self.root_url}/redfish/v1"
        self.token: Optional[str] = None
        self.session = requests.Session()
        self.session.verify = verify_ssl

        # Set Host header to original BMC host when tunneling
        if original_host:
            self.session.headers.update({'Host': original_host})

        if not verify_ssl:
            requests.packages.urllib3.disable_warnings(InsecureRequestWarning)

    def url_for(self, link: str) -> str:
        """
        Resolve an @odata.id link to a full URL on this client's endpoint.

        Absolute URLs (e.g. a session Location header) are rebased onto
        root_url so requests keep going through the same host and port,
        which is the tunnel end when tunneling.
        """
        if link.startswith(("http://", "https://")):
            parts = urlsplit(link)
            link = parts.path or "/"
            if parts.query:
                link = f"{link}?{parts.query}"
        return f"{self.root_url}{link}"

    def set_token(self, token: Optional[str]) -> None:
        """Install or drop the session token sent with every request."""
        self.token = token
        if token:
            self.session.headers[AUTH_TOKEN_HEADER] = token
        else:
            self.session.headers.pop(AUTH_TOKEN_HEADER, None)

    def get(self, link: str) -> Dict[str, Any]:
        """
        Make a GET request to the Redfish API.

        Args:
            link: Resource link (e.g., '/redfish/v1/Managers/1/VirtualMedia')

        Returns:
            JSON response as dictionary

        Raises:
            requests.RequestException: On connection or HTTP errors
            ValueError: If the body is not valid JSON
        """
        url = self.url_for(link)
        logger.debug("GET %s", url)
        response = self.session.get(url)
        response.raise_for_status()
        return response.json()

    def post(self, link: str, payload: Dict[str, Any]) -> requests.Response:
        """POST a JSON payload and return the raw response."""
        url = self.url_for(link)
        logger.debug("POST %s", url)
        return self.session.post(url, json=payload)

    def delete(self, link: str) -> requests.Response:
        """DELETE a resource and return the raw response."""
        url = self.url_for(link)
        logger.debug("DELETE %s", url)
        return self.session.delete(url)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self) -> "RedfishClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
