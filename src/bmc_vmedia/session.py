"""Redfish session lifecycle: login, logout and a scoped session."""

import logging
from contextlib import contextmanager
from typing import Dict, Iterator

import click
import requests

from .client import AUTH_TOKEN_HEADER, RedfishClient
from .errors import SessionError


logger = logging.getLogger(__name__)

SESSIONS_ENDPOINT = "/redfish/v1/SessionService/Sessions"


def create_session(client: RedfishClient, username: str, password: str) -> Dict[str, str]:
    """
    Log in to the BMC and install the session token on the client.

    Args:
        client: RedfishClient pointed at the BMC
        username: BMC account name
        password: BMC account password

    Returns:
        Dictionary with the session "token" and its "location"

    Raises:
        requests.HTTPError: If the BMC rejects the login
        SessionError: If the BMC returns no token
    """
    response = client.post(
        SESSIONS_ENDPOINT,
        {"UserName": username, "Password": password},
    )
    response.raise_for_status()

    token = response.headers.get(AUTH_TOKEN_HEADER)
    if not token:
        raise SessionError(f"No {AUTH_TOKEN_HEADER} header in session response from {client.host}")
    location = response.headers.get("Location", "")

    client.set_token(token)
    logger.info("Session created on %s: %s", client.host, location)
    return {"token": token, "location": location}


def delete_session(client: RedfishClient, session: Dict[str, str]) -> bool:
    """
    Log out of the BMC.

    Failures are reported on stderr rather than raised so they never hide
    the outcome of the work done inside the session.

    Returns:
        True if the BMC confirmed the deletion
    """
    location = session.get("location")
    try:
        if not location:
            click.echo("Warning: session has no location, cannot log out", err=True)
            return False
        response = client.delete(location)
        if not response.ok:
            click.echo(
                f"Warning: failed to delete session {location} (HTTP {response.status_code})",
                err=True,
            )
            return False
        logger.info("Session deleted on %s: %s", client.host, location)
        return True
    except requests.RequestException as e:
        click.echo(f"Warning: failed to delete session {location}: {e}", err=True)
        return False
    finally:
        client.set_token(None)


@contextmanager
def bmc_session(client: RedfishClient, username: str, password: str) -> Iterator[Dict[str, str]]:
    """Open a session for the duration of the block and always close it."""
    session = create_session(client, username, password)
    try:
        yield session
    finally:
        delete_session(client, session)
