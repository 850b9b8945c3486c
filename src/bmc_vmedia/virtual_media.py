"""Virtual media discovery and formatting."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

import click
import requests

from .client import RedfishClient
from .errors import SessionError, TraversalError, classify_exception
from .session import bmc_session


logger = logging.getLogger(__name__)

SERVICE_ROOT = "/redfish/v1/"

METADATA_FIELDS = frozenset([
    "Description",
    "@odata.context",
    "@odata.id",
    "@odata.type",
    "@odata.etag",
])


@dataclass
class InventoryResult:
    """Outcome of a virtual media inventory run."""

    success: bool
    records: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[TraversalError] = None


def strip_metadata(resource: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a resource without its protocol metadata fields."""
    return {key: value for key, value in resource.items() if key not in METADATA_FIELDS}


def _link(resource: Dict[str, Any], name: str) -> str:
    # Raises KeyError/TypeError when the link is absent or malformed
    return resource[name]["@odata.id"]


def _member_links(collection: Dict[str, Any]) -> List[str]:
    return [member["@odata.id"] for member in collection.get("Members", [])]


def iter_virtual_media(client: RedfishClient, quiet: bool = False) -> Iterator[Dict[str, Any]]:
    """
    Walk the Redfish tree and yield virtual media records as they are found.

    Managers are visited before Systems. Members without a VirtualMedia link
    are skipped.

    Args:
        client: RedfishClient holding a session token
        quiet: Suppress the notice for empty VirtualMedia collections

    Yields:
        Virtual media resources with metadata fields removed

    Raises:
        requests.RequestException: On connection or HTTP errors
        KeyError: If the service root lacks Managers or Systems
    """
    root = client.get(SERVICE_ROOT)
    collection_links = [_link(root, "Managers"), _link(root, "Systems")]

    member_links: List[str] = []
    for collection_link in collection_links:
        member_links.extend(_member_links(client.get(collection_link)))

    for member_link in member_links:
        member = client.get(member_link)
        if "VirtualMedia" not in member:
            logger.debug("No VirtualMedia on %s", member_link)
            continue

        media_collection = client.get(_link(member, "VirtualMedia"))
        media_links = _member_links(media_collection)
        if not media_links:
            if not quiet:
                click.echo(f"No virtual media found under {member_link}", err=True)
            continue

        for media_link in media_links:
            yield strip_metadata(client.get(media_link))


def get_virtual_media_inventory(
    client: RedfishClient,
    username: str,
    password: str,
    on_record: Optional[Callable[[Dict[str, Any]], None]] = None,
    quiet: bool = False,
) -> InventoryResult:
    """
    Log in, enumerate virtual media and log out.

    The session is deleted on every path once it has been created. Records
    produced before a failure stay on the failed result.

    Args:
        client: RedfishClient pointed at the BMC
        username: BMC account name
        password: BMC account password
        on_record: Called with each record as soon as it is fetched
        quiet: Suppress informational messages

    Returns:
        InventoryResult with the records or a classified error
    """
    records: List[Dict[str, Any]] = []
    try:
        with bmc_session(client, username, password):
            for record in iter_virtual_media(client, quiet=quiet):
                records.append(record)
                if on_record:
                    on_record(record)
    except (requests.RequestException, SessionError, AttributeError, KeyError, TypeError, ValueError) as e:
        logger.debug("Virtual media inventory failed on %s", client.host, exc_info=True)
        return InventoryResult(success=False, records=records, error=classify_exception(e))

    return InventoryResult(success=True, records=records)


def format_record(record: Dict[str, Any]) -> str:
    """Format one virtual media record as indented text."""
    lines = [f"--- {record.get('Name') or record.get('Id') or 'Virtual Media'} ---"]
    for key, value in record.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value)
        lines.append(f"  {key}: {value}")
    return "\n".join(lines)


def format_virtual_media_output(records: List[Dict[str, Any]], format: str = "text") -> str:
    """
    Format virtual media records for display.

    Args:
        records: Virtual media records
        format: Output format ('text' or 'json')

    Returns:
        Formatted string output
    """
    if format.lower() == "json":
        return json.dumps(records, indent=2)

    if not records:
        return "No virtual media found"

    return "\n\n".join(format_record(record) for record in records)
