"""BMC virtual media inventory - CLI tool for Redfish virtual media discovery."""

__version__ = "0.1.0"

from .client import RedfishClient
from .virtual_media import InventoryResult, get_virtual_media_inventory

__all__ = ["RedfishClient", "InventoryResult", "get_virtual_media_inventory"]
