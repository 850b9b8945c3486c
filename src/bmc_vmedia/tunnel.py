"""SSH tunnel for reaching a BMC on an isolated management network."""

import logging
from typing import Any, Dict, Optional

from sshtunnel import SSHTunnelForwarder

from .client import DEFAULT_HTTPS_PORT, RedfishClient


logger = logging.getLogger(__name__)

LOCAL_HOST = "127.0.0.1"


class BmcTunnel:
    """
    Forwards a local port through a jumphost to a BMC's Redfish HTTPS port.

    Once started, open_client() returns a RedfishClient aimed at the local
    end of the tunnel that still presents the BMC's own host name.
    """

    def __init__(
        self,
        jumphost: str,
        bmc_host: str,
        bmc_port: int = DEFAULT_HTTPS_PORT,
        jumphost_port: int = 22,
        jumphost_username: Optional[str] = None,
        ssh_key_path: Optional[str] = None,
        ssh_password: Optional[str] = None,
    ) -> None:
        self.jumphost = jumphost
        self.bmc_host = bmc_host
        self.bmc_port = bmc_port
        self.jumphost_port = jumphost_port
        self.jumphost_username = jumphost_username
        self.ssh_key_path = ssh_key_path
        self.ssh_password = ssh_password
        self.forwarder: Optional[SSHTunnelForwarder] = None
        self.local_port: Optional[int] = None

    def __str__(self) -> str:
        local = f"localhost:{self.local_port}" if self.local_port else "localhost:?"
        return f"{local} -> {self.jumphost} -> {self.bmc_host}:{self.bmc_port}"

    def _ssh_auth(self) -> Dict[str, Any]:
        # Key wins over password; neither means agent/default keys
        if self.ssh_key_path:
            return {"ssh_pkey": self.ssh_key_path}
        if self.ssh_password:
            return {"ssh_password": self.ssh_password}
        return {}

    def start(self) -> int:
        """Open the tunnel on a free local port and return that port."""
        self.forwarder = SSHTunnelForwarder(
            ssh_address_or_host=(self.jumphost, self.jumphost_port),
            ssh_username=self.jumphost_username,
            remote_bind_address=(self.bmc_host, self.bmc_port),
            local_bind_address=(LOCAL_HOST, 0),
            **self._ssh_auth(),
        )
        self.forwarder.start()
        self.local_port = self.forwarder.local_bind_port
        logger.info("BMC tunnel up: %s", self)
        return self.local_port

    def open_client(self, verify_ssl: bool = True) -> RedfishClient:
        """
        Build a RedfishClient that talks to the BMC through this tunnel.

        Raises:
            RuntimeError: If the tunnel has not been started
        """
        if self.local_port is None:
            raise RuntimeError(f"Tunnel to {self.bmc_host} is not started")
        return RedfishClient(
            host=LOCAL_HOST,
            port=self.local_port,
            verify_ssl=verify_ssl,
            original_host=self.bmc_host,
        )

    def stop(self) -> None:
        """Close the tunnel; safe to call when it never fully started."""
        if self.forwarder is None:
            return
        self.forwarder.stop()
        self.forwarder = None
        self.local_port = None
        logger.info("BMC tunnel to %s closed", self.bmc_host)

    def __enter__(self) -> "BmcTunnel":
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()
