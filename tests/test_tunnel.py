"""Tests for the BMC SSH tunnel."""

import pytest
from unittest.mock import MagicMock, patch

from bmc_vmedia.client import RedfishClient
from bmc_vmedia.tunnel import BmcTunnel


@pytest.fixture
def forwarder():
    with patch("bmc_vmedia.tunnel.SSHTunnelForwarder") as forwarder_class:
        instance = MagicMock()
        instance.local_bind_port = 54321
        forwarder_class.return_value = instance
        yield forwarder_class


def test_tunnel_defaults_to_redfish_port(forwarder):
    """Test the BMC side defaults to the HTTPS port and nothing opens eagerly."""
    tunnel = BmcTunnel(jumphost="bastion.example.com", bmc_host="10.1.2.3")

    assert tunnel.bmc_port == 443
    assert tunnel.local_port is None
    forwarder.assert_not_called()


def test_start_forwards_random_local_port(forwarder):
    """Test the forwarder binds a free local port and targets the BMC."""
    tunnel = BmcTunnel(
        jumphost="bastion.example.com",
        bmc_host="10.1.2.3",
        bmc_port=8443,
        jumphost_username="ops",
        ssh_key_path="/home/ops/.ssh/id_ed25519",
    )

    assert tunnel.start() == 54321

    kwargs = forwarder.call_args[1]
    assert kwargs["ssh_address_or_host"] == ("bastion.example.com", 22)
    assert kwargs["remote_bind_address"] == ("10.1.2.3", 8443)
    assert kwargs["local_bind_address"] == ("127.0.0.1", 0)
    assert kwargs["ssh_pkey"] == "/home/ops/.ssh/id_ed25519"
    assert "ssh_password" not in kwargs
    assert str(tunnel) == "localhost:54321 -> bastion.example.com -> 10.1.2.3:8443"


def test_password_auth(forwarder):
    """Test a jumphost password is used when no key is given."""
    BmcTunnel(
        jumphost="bastion.example.com",
        bmc_host="10.1.2.3",
        ssh_password="secretpass",
    ).start()

    kwargs = forwarder.call_args[1]
    assert kwargs["ssh_password"] == "secretpass"
    assert "ssh_pkey" not in kwargs


def test_open_client_targets_local_end(forwarder):
    """Test the client goes to the tunnel and keeps the BMC Host header."""
    with BmcTunnel(jumphost="bastion.example.com", bmc_host="10.1.2.3") as tunnel:
        client = tunnel.open_client(verify_ssl=False)

    assert isinstance(client, RedfishClient)
    assert client.root_url == "https://127.0.0.1:54321"
    assert client.session.headers["Host"] == "10.1.2.3"
    assert client.verify_ssl is False
    forwarder.return_value.stop.assert_called_once()


def test_open_client_requires_start():
    """Test asking for a client before the tunnel is up is an error."""
    tunnel = BmcTunnel(jumphost="bastion.example.com", bmc_host="10.1.2.3")

    with pytest.raises(RuntimeError):
        tunnel.open_client()


def test_stop_after_failed_start(forwarder):
    """Test stop tears down a forwarder whose start raised."""
    forwarder.return_value.start.side_effect = RuntimeError("gateway unreachable")
    tunnel = BmcTunnel(jumphost="bastion.example.com", bmc_host="10.1.2.3")

    with pytest.raises(RuntimeError):
        tunnel.start()
    tunnel.stop()
    tunnel.stop()

    forwarder.return_value.stop.assert_called_once()
    assert tunnel.forwarder is None
