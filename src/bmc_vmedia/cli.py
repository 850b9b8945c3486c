"""CLI interface for BMC virtual media inventory."""

import sys
from typing import Any, Dict, Optional

import click

from .client import DEFAULT_HTTPS_PORT, RedfishClient
from .config import resolve_connection
from .errors import ConfigError
from .tunnel import BmcTunnel
from .virtual_media import (
    format_record,
    format_virtual_media_output,
    get_virtual_media_inventory,
)


def write_report(output: str, output_text: str, output_format: str, quiet: bool) -> None:
    """Write the report to a file, adding .txt or .json when missing."""
    output_file = output
    if not output_file.endswith(('.txt', '.json')):
        ext = '.json' if output_format.lower() == 'json' else '.txt'
        output_file = f"{output_file}{ext}"

    with open(output_file, 'w') as f:
        f.write(output_text)
    if not quiet:
        click.echo(f"Report saved to: {output_file}", err=True)


@click.command()
@click.option(
    "--ip",
    envvar="BMC_IP",
    help="BMC hostname or IP address (falls back to BmcIp in the config file)",
)
@click.option(
    "--username",
    "-u",
    envvar="BMC_USERNAME",
    help="BMC username (falls back to BmcUsername in the config file)",
)
@click.option(
    "--password",
    "-p",
    envvar="BMC_PASSWORD",
    help="BMC password (falls back to BmcUserpassword in the config file)",
)
@click.option(
    "--config-file",
    "-c",
    default="config.ini",
    envvar="BMC_CONFIG_FILE",
    show_default=True,
    help="INI file with a [ConnectCfg] section holding the connection settings",
)
@click.option(
    "--port",
    default=DEFAULT_HTTPS_PORT,
    envvar="BMC_PORT",
    help="BMC HTTPS port (default: 443)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format",
)
@click.option(
    "--verify-ssl/--no-verify-ssl",
    default=True,
    help="Verify SSL certificates (default: yes)",
)
@click.option(
    "--jumphost",
    envvar="BMC_JUMPHOST",
    help="SSH jumphost to tunnel through (optional)",
)
@click.option(
    "--jumphost-user",
    envvar="BMC_JUMPHOST_USER",
    help="SSH username for jumphost (defaults to current user)",
)
@click.option(
    "--ssh-key",
    envvar="BMC_JUMPHOST_SSH_KEY",
    help="Path to SSH private key for jumphost (uses SSH agent/default keys if not specified)",
)
@click.option(
    "--ssh-password",
    envvar="BMC_JUMPHOST_SSH_PASSWORD",
    help="SSH password for jumphost (only needed if not using SSH keys)",
)
@click.option(
    "--output",
    type=click.Path(),
    metavar="FILENAME",
    help="Save report to file (extension added automatically: .txt or .json)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress progress messages (errors and the report are still shown)",
)
@click.version_option(package_name="bmc-vmedia")
def main(
    ip: Optional[str],
    username: Optional[str],
    password: Optional[str],
    config_file: str,
    port: int,
    output_format: str,
    verify_ssl: bool,
    jumphost: Optional[str],
    jumphost_user: Optional[str],
    ssh_key: Optional[str],
    ssh_password: Optional[str],
    output: Optional[str],
    quiet: bool,
) -> None:
    """List the virtual media devices of a BMC's managers and systems."""
    try:
        connection = resolve_connection(ip, username, password, config_file)
    except ConfigError as e:
        raise click.UsageError(str(e))

    host = connection["ip"]
    json_output = output_format.lower() == "json"

    def echo_record(record: Dict[str, Any]) -> None:
        click.echo(format_record(record))
        click.echo("")

    try:
        tunnel = None
        try:
            if jumphost:
                tunnel = BmcTunnel(
                    jumphost=jumphost,
                    bmc_host=host,
                    bmc_port=port,
                    jumphost_username=jumphost_user,
                    ssh_key_path=ssh_key,
                    ssh_password=ssh_password,
                )
                tunnel.start()
                client = tunnel.open_client(verify_ssl=verify_ssl)
                if not quiet:
                    click.echo(f"SSH tunnel: {tunnel}", err=True)
            else:
                client = RedfishClient(host=host, port=port, verify_ssl=verify_ssl)

            with client:
                result = get_virtual_media_inventory(
                    client,
                    connection["username"],
                    connection["password"],
                    on_record=None if json_output else echo_record,
                    quiet=quiet,
                )
        finally:
            if tunnel is not None:
                tunnel.stop()

        if not result.success:
            click.echo(f"Error: {result.error.message}", err=True)
            sys.exit(1)

        output_text = format_virtual_media_output(result.records, format=output_format)
        if json_output:
            click.echo(output_text)
        elif not result.records:
            click.echo(output_text)

        if output:
            write_report(output, output_text, output_format, quiet)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
