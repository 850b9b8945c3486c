"""Connection settings from an INI config file."""

import configparser
from pathlib import Path
from typing import Dict, Optional

from .errors import ConfigError


CONFIG_SECTION = "ConnectCfg"

# option name in the config file -> connection parameter
CONFIG_KEYS = {
    "BmcIp": "ip",
    "BmcUsername": "username",
    "BmcUserpassword": "password",
}


def read_config(config_file: str) -> Dict[str, str]:
    """
    Load connection settings from a config file.

    Args:
        config_file: Path to an INI file with a [ConnectCfg] section

    Returns:
        Dictionary keyed by "ip", "username" and "password" with the values
        present in the file. Empty if the file or section does not exist.

    Raises:
        ConfigError: If the file is not valid UTF-8 INI

    Example config.ini:
        [ConnectCfg]
        BmcIp = 10.10.10.10
        BmcUsername = USERID
        BmcUserpassword = PASSW0RD
    """
    path = Path(config_file)
    if not path.is_file():
        return {}

    parser = configparser.ConfigParser(interpolation=None)
    # Keep option names case-sensitive (BmcIp, not bmcip)
    parser.optionxform = str
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {config_file}: {e}")

    if not parser.has_section(CONFIG_SECTION):
        return {}

    settings = {}
    for option, name in CONFIG_KEYS.items():
        value = parser.get(CONFIG_SECTION, option, fallback="").strip()
        if value:
            settings[name] = value
    return settings


def resolve_connection(
    ip: Optional[str],
    username: Optional[str],
    password: Optional[str],
    config_file: str = "config.ini",
) -> Dict[str, str]:
    """
    Merge CLI values with the config file, CLI values taking precedence.

    Raises:
        ConfigError: If any of ip, username or password is still missing
    """
    given = {"ip": ip, "username": username, "password": password}
    if all(given.values()):
        return given

    settings = read_config(config_file)
    resolved = {name: value or settings.get(name) for name, value in given.items()}

    missing = [option for option, name in CONFIG_KEYS.items() if not resolved[name]]
    if missing:
        raise ConfigError(
            f"Missing connection settings: {', '.join(missing)}. "
            f"Pass --ip/--username/--password or set them in [{CONFIG_SECTION}] of {config_file}"
        )
    return resolved
