"""Connection settings for the Modbus/TCP master.

Settings come from keyword arguments, a plain dict or a YAML file, and are
validated with a voluptuous schema before a master is built from them.

Example YAML:
    host: 192.168.1.10
    port: 502
    timeout_ms: 500
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import voluptuous as vol
import yaml

from .const import (
    CONF_CONNECT_TIMEOUT_MS,
    CONF_HOST,
    CONF_PORT,
    CONF_TIMEOUT_MS,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_MS,
    MAX_TIMEOUT_MS,
)

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        vol.Optional(CONF_TIMEOUT_MS, default=DEFAULT_TIMEOUT_MS): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=MAX_TIMEOUT_MS)
        ),
        vol.Optional(
            CONF_CONNECT_TIMEOUT_MS, default=DEFAULT_CONNECT_TIMEOUT_MS
        ): vol.All(vol.Coerce(int), vol.Range(min=1, max=10 * MAX_TIMEOUT_MS)),
    }
)


@dataclass(frozen=True)
class MasterConfig:
    """Validated connection settings.

    Attributes:
        host: Slave host name or IP address
        port: TCP port (default 502)
        timeout_ms: Send/receive timeout in milliseconds (default 500)
        connect_timeout_ms: Connect timeout in milliseconds (default 5000)
    """

    host: str
    port: int = DEFAULT_PORT
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MasterConfig:
        """Validate a settings dict and build a config from it.

        Raises:
            ValueError: If a key is unknown or a value is invalid
        """
        try:
            validated = CONFIG_SCHEMA(dict(data))
        except vol.Invalid as err:
            raise ValueError(f"Invalid master configuration: {err}") from err
        return cls(**validated)


def load_config(path: str | Path) -> MasterConfig:
    """Load and validate settings from a YAML file.

    Args:
        path: YAML file holding a single mapping of settings

    Raises:
        OSError: If the file cannot be read
        ValueError: If the YAML is invalid or fails validation
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as err:
            raise ValueError(f"Invalid YAML in {path}: {err}") from err

    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of settings")

    config = MasterConfig.from_dict(data)
    _LOGGER.info("Loaded master config for %s:%d from %s", config.host, config.port, path)
    return config
