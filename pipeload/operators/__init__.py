"""Warehouse operators and connector resolution.

Connectors are selected from the scheme of the job's connect string, or
from an explicit ``connector`` class path.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import urlsplit

from pipeload.core.connector import Connector
from pipeload.exceptions import ConfigurationError
from pipeload.operators.netezza import NetezzaConnector
from pipeload.utils.logging import get_logger

if TYPE_CHECKING:
    from pipeload.models.job import ConnectionConfig

logger = get_logger(__name__)

# Connect-string scheme -> connector class
CONNECTOR_SCHEMES: dict[str, type[Connector]] = {
    "netezza": NetezzaConnector,
    "netezza+nzpy": NetezzaConnector,
    "jdbc:netezza": NetezzaConnector,
}


def extract_scheme(connect_string: str) -> str:
    """Pull the scheme out of a connect string.

    JDBC strings carry several scheme components (``jdbc:netezza://...``)
    so the scheme is everything before ``//``, or before the right-most
    ``:`` when there is no host part.

    Examples:
        >>> extract_scheme("jdbc:netezza://nz-host:5480/sales")
        'jdbc:netezza'
        >>> extract_scheme("netezza+nzpy://admin@nz-host/sales")
        'netezza+nzpy'
    """
    stop = connect_string.find("//")
    if stop == -1:
        stop = connect_string.rfind(":")
        if stop == -1:
            logger.warning("connector.scheme_undetermined", connection=connect_string)
            stop = len(connect_string)
    return connect_string[:stop].rstrip(":").lower()


def _load_connector_class(class_path: str) -> type[Connector]:
    module_path, _, class_name = class_path.rpartition(".")
    if not module_path:
        raise ConfigurationError(f"Connector must be a full class path, got '{class_path}'")
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(f"Failed to import connector module '{module_path}': {e}") from e
    try:
        connector_class = getattr(module, class_name)
    except AttributeError as e:
        raise ConfigurationError(
            f"Class '{class_name}' not found in module '{module_path}'"
        ) from e
    if not (isinstance(connector_class, type) and issubclass(connector_class, Connector)):
        raise ConfigurationError(f"'{class_path}' is not a Connector subclass")
    return connector_class


def _jdbc_config(connect_string: str) -> dict[str, Any]:
    # jdbc:netezza://host:port/database
    parts = urlsplit(connect_string[len("jdbc:"):])
    config: dict[str, Any] = {}
    if parts.hostname:
        config["host"] = parts.hostname
    if parts.port:
        config["port"] = parts.port
    database = parts.path.lstrip("/")
    if database:
        config["database"] = database
    return config


def build_connector_config(connection: Optional[str], options: dict[str, Any]) -> dict[str, Any]:
    """Translate a connect string plus options into connector config.

    JDBC connect strings are split into host, port and database; other
    strings are passed through as a SQLAlchemy URL. Explicit options win.
    """
    config: dict[str, Any] = {}
    if connection:
        if connection.lower().startswith("jdbc:"):
            config.update(_jdbc_config(connection))
        else:
            config["connection_string"] = connection
    config.update(options)
    return config


def resolve_connector(connection_config: ConnectionConfig) -> Connector:
    """Instantiate the connector for a job's connection section.

    Args:
        connection_config: Connection configuration of the job

    Returns:
        Unconnected Connector instance

    Raises:
        ConfigurationError: If no connector handles the connect string
    """
    connection = connection_config.connection
    config = build_connector_config(connection, connection_config.options())

    if connection_config.connector:
        connector_class = _load_connector_class(connection_config.connector)
    else:
        scheme = extract_scheme(connection)
        logger.debug("connector.trying_scheme", scheme=scheme)
        connector_class = CONNECTOR_SCHEMES.get(scheme)
        if connector_class is None:
            raise ConfigurationError(
                f"No connector for scheme '{scheme}'. "
                f"Supported schemes: {sorted(CONNECTOR_SCHEMES)}"
            )

    return connector_class(config)


__all__ = [
    "CONNECTOR_SCHEMES",
    "build_connector_config",
    "extract_scheme",
    "resolve_connector",
]
