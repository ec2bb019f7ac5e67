"""Netezza connector implementation using SQLAlchemy.

The SQLAlchemy dialect for Netezza is provided by the ``nzalchemy``
package (``netezza+nzpy://`` URLs); install the ``netezza`` extra.
"""

from __future__ import annotations

from typing import Union

from sqlalchemy.engine import URL

from pipeload.exceptions import ConfigurationError
from pipeload.operators.sql.connector import SQLConnector

DEFAULT_DRIVER = "netezza+nzpy"
DEFAULT_PORT = 5480


class NetezzaConnector(SQLConnector):
    """Netezza connector using SQLAlchemy.

    Configuration keys:
        - host: Database host (default: localhost)
        - port: Database port (default: 5480)
        - database: Database name (required)
        - user: Username (required)
        - password: Password (required)
        - driver: SQLAlchemy driver name (default: netezza+nzpy)
        - connection_string: Full connection URL (alternative to individual params)
        - connect_args: Extra DB-API connect() arguments
        - echo: Enable SQL logging (default: False)

    Examples:
        >>> config = {
        ...     "host": "nz-host",
        ...     "database": "sales",
        ...     "user": "admin",
        ...     "password": "secret"
        ... }
        >>> with NetezzaConnector(config) as conn:
        ...     connection = conn.open_connection()
    """

    def _build_connection_string(self) -> Union[str, URL]:
        """Build Netezza connection URL from config.

        Raises:
            ConfigurationError: If required config is missing
        """
        if self.config.get("connection_string"):
            return self.config["connection_string"]

        required_keys = ["database", "user", "password"]
        for key in required_keys:
            if key not in self.config:
                raise ConfigurationError(f"Missing required config key: {key}")

        return URL.create(
            drivername=self.config.get("driver", DEFAULT_DRIVER),
            username=self.config["user"],
            password=self.config["password"],
            host=self.config.get("host", "localhost"),
            port=int(self.config.get("port", DEFAULT_PORT)),
            database=self.config["database"],
        )

    def _get_database_name(self) -> str:
        return "Netezza"
