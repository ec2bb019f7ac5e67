"""SQL-based connector base class using SQLAlchemy.

This module provides a base class for warehouse connectors that use
SQLAlchemy for connection management.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Optional, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, Engine

from pipeload.core.connector import Connector
from pipeload.exceptions import ConnectionError
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)


class SQLConnector(Connector):
    """Base class for SQL warehouse connectors using SQLAlchemy.

    Provides:
    - SQLAlchemy engine management
    - Connection lifecycle (connect, disconnect, test)
    - Dedicated connections for bulk-load statements

    Subclasses must implement:
    - _build_connection_string(): Database-specific connection URL
    - _get_database_name(): Return database name for error messages

    Examples:
        Subclass implementation:
        >>> class MyWarehouseConnector(SQLConnector):
        ...     def _build_connection_string(self) -> str:
        ...         return f"mydb://{self.config['host']}/{self.config['database']}"
        ...
        ...     def _get_database_name(self) -> str:
        ...         return "MyDB"
    """

    def __init__(self, config: dict[str, Any]):
        """Initialize SQL connector.

        Args:
            config: Connection configuration dictionary
        """
        super().__init__(config)
        self.engine: Optional[Engine] = None

    @abstractmethod
    def _build_connection_string(self) -> Union[str, URL]:
        """Build database-specific connection URL from config.

        Returns:
            SQLAlchemy connection string or URL

        Raises:
            ConfigurationError: If required config is missing or invalid
        """
        pass

    @abstractmethod
    def _get_database_name(self) -> str:
        """Get database name for error messages.

        Returns:
            Human-readable database name (e.g., "Netezza")
        """
        pass

    def _engine_options(self) -> dict[str, Any]:
        """Extra keyword arguments for create_engine()."""
        options: dict[str, Any] = {
            "pool_pre_ping": True,
            "echo": self.config.get("echo", False),
        }
        if self.config.get("connect_args"):
            options["connect_args"] = dict(self.config["connect_args"])
        return options

    def connect(self) -> None:
        """Establish connection to the SQL database.

        Creates a SQLAlchemy engine and tests the connection.

        Raises:
            ConnectionError: If connection fails
        """
        db_name = self._get_database_name()
        try:
            self.engine = create_engine(self._build_connection_string(), **self._engine_options())
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            self.connection = self.engine
        except Exception as e:
            if self.engine is not None:
                self.engine.dispose()
                self.engine = None
            raise ConnectionError(f"Failed to connect to {db_name}: {e}") from e
        logger.debug("connector.connected", database=db_name)

    def disconnect(self) -> None:
        """Dispose the SQLAlchemy engine.

        Safe to call even if already disconnected.
        """
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self.connection = None

    def test_connection(self) -> bool:
        """Test connectivity to the SQL database.

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            if not self.is_connected:
                self.connect()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    def open_connection(self) -> Connection:
        """Open a dedicated SQLAlchemy Connection.

        Returns:
            SQLAlchemy Connection; the caller must close it

        Raises:
            ConnectionError: If the connection cannot be established
        """
        if not self.is_connected:
            self.connect()

        try:
            return self.engine.connect()
        except Exception as e:
            db_name = self._get_database_name()
            raise ConnectionError(f"Failed to open {db_name} connection: {e}") from e
