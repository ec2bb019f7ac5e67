"""Base Connector abstract class.

This module defines the Connector interface for managing connections
to the target warehouse.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class Connector(ABC):
    """Base class for managing connections to a warehouse.

    Connectors handle connection lifecycle. The loader agent asks the
    connector for a dedicated connection on which it runs the bulk-load
    statement; that connection must offer ``exec_driver_sql(statement)``,
    ``commit()`` and ``close()`` (the SQLAlchemy Connection API).

    Examples:
        >>> with NetezzaConnector(config) as conn:
        ...     connection = conn.open_connection()
        ...     connection.exec_driver_sql(statement)
        ...     connection.commit()
        ...     connection.close()
    """

    def __init__(self, config: dict[str, Any]):
        """Initialize connector with configuration.

        Args:
            config: Connection configuration dictionary
        """
        self.config = config
        self.connection: Optional[Any] = None

    @abstractmethod
    def connect(self) -> None:
        """Establish connectivity to the warehouse.

        Raises:
            ConnectionError: If connection fails
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release connectivity to the warehouse.

        Should handle cases where connection is already closed gracefully.
        """
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """Test connectivity to the warehouse.

        Returns:
            True if connection is successful, False otherwise
        """
        pass

    @abstractmethod
    def open_connection(self) -> Any:
        """Open a dedicated connection for one bulk-load statement.

        Connects first if needed. The caller owns the returned connection
        and must close it.

        Returns:
            Connection offering exec_driver_sql(), commit() and close()

        Raises:
            ConnectionError: If the connection cannot be established
        """
        pass

    def __enter__(self) -> Connector:
        """Context manager entry: establish connection.

        Returns:
            Self
        """
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit: close connection."""
        self.disconnect()

    @property
    def is_connected(self) -> bool:
        """Check if connection is established.

        Returns:
            True if connected, False otherwise
        """
        return self.connection is not None
