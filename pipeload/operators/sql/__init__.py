"""Generic SQL operators for SQLAlchemy-based warehouses.

SQLConnector manages the SQLAlchemy engine and hands out dedicated
connections on which bulk-load statements run.
"""

from pipeload.operators.sql.connector import SQLConnector

__all__ = ["SQLConnector"]
