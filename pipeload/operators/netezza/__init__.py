"""Netezza operator for pipeload.

This package provides the Netezza connector and the external-table
dialect used to bulk-load from a named pipe.
"""

from pipeload.operators.netezza.connector import NetezzaConnector
from pipeload.operators.netezza.dialect import NetezzaDialect, NetezzaLoadOptions

__all__ = ["NetezzaConnector", "NetezzaDialect", "NetezzaLoadOptions"]
