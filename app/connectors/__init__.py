"""
app/connectors package marker.
"""

from app.connectors.base import RETRYABLE_STATUS_CODES, JSONAPIConnector
from app.connectors.itunes_connector import ItunesLookupConnector

__all__ = [
    "JSONAPIConnector",
    "ItunesLookupConnector",
    "RETRYABLE_STATUS_CODES",
]
