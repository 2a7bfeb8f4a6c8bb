"""
Clients for the external services used by the library: the Solana RPC node
and the Digital Asset Standard indexing API.
"""

from .das_client import AssetPage, DasClient, DigitalAsset
from .solana_client import LedgerClient

__all__ = [
    'AssetPage',
    'DasClient',
    'DigitalAsset',
    'LedgerClient',
]
