"""
Solana configuration for the SSS shared token library.

Values are read from the process environment (optionally seeded from a
``.env`` file) the first time they are needed and are not re-read afterwards.
"""

import os
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .errors import error_context

# Default Solana RPC endpoints for different networks
SOLANA_RPC_ENDPOINTS = {
    'devnet': [
        {
            'name': 'Solana Devnet (Official)',
            'url': 'https://api.devnet.solana.com',
            'priority': 1
        },
        {
            'name': 'Helius Devnet',
            'url': 'https://devnet.helius-rpc.com/?api-key=demo',
            'priority': 2
        }
    ],
    'mainnet': [
        {
            'name': 'Solana Mainnet (Official)',
            'url': 'https://api.mainnet-beta.solana.com',
            'priority': 1
        },
        {
            'name': 'Helius Mainnet',
            'url': 'https://mainnet.helius-rpc.com/?api-key=demo',
            'priority': 2
        }
    ],
    'testnet': [
        {
            'name': 'Solana Testnet (Official)',
            'url': 'https://api.testnet.solana.com',
            'priority': 1
        }
    ]
}

# Digital Asset Standard (DAS) indexing endpoints
DAS_API_ENDPOINTS = {
    'devnet': 'https://devnet.helius-rpc.com/?api-key=demo',
    'mainnet': 'https://mainnet.helius-rpc.com/?api-key=demo',
    'testnet': 'https://devnet.helius-rpc.com/?api-key=demo'
}

# Explorer cluster query parameter per network
EXPLORER_CLUSTERS = {
    'devnet': '?cluster=devnet',
    'mainnet': '',
    'testnet': '?cluster=testnet'
}

# Program IDs
TOKEN_METADATA_PROGRAM_ID = 'metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s'
SPL_TOKEN_PROGRAM_ID = 'TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA'
SPL_ASSOCIATED_TOKEN_PROGRAM_ID = 'ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL'
SYSTEM_PROGRAM_ID = '11111111111111111111111111111111'
SYSVAR_INSTRUCTIONS_ID = 'Sysvar1nstructions1111111111111111111111111'

DEFAULT_NETWORK = 'devnet'
DEFAULT_COMMITMENT = 'confirmed'

_dotenv_lock = threading.Lock()
_dotenv_loaded = False


def load_environment() -> None:
    """Load a ``.env`` file into the process environment, once."""
    global _dotenv_loaded
    with _dotenv_lock:
        if not _dotenv_loaded:
            load_dotenv()
            _dotenv_loaded = True


def get_rpc_endpoints(network: str = None) -> List[Dict[str, Any]]:
    """Get RPC endpoints for the specified network."""
    if network is None:
        network = os.getenv('SOLANA_NETWORK', DEFAULT_NETWORK).lower()

    return SOLANA_RPC_ENDPOINTS.get(network, SOLANA_RPC_ENDPOINTS[DEFAULT_NETWORK])


def _get_timeout() -> int:
    with error_context("Invalid SOLANA_TIMEOUT in env config"):
        return int(os.getenv('SOLANA_TIMEOUT', '30'))


def get_solana_config() -> Dict[str, Any]:
    """Get Solana configuration from environment variables."""
    load_environment()
    network = os.getenv('SOLANA_NETWORK', DEFAULT_NETWORK).lower()
    if network not in SOLANA_RPC_ENDPOINTS:
        network = DEFAULT_NETWORK

    rpc_url = os.getenv('SOLANA_RPC_URL') or get_rpc_endpoints(network)[0]['url']

    return {
        'network': network,
        'rpc_url': rpc_url,
        'das_api_url': os.getenv('DAS_API_URL') or DAS_API_ENDPOINTS[network],
        'commitment': os.getenv('SOLANA_COMMITMENT', DEFAULT_COMMITMENT).lower(),
        'timeout': _get_timeout(),
        'payer_mnemonic': os.getenv('PAYER_MNEMONIC'),
    }


@dataclass(frozen=True)
class SolanaConfig:
    """Snapshot of the library configuration.

    ``payer_mnemonic`` is secret material: it is excluded from ``repr`` and
    must never be logged.
    """
    network: str = DEFAULT_NETWORK
    rpc_url: str = SOLANA_RPC_ENDPOINTS[DEFAULT_NETWORK][0]['url']
    das_api_url: str = DAS_API_ENDPOINTS[DEFAULT_NETWORK]
    commitment: str = DEFAULT_COMMITMENT
    timeout: int = 30
    payer_mnemonic: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_env(cls) -> 'SolanaConfig':
        return cls(**get_solana_config())

    @property
    def explorer_cluster(self) -> str:
        return EXPLORER_CLUSTERS.get(self.network, '')

    def explorer_address_url(self, address: str) -> str:
        return f"https://explorer.solana.com/address/{address}{self.explorer_cluster}"

    def explorer_tx_url(self, signature: str) -> str:
        return f"https://explorer.solana.com/tx/{signature}{self.explorer_cluster}"
