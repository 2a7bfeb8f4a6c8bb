"""
SSS shared library for Solana token operations.

Creates fungible tokens and mints supply through the Metaplex Token Metadata
program, queries a DAS indexer for owned assets, and exposes the token
operations through C-compatible entry points in :mod:`sss_shared.ffi`.
"""

from .clients import AssetPage, DasClient, DigitalAsset, LedgerClient
from .clients.das_client import fetch_digital_assets_by_owner
from .config import SolanaConfig, get_solana_config
from .errors import (
    ConfigError,
    ErrorKind,
    FfiError,
    KeypairError,
    RpcError,
    SssError,
    TokenError,
    classify_context,
    wrap_error,
)
from .ffi import create_token, fetch_assets_json, free_string, mint_token_ffi
from .identity import IdentityResolver
from .token_service import TokenCreationResult, TokenService, create_new_token, mint_token

__version__ = '0.1.0'

__all__ = [
    'AssetPage',
    'ConfigError',
    'DasClient',
    'DigitalAsset',
    'ErrorKind',
    'FfiError',
    'IdentityResolver',
    'KeypairError',
    'LedgerClient',
    'RpcError',
    'SolanaConfig',
    'SssError',
    'TokenCreationResult',
    'TokenError',
    'TokenService',
    'classify_context',
    'create_new_token',
    'create_token',
    'fetch_assets_json',
    'fetch_digital_assets_by_owner',
    'free_string',
    'get_solana_config',
    'mint_token',
    'mint_token_ffi',
    'wrap_error',
]
