"""
FFI entry points for C interoperability.

Each entry point validates its pointers, decodes its inputs, calls the
:class:`TokenService` and encodes the result into caller-owned buffers. They
never raise; every outcome is an integer status code. The numeric codes are a
binary contract and must not change.

The entry points are synchronous and perform network I/O on the calling
thread. ``*_FUNC`` prototypes and :func:`exported_functions` give a C host
callable function pointers.
"""

import ctypes
import json
import threading
from enum import IntEnum
from typing import Any, Dict, Optional

from .clients.das_client import DasClient
from .config import SolanaConfig
from .errors import FfiError, SssError
from .ffi_utils import (
    StringAllocator,
    c_str_to_optional_pubkey,
    c_str_to_pubkey,
    c_str_to_string,
    copy_string_to_buffer,
    fits_buffer,
    is_null,
)
from .logging_utils import create_operation_logger
from .token_service import TokenService

logger = create_operation_logger(__name__)


class CreateTokenStatus(IntEnum):
    """Status codes returned by :func:`create_token`."""
    OK = 0
    NULL_POINTER = -1
    INVALID_URI = -2
    INVALID_NAME = -3
    SIGNATURE_BUFFER_TOO_SMALL = -6
    MINT_ADDRESS_BUFFER_TOO_SMALL = -7
    CREATE_FAILED = -8


class MintTokenStatus(IntEnum):
    """Status codes returned by :func:`mint_token_ffi`."""
    OK = 0
    NULL_POINTER = -1
    INVALID_MINT_ADDRESS = -2
    INVALID_OWNER_ADDRESS = -3
    SIGNATURE_BUFFER_TOO_SMALL = -4
    MINT_FAILED = -5


_service_lock = threading.Lock()
_service: Optional[TokenService] = None
_das_client: Optional[DasClient] = None
_allocator = StringAllocator()


def configure(service: Optional[TokenService] = None, das_client: Optional[DasClient] = None) -> None:
    """
    Install the services used by the entry points.

    Passing None for either one resets it; it is then built from the
    environment on the next call.
    """
    global _service, _das_client
    with _service_lock:
        _service = service
        _das_client = das_client


def get_service() -> TokenService:
    global _service
    with _service_lock:
        if _service is None:
            _service = TokenService.from_env()
        return _service


def get_das_client() -> DasClient:
    global _das_client
    with _service_lock:
        if _das_client is None:
            _das_client = DasClient.from_config(SolanaConfig.from_env())
        return _das_client


def create_token(
    uri_ptr: Any,
    name_ptr: Any,
    decimals: int,
    signature_out: Any,
    mint_address_out: Any,
    signature_len: int,
    mint_address_len: int,
) -> int:
    """
    Create a new token and write the transaction signature and mint address.

    Args:
        uri_ptr: NUL-terminated UTF-8 metadata URI
        name_ptr: NUL-terminated UTF-8 token name
        decimals: Number of decimal places, 0 to 255
        signature_out: Buffer receiving the transaction signature
        mint_address_out: Buffer receiving the mint address
        signature_len: Size of ``signature_out`` in bytes
        mint_address_len: Size of ``mint_address_out`` in bytes

    Returns:
        0 on success, -1 NULL pointer, -2 invalid URI, -3 invalid name,
        -6 signature buffer too small, -7 mint address buffer too small,
        -8 token creation failed. Buffers are untouched on any failure.
    """
    try:
        if (is_null(uri_ptr) or is_null(name_ptr)
                or is_null(signature_out) or is_null(mint_address_out)):
            return CreateTokenStatus.NULL_POINTER

        try:
            uri = c_str_to_string(uri_ptr)
        except FfiError:
            return CreateTokenStatus.INVALID_URI

        try:
            name = c_str_to_string(name_ptr)
        except FfiError:
            return CreateTokenStatus.INVALID_NAME

        try:
            signature, mint = get_service().create_new_token(uri, name, decimals)
        except SssError as e:
            logger.error("create_token failed", error=str(e), error_kind=e.kind.value)
            return CreateTokenStatus.CREATE_FAILED

        mint_address = str(mint)
        if not fits_buffer(signature, signature_len):
            return CreateTokenStatus.SIGNATURE_BUFFER_TOO_SMALL
        if not fits_buffer(mint_address, mint_address_len):
            return CreateTokenStatus.MINT_ADDRESS_BUFFER_TOO_SMALL

        copy_string_to_buffer(signature, signature_out, signature_len)
        copy_string_to_buffer(mint_address, mint_address_out, mint_address_len)
        return CreateTokenStatus.OK
    except Exception:
        # Exceptions must not cross the C boundary
        logger.exception("create_token raised unexpectedly")
        return CreateTokenStatus.CREATE_FAILED


def mint_token_ffi(
    mint_str: Any,
    token_owner_str: Any,
    amount: int,
    signature_out: Any,
    signature_len: int,
) -> int:
    """
    Mint tokens of an existing mint and write the transaction signature.

    Args:
        mint_str: NUL-terminated base58 mint address
        token_owner_str: NUL-terminated base58 owner address, or NULL for the payer
        amount: Quantity in base units
        signature_out: Buffer receiving the transaction signature
        signature_len: Size of ``signature_out`` in bytes

    Returns:
        0 on success, -1 NULL pointer, -2 invalid mint address, -3 invalid
        owner address, -4 signature buffer too small, -5 minting failed.
    """
    try:
        if is_null(mint_str) or is_null(signature_out):
            return MintTokenStatus.NULL_POINTER

        try:
            mint = c_str_to_pubkey(mint_str)
        except FfiError:
            return MintTokenStatus.INVALID_MINT_ADDRESS

        try:
            token_owner = c_str_to_optional_pubkey(token_owner_str)
        except FfiError:
            return MintTokenStatus.INVALID_OWNER_ADDRESS

        try:
            signature = get_service().mint_token(mint, token_owner, amount)
        except SssError as e:
            logger.error("mint_token_ffi failed", error=str(e), error_kind=e.kind.value)
            return MintTokenStatus.MINT_FAILED

        if not fits_buffer(signature, signature_len):
            return MintTokenStatus.SIGNATURE_BUFFER_TOO_SMALL

        copy_string_to_buffer(signature, signature_out, signature_len)
        return MintTokenStatus.OK
    except Exception:
        logger.exception("mint_token_ffi raised unexpectedly")
        return MintTokenStatus.MINT_FAILED


def fetch_assets_json(owner_str: Any) -> int:
    """
    Fetch the assets owned by an address as a JSON array.

    Returns:
        Address of a library-owned NUL-terminated string that must be released
        with :func:`free_string`, or 0 (NULL) on any failure.
    """
    try:
        if is_null(owner_str):
            return 0
        owner = c_str_to_pubkey(owner_str)
        assets = get_das_client().get_assets_by_owner(owner)
        payload = json.dumps([asset.to_dict() for asset in assets])
        return _allocator.allocate(payload)
    except SssError as e:
        logger.error("fetch_assets_json failed", error=str(e), error_kind=e.kind.value)
        return 0
    except Exception:
        logger.exception("fetch_assets_json raised unexpectedly")
        return 0


def free_string(ptr: Any) -> None:
    """
    Free a string allocated by this library.

    NULL is a no-op. Each string must be freed exactly once; other pointers
    are ignored.
    """
    try:
        if not _allocator.release(ptr) and not is_null(ptr):
            logger.warning("free_string called with a pointer not owned by the library")
    except Exception:
        logger.exception("free_string raised unexpectedly")


CREATE_TOKEN_FUNC = ctypes.CFUNCTYPE(
    ctypes.c_int,
    ctypes.c_void_p,    # uri_ptr
    ctypes.c_void_p,    # name_ptr
    ctypes.c_ubyte,     # decimals
    ctypes.c_void_p,    # signature_out
    ctypes.c_void_p,    # mint_address_out
    ctypes.c_int,       # signature_len
    ctypes.c_int,       # mint_address_len
)

MINT_TOKEN_FUNC = ctypes.CFUNCTYPE(
    ctypes.c_int,
    ctypes.c_void_p,    # mint_str
    ctypes.c_void_p,    # token_owner_str (nullable)
    ctypes.c_uint64,    # amount
    ctypes.c_void_p,    # signature_out
    ctypes.c_int,       # signature_len
)

FETCH_ASSETS_FUNC = ctypes.CFUNCTYPE(ctypes.c_void_p, ctypes.c_void_p)

FREE_STRING_FUNC = ctypes.CFUNCTYPE(None, ctypes.c_void_p)

_exported: Dict[str, Any] = {}


def exported_functions() -> Dict[str, Any]:
    """
    C-callable function pointers for every entry point, keyed by symbol name.

    The objects are created once and kept alive for the life of the process.
    """
    with _service_lock:
        if not _exported:
            _exported.update({
                "create_token": CREATE_TOKEN_FUNC(create_token),
                "mint_token_ffi": MINT_TOKEN_FUNC(mint_token_ffi),
                "fetch_assets_json": FETCH_ASSETS_FUNC(fetch_assets_json),
                "free_string": FREE_STRING_FUNC(free_string),
            })
        return dict(_exported)
