"""
Error types for the SSS shared library.

Every failure raised by the library is one of five kinds. Call sites attach a
short context label to the underlying exception and the kind is derived from
that label by :func:`classify_context`.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Iterator


class ErrorKind(Enum):
    """Closed set of error kinds."""
    CONFIGURATION = "configuration"
    IDENTITY = "identity"
    RPC_TRANSPORT = "rpc_transport"
    TOKEN_OPERATION = "token_operation"
    FFI_MARSHALING = "ffi_marshaling"


class SssError(Exception):
    """Base class for all library errors."""

    kind: ErrorKind = ErrorKind.FFI_MARSHALING
    label = "FFI"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.label} error: {self.message}"


class ConfigError(SssError):
    """Error related to environment configuration."""
    kind = ErrorKind.CONFIGURATION
    label = "Configuration"


class KeypairError(SssError):
    """Error related to keypair operations."""
    kind = ErrorKind.IDENTITY
    label = "Keypair"


class RpcError(SssError):
    """Error related to Solana RPC operations."""
    kind = ErrorKind.RPC_TRANSPORT
    label = "RPC"


class TokenError(SssError):
    """Error related to token operations."""
    kind = ErrorKind.TOKEN_OPERATION
    label = "Token"


class FfiError(SssError):
    """Error related to FFI operations."""
    kind = ErrorKind.FFI_MARSHALING
    label = "FFI"


ERROR_CLASSES = {
    ErrorKind.CONFIGURATION: ConfigError,
    ErrorKind.IDENTITY: KeypairError,
    ErrorKind.RPC_TRANSPORT: RpcError,
    ErrorKind.TOKEN_OPERATION: TokenError,
    ErrorKind.FFI_MARSHALING: FfiError,
}


def classify_context(context: str) -> ErrorKind:
    """Map a context label to an error kind.

    Matching is case-sensitive and the first rule that matches wins, so a
    label such as ``"rpc client env"`` is a configuration error.
    """
    if "config" in context or "env" in context:
        return ErrorKind.CONFIGURATION
    if "keypair" in context or "signer" in context:
        return ErrorKind.IDENTITY
    if "rpc" in context or "client" in context:
        return ErrorKind.RPC_TRANSPORT
    if "token" in context or "mint" in context:
        return ErrorKind.TOKEN_OPERATION
    return ErrorKind.FFI_MARSHALING


def wrap_error(error: BaseException, context: str) -> SssError:
    """Build the classified library error for ``error`` under ``context``."""
    error_class = ERROR_CLASSES[classify_context(context)]
    return error_class(f"{context}: {error}")


@contextmanager
def error_context(context: str) -> Iterator[None]:
    """Re-raise any foreign exception as a classified :class:`SssError`.

    Library errors raised inside the block pass through untouched.
    """
    try:
        yield
    except SssError:
        raise
    except Exception as e:
        raise wrap_error(e, context) from e
