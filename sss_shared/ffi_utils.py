"""
Utility functions for FFI operations.

All raw pointer handling of the library lives here. A "pointer" is anything a
ctypes caller may hand us: ``None`` (NULL), an integer address, a
``c_char_p`` / ``c_void_p``, a ctypes pointer, or a ctypes array such as the
one returned by :func:`ctypes.create_string_buffer`.

The caller guarantees that non-NULL pointers are valid for the sizes they
declare; nothing here can check that.
"""

import ctypes
import threading
from typing import Any, Dict, Optional

from solders.pubkey import Pubkey

from .errors import FfiError


def pointer_address(ptr: Any) -> int:
    """Return the integer address of ``ptr``, 0 for NULL."""
    if ptr is None:
        return 0
    if isinstance(ptr, int):
        return ptr
    if isinstance(ptr, ctypes.Array):
        return ctypes.addressof(ptr)
    if isinstance(ptr, (ctypes.c_char_p, ctypes.c_void_p, ctypes._Pointer)):
        return ctypes.cast(ptr, ctypes.c_void_p).value or 0
    raise FfiError(f"Unsupported pointer type: {type(ptr).__name__}")


def is_null(ptr: Any) -> bool:
    return pointer_address(ptr) == 0


def c_str_to_string(ptr: Any) -> str:
    """Read the NUL-terminated UTF-8 string at ``ptr``."""
    address = pointer_address(ptr)
    if address == 0:
        raise FfiError("Null pointer provided")

    raw = ctypes.string_at(address)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FfiError(f"Invalid UTF-8 string: {e}") from e


def c_str_to_pubkey(ptr: Any) -> Pubkey:
    """Read a base58 public key from the C string at ``ptr``."""
    key_str = c_str_to_string(ptr)
    try:
        return Pubkey.from_string(key_str)
    except ValueError as e:
        raise FfiError(f"Invalid public key: {e}") from e


def c_str_to_optional_pubkey(ptr: Any) -> Optional[Pubkey]:
    """Like :func:`c_str_to_pubkey`, but NULL means "no key"."""
    if is_null(ptr):
        return None
    return c_str_to_pubkey(ptr)


def encode_c_string(value: str) -> bytes:
    """Encode ``value`` as UTF-8 with a trailing NUL."""
    data = value.encode("utf-8")
    if b"\x00" in data:
        raise FfiError("Failed to create C string: interior nul byte")
    return data + b"\x00"


def fits_buffer(value: str, buffer_len: int) -> bool:
    """Whether ``value`` plus its NUL terminator fits in ``buffer_len`` bytes."""
    return len(encode_c_string(value)) <= buffer_len


def copy_string_to_buffer(value: str, buffer: Any, buffer_len: int) -> None:
    """
    Copy ``value`` and a NUL terminator into the caller's buffer.

    Nothing is written unless the whole string fits.

    Raises:
        FfiError: NULL buffer, interior NUL, or buffer too small
    """
    address = pointer_address(buffer)
    if address == 0:
        raise FfiError("Null pointer provided")

    data = encode_c_string(value)
    if len(data) > buffer_len:
        raise FfiError(f"Buffer too small: need {len(data)} bytes, have {buffer_len}")

    ctypes.memmove(address, data, len(data))


class StringAllocator:
    """Owns the strings handed to C callers until they are released."""

    def __init__(self):
        self._lock = threading.Lock()
        self._buffers: Dict[int, ctypes.Array] = {}

    def allocate(self, value: str) -> int:
        """Allocate a NUL-terminated copy of ``value`` and return its address."""
        data = encode_c_string(value)
        buffer = ctypes.create_string_buffer(data, len(data))
        address = ctypes.addressof(buffer)
        with self._lock:
            self._buffers[address] = buffer
        return address

    def release(self, ptr: Any) -> bool:
        """Release a string from :meth:`allocate`. Returns False if it was not ours."""
        address = pointer_address(ptr)
        if address == 0:
            return False
        with self._lock:
            return self._buffers.pop(address, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffers)

    def __contains__(self, ptr: Any) -> bool:
        address = pointer_address(ptr)
        with self._lock:
            return address in self._buffers
