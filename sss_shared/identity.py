"""
Payer identity resolution.

The payer keypair is derived from a BIP-39 mnemonic exactly once per
resolver. Every caller receives its own copy of the keypair so no two
operations ever share a key object.
"""

import threading
from typing import Optional

from mnemonic import Mnemonic
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .config import SolanaConfig
from .errors import KeypairError
from .logging_utils import create_operation_logger

logger = create_operation_logger(__name__)

SEED_LENGTH = 32


def keypair_from_mnemonic(phrase: str, passphrase: str = "") -> Keypair:
    """Derive a keypair from the first 32 bytes of the BIP-39 seed of ``phrase``."""
    mnemo = Mnemonic("english")
    if not mnemo.check(phrase):
        raise KeypairError("Invalid mnemonic phrase: word list or checksum mismatch")

    seed = Mnemonic.to_seed(phrase, passphrase=passphrase)
    try:
        return Keypair.from_seed(seed[:SEED_LENGTH])
    except ValueError as e:
        raise KeypairError(f"Failed to derive keypair from seed: {e}") from e


def clone_keypair(keypair: Keypair) -> Keypair:
    """Return an independent keypair with the same key bytes."""
    try:
        return Keypair.from_bytes(bytes(keypair))
    except ValueError as e:
        raise KeypairError(f"Failed to create keypair from bytes: {e}") from e


class IdentityResolver:
    """Lazily derives the payer keypair and hands out copies of it.

    The first call to :meth:`get_payer` performs the derivation under a lock
    and caches the outcome, success or failure. Later calls never look at the
    configuration again.
    """

    def __init__(self, config: SolanaConfig):
        self._mnemonic = config.payer_mnemonic
        self._lock = threading.Lock()
        self._resolved = False
        self._keypair: Optional[Keypair] = None
        self._failure: Optional[str] = None
        self._poisoned: Optional[str] = None

    @classmethod
    def from_keypair(cls, keypair: Keypair) -> 'IdentityResolver':
        """Build a resolver that serves copies of an existing keypair."""
        resolver = cls(SolanaConfig())
        resolver._keypair = clone_keypair(keypair)
        resolver._resolved = True
        return resolver

    @property
    def resolved(self) -> bool:
        return self._resolved

    def get_payer(self) -> Keypair:
        """
        Get a copy of the payer keypair.

        Returns:
            A new keypair built from the cached payer key bytes

        Raises:
            KeypairError: mnemonic missing or invalid, derivation failed, or
                the resolver was poisoned by an earlier unexpected failure
        """
        with self._lock:
            if self._poisoned is not None:
                raise KeypairError(f"Failed to acquire lock: {self._poisoned}")

            if not self._resolved:
                try:
                    self._resolve()
                except BaseException as e:
                    self._poisoned = f"lock poisoned by {type(e).__name__}: {e}"
                    logger.error("Payer resolution aborted, resolver poisoned", error_type=type(e).__name__)
                    raise

            if self._keypair is None:
                raise KeypairError(self._failure)

            return clone_keypair(self._keypair)

    def payer_pubkey(self) -> Pubkey:
        return self.get_payer().pubkey()

    def _resolve(self) -> None:
        # Expected failures are cached; anything else propagates and poisons.
        try:
            if not self._mnemonic:
                raise KeypairError("Payer mnemonic not found in environment (PAYER_MNEMONIC)")
            keypair = keypair_from_mnemonic(self._mnemonic)
        except KeypairError as e:
            self._failure = e.message
            logger.error("Failed to derive payer keypair", reason=e.message)
        else:
            self._keypair = keypair
            logger.info("Payer keypair derived", payer=str(keypair.pubkey()))
        finally:
            self._mnemonic = None

        self._resolved = True
