"""
Solana RPC client handle for the SSS shared library.

A thin wrapper around :class:`solana.rpc.api.Client` bound to a single
endpoint. It exposes only the two calls the transaction builder needs and
classifies their failures. There is no local retry: one transport failure is
reported immediately.
"""

import time
from typing import Optional

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.core import RPCException, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.signature import Signature
from solders.transaction import Transaction

from ..config import SolanaConfig
from ..errors import TokenError, error_context, wrap_error
from ..logging_utils import create_operation_logger, log_rpc_metrics

logger = create_operation_logger(__name__)

TRANSPORT_ERRORS = (SolanaRpcException, httpx.HTTPError, OSError)


class LedgerClient:
    """
    Process-wide handle to one Solana RPC endpoint.

    The handle is immutable after construction and may be shared between
    threads without locking.
    """

    def __init__(self, rpc_url: str, commitment: str = "confirmed", timeout: Optional[float] = None,
                 client: Optional[Client] = None):
        """
        Initialize the ledger client.

        Args:
            rpc_url: RPC endpoint URL
            commitment: Commitment level used for blockhash, preflight and confirmation
            timeout: HTTP timeout in seconds; the solana-py default when None
            client: Pre-built RPC client, mainly for tests
        """
        self.rpc_url = rpc_url
        self.commitment = commitment
        if client is None:
            if timeout is None:
                client = Client(rpc_url, commitment=commitment)
            else:
                client = Client(rpc_url, commitment=commitment, timeout=timeout)
        self._client = client

        logger.info("LedgerClient initialized", rpc_url=rpc_url, commitment=commitment)

    @classmethod
    def from_config(cls, config: SolanaConfig) -> 'LedgerClient':
        return cls(config.rpc_url, commitment=config.commitment, timeout=config.timeout)

    def get_latest_blockhash(self) -> Hash:
        """Fetch the latest blockhash required to submit a transaction."""
        start_time = time.time()
        try:
            with error_context("rpc client failed to get latest blockhash"):
                resp = self._client.get_latest_blockhash(self.commitment)
        except Exception as e:
            log_rpc_metrics(self.rpc_url, "getLatestBlockhash", time.time() - start_time, False, str(e))
            raise

        log_rpc_metrics(self.rpc_url, "getLatestBlockhash", time.time() - start_time, True)
        return resp.value.blockhash

    def send_and_confirm_transaction(self, transaction: Transaction) -> Signature:
        """
        Send a signed transaction and wait until it reaches the configured commitment.

        Transport failures raise :class:`RpcError`. Rejections reported by the
        node (preflight failure, failed execution) raise :class:`TokenError`.

        Note that a transaction whose confirmation is lost may already be on
        the ledger even though an error is raised.
        """
        start_time = time.time()
        try:
            signature = self._send(transaction)
            self._confirm(signature)
        except Exception as e:
            log_rpc_metrics(self.rpc_url, "sendTransaction", time.time() - start_time, False, str(e))
            raise

        log_rpc_metrics(self.rpc_url, "sendTransaction", time.time() - start_time, True)
        logger.info("Transaction confirmed", signature=str(signature), commitment=self.commitment)
        return signature

    def _send(self, transaction: Transaction) -> Signature:
        opts = TxOpts(skip_confirmation=True, preflight_commitment=self.commitment)
        try:
            resp = self._client.send_raw_transaction(bytes(transaction), opts=opts)
        except RPCException as e:
            raise TokenError(f"token transaction rejected by the node: {e}") from e
        except TRANSPORT_ERRORS as e:
            raise wrap_error(e, "rpc client failed to send transaction") from e
        return resp.value

    def _confirm(self, signature: Signature) -> None:
        try:
            resp = self._client.confirm_transaction(signature, self.commitment)
        except (UnconfirmedTxError,) + TRANSPORT_ERRORS as e:
            raise wrap_error(e, "rpc client failed to confirm transaction") from e
        except RPCException as e:
            raise TokenError(f"token transaction failed during confirmation: {e}") from e

        statuses = resp.value
        status = statuses[0] if statuses else None
        if status is not None and status.err is not None:
            raise TokenError(f"token transaction {signature} failed: {status.err}")
