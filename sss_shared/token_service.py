"""
Token creation and minting.

:class:`TokenService` assembles, signs and submits Token Metadata program
transactions using the payer from an :class:`IdentityResolver` and a shared
:class:`LedgerClient`. It holds no raw pointers and can be used directly from
Python.

A submitted transaction is sent at most once. If the node accepts it but the
confirmation is lost, an :class:`RpcError` is raised although the token may
already exist on the ledger.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction
from spl.token.instructions import get_associated_token_address

from . import token_metadata
from .clients.solana_client import LedgerClient
from .config import SolanaConfig
from .errors import TokenError, error_context
from .identity import IdentityResolver, clone_keypair
from .logging_utils import (
    OperationType,
    create_operation_logger,
    log_blockchain_operation,
    log_mint_event,
)

logger = create_operation_logger(__name__)

MAX_DECIMALS = 255
MAX_AMOUNT = 2 ** 64 - 1


@dataclass(frozen=True)
class TokenCreationResult:
    """Outcome of a successful token creation."""
    signature: str
    mint: Pubkey

    def __iter__(self) -> Iterator:
        # Allows ``signature, mint = service.create_new_token(...)``
        return iter((self.signature, self.mint))


class TokenService:
    """Creates fungible tokens and mints supply for them."""

    def __init__(self, identity: IdentityResolver, ledger: LedgerClient,
                 program_id: Pubkey = token_metadata.PROGRAM_ID):
        self.identity = identity
        self.ledger = ledger
        self.program_id = program_id

    @classmethod
    def from_config(cls, config: SolanaConfig) -> 'TokenService':
        return cls(IdentityResolver(config), LedgerClient.from_config(config))

    @classmethod
    def from_env(cls) -> 'TokenService':
        return cls.from_config(SolanaConfig.from_env())

    def metadata_address(self, mint: Pubkey) -> Pubkey:
        return token_metadata.find_metadata_pda(mint, self.program_id)[0]

    @log_blockchain_operation(OperationType.TOKEN_CREATION, "create_consumable_token")
    def create_consumable_token(self, mint: Keypair, uri: str, name: str, decimals: int) -> str:
        """
        Create a fungible token whose mint account is ``mint``.

        Args:
            mint: Keypair of the new mint account
            uri: URI of the off-chain token metadata
            name: Token name
            decimals: Number of decimal places, 0 to 255

        Returns:
            The transaction signature
        """
        with error_context("Failed to get payer keypair"):
            payer = self.identity.get_payer()

        if not 0 <= decimals <= MAX_DECIMALS:
            raise TokenError(f"token decimals out of range: {decimals}")

        metadata = self.metadata_address(mint.pubkey())
        create_ix = token_metadata.create_v1(
            metadata=metadata,
            mint=mint.pubkey(),
            authority=payer.pubkey(),
            payer=payer.pubkey(),
            update_authority=payer.pubkey(),
            name=name,
            uri=uri,
            symbol="",
            seller_fee_basis_points=0,
            token_standard=token_metadata.TokenStandard.FUNGIBLE,
            decimals=decimals,
            program_id=self.program_id,
        )

        signature = self._submit([create_ix], payer, [mint, payer])
        log_mint_event("created", str(mint.pubkey()), signature, {"decimals": decimals})
        return signature

    def create_new_token(self, uri: str, name: str, decimals: int,
                         mint: Optional[Keypair] = None) -> TokenCreationResult:
        """
        Create a fungible token, generating a fresh mint keypair unless one is given.

        Returns:
            The transaction signature and the mint address
        """
        if mint is None:
            mint = Keypair()
        signature = self.create_consumable_token(mint, uri, name, decimals)
        return TokenCreationResult(signature=signature, mint=mint.pubkey())

    @log_blockchain_operation(OperationType.TOKEN_MINTING, "mint_token")
    def mint_token(self, mint: Pubkey, token_owner: Optional[Pubkey], amount: int) -> str:
        """
        Mint ``amount`` base units of ``mint`` to the owner's associated token account.

        Args:
            mint: Address of an existing mint
            token_owner: Owner of the receiving token account; the payer when None
            amount: Quantity in base units, within the u64 range

        Returns:
            The transaction signature
        """
        with error_context("Failed to get payer keypair"):
            payer = self.identity.get_payer()
        with error_context("Failed to create authority keypair"):
            authority = clone_keypair(payer)

        if not 0 <= amount <= MAX_AMOUNT:
            raise TokenError(f"mint amount out of range: {amount}")

        metadata = self.metadata_address(mint)
        owner = token_owner if token_owner is not None else payer.pubkey()
        token_account = get_associated_token_address(owner, mint)

        mint_ix = token_metadata.mint_v1(
            token=token_account,
            token_owner=owner,
            metadata=metadata,
            mint=mint,
            authority=authority.pubkey(),
            payer=payer.pubkey(),
            amount=amount,
            program_id=self.program_id,
        )

        signature = self._submit([mint_ix], payer, [authority, payer])
        log_mint_event("minted", str(mint), signature, {"owner": str(owner), "amount": amount})
        return signature

    def _submit(self, instructions: Sequence[Instruction], payer: Keypair,
                signers: Sequence[Keypair]) -> str:
        message = Message(instructions, payer.pubkey())
        blockhash = self.ledger.get_latest_blockhash()

        with error_context("Failed to sign token transaction"):
            transaction = Transaction(signers, message, blockhash)

        return str(self.ledger.send_and_confirm_transaction(transaction))


def create_new_token(uri: str, name: str, decimals: int,
                     service: Optional[TokenService] = None) -> TokenCreationResult:
    """Create a token with a fresh mint using ``service`` or one built from the environment."""
    if service is None:
        service = TokenService.from_env()
    return service.create_new_token(uri, name, decimals)


def mint_token(mint: Pubkey, token_owner: Optional[Pubkey], amount: int,
               service: Optional[TokenService] = None) -> str:
    """Mint tokens using ``service`` or one built from the environment."""
    if service is None:
        service = TokenService.from_env()
    return service.mint_token(mint, token_owner, amount)
