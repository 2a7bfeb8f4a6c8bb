"""
Token Metadata program instructions.

Builders for the ``CreateV1`` and ``MintV1`` instructions of the Metaplex
Token Metadata program, plus the metadata PDA derivation. Instruction data
is Borsh encoded; the layouts below follow the program's IDL field order.
"""

from enum import IntEnum
from typing import Optional, Tuple

from construct import Bytes, Const, Flag, If, Int8ul, Int16ul, Int32ul, Int64ul, PascalString, PrefixedArray, Struct, this
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from .config import (
    SPL_ASSOCIATED_TOKEN_PROGRAM_ID,
    SPL_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    SYSVAR_INSTRUCTIONS_ID,
    TOKEN_METADATA_PROGRAM_ID,
)

PROGRAM_ID = Pubkey.from_string(TOKEN_METADATA_PROGRAM_ID)
SYSTEM_PROGRAM = Pubkey.from_string(SYSTEM_PROGRAM_ID)
SYSVAR_INSTRUCTIONS = Pubkey.from_string(SYSVAR_INSTRUCTIONS_ID)
SPL_TOKEN_PROGRAM = Pubkey.from_string(SPL_TOKEN_PROGRAM_ID)
SPL_ATA_PROGRAM = Pubkey.from_string(SPL_ASSOCIATED_TOKEN_PROGRAM_ID)

METADATA_SEED = b"metadata"

CREATE_DISCRIMINATOR = 42
MINT_DISCRIMINATOR = 43
V1_DISCRIMINATOR = 0


class TokenStandard(IntEnum):
    NON_FUNGIBLE = 0
    FUNGIBLE_ASSET = 1
    FUNGIBLE = 2
    NON_FUNGIBLE_EDITION = 3
    PROGRAMMABLE_NON_FUNGIBLE = 4
    PROGRAMMABLE_NON_FUNGIBLE_EDITION = 5


def BorshOption(subcon):
    """Borsh ``Option<T>``: a one byte tag followed by the value when present."""
    return Struct(
        "is_some" / Flag,
        "value" / If(this.is_some, subcon),
    )


def some(value) -> dict:
    return {"is_some": True, "value": value}


NONE = {"is_some": False, "value": None}

BorshString = PascalString(Int32ul, "utf8")

CREATOR = Struct(
    "address" / Bytes(32),
    "verified" / Flag,
    "share" / Int8ul,
)

COLLECTION = Struct(
    "verified" / Flag,
    "key" / Bytes(32),
)

USES = Struct(
    "use_method" / Int8ul,
    "remaining" / Int64ul,
    "total" / Int64ul,
)

COLLECTION_DETAILS = Struct(
    "variant" / Int8ul,
    "size" / Int64ul,
)

PRINT_SUPPLY = Struct(
    "variant" / Int8ul,
    "limit" / If(this.variant == 1, Int64ul),
)

CREATE_V1_LAYOUT = Struct(
    "discriminator" / Const(CREATE_DISCRIMINATOR, Int8ul),
    "create_v1_discriminator" / Const(V1_DISCRIMINATOR, Int8ul),
    "name" / BorshString,
    "symbol" / BorshString,
    "uri" / BorshString,
    "seller_fee_basis_points" / Int16ul,
    "creators" / BorshOption(PrefixedArray(Int32ul, CREATOR)),
    "primary_sale_happened" / Flag,
    "is_mutable" / Flag,
    "token_standard" / Int8ul,
    "collection" / BorshOption(COLLECTION),
    "uses" / BorshOption(USES),
    "collection_details" / BorshOption(COLLECTION_DETAILS),
    "rule_set" / BorshOption(Bytes(32)),
    "decimals" / BorshOption(Int8ul),
    "print_supply" / BorshOption(PRINT_SUPPLY),
)

MINT_V1_LAYOUT = Struct(
    "discriminator" / Const(MINT_DISCRIMINATOR, Int8ul),
    "mint_v1_discriminator" / Const(V1_DISCRIMINATOR, Int8ul),
    "amount" / Int64ul,
    # AuthorizationData is never sent by this library
    "authorization_data" / BorshOption(Bytes(0)),
)


def find_metadata_pda(mint: Pubkey, program_id: Pubkey = PROGRAM_ID) -> Tuple[Pubkey, int]:
    """Derive the metadata account address of ``mint``."""
    return Pubkey.find_program_address(
        [METADATA_SEED, bytes(program_id), bytes(mint)],
        program_id,
    )


def _optional_account(pubkey: Optional[Pubkey], is_writable: bool, program_id: Pubkey) -> AccountMeta:
    # Absent optional accounts are passed as the program id, read-only.
    if pubkey is None:
        return AccountMeta(pubkey=program_id, is_signer=False, is_writable=False)
    return AccountMeta(pubkey=pubkey, is_signer=False, is_writable=is_writable)


def create_v1(
    metadata: Pubkey,
    mint: Pubkey,
    authority: Pubkey,
    payer: Pubkey,
    update_authority: Pubkey,
    name: str,
    uri: str,
    *,
    symbol: str = "",
    seller_fee_basis_points: int = 0,
    token_standard: TokenStandard = TokenStandard.FUNGIBLE,
    decimals: Optional[int] = None,
    mint_is_signer: bool = True,
    update_authority_is_signer: bool = False,
    primary_sale_happened: bool = False,
    is_mutable: bool = True,
    master_edition: Optional[Pubkey] = None,
    spl_token_program: Optional[Pubkey] = SPL_TOKEN_PROGRAM,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    """Build a ``CreateV1`` instruction."""
    data = CREATE_V1_LAYOUT.build({
        "name": name,
        "symbol": symbol,
        "uri": uri,
        "seller_fee_basis_points": seller_fee_basis_points,
        "creators": NONE,
        "primary_sale_happened": primary_sale_happened,
        "is_mutable": is_mutable,
        "token_standard": int(token_standard),
        "collection": NONE,
        "uses": NONE,
        "collection_details": NONE,
        "rule_set": NONE,
        "decimals": NONE if decimals is None else some(decimals),
        "print_supply": NONE,
    })

    accounts = [
        AccountMeta(pubkey=metadata, is_signer=False, is_writable=True),
        _optional_account(master_edition, True, program_id),
        AccountMeta(pubkey=mint, is_signer=mint_is_signer, is_writable=True),
        AccountMeta(pubkey=authority, is_signer=True, is_writable=False),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=update_authority, is_signer=update_authority_is_signer, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSVAR_INSTRUCTIONS, is_signer=False, is_writable=False),
        _optional_account(spl_token_program, False, program_id),
    ]
    return Instruction(program_id, data, accounts)


def mint_v1(
    token: Pubkey,
    metadata: Pubkey,
    mint: Pubkey,
    authority: Pubkey,
    payer: Pubkey,
    amount: int,
    *,
    token_owner: Optional[Pubkey] = None,
    master_edition: Optional[Pubkey] = None,
    token_record: Optional[Pubkey] = None,
    delegate_record: Optional[Pubkey] = None,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    """Build a ``MintV1`` instruction."""
    data = MINT_V1_LAYOUT.build({"amount": amount, "authorization_data": NONE})

    accounts = [
        AccountMeta(pubkey=token, is_signer=False, is_writable=True),
        _optional_account(token_owner, False, program_id),
        AccountMeta(pubkey=metadata, is_signer=False, is_writable=False),
        _optional_account(master_edition, False, program_id),
        _optional_account(token_record, True, program_id),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=authority, is_signer=True, is_writable=False),
        _optional_account(delegate_record, False, program_id),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYSTEM_PROGRAM, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSVAR_INSTRUCTIONS, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SPL_TOKEN_PROGRAM, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SPL_ATA_PROGRAM, is_signer=False, is_writable=False),
        # authorization rules program and account
        _optional_account(None, False, program_id),
        _optional_account(None, False, program_id),
    ]
    return Instruction(program_id, data, accounts)
