"""
Unit tests for Token Metadata instruction encoding.
"""

import struct
import unittest

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .. import token_metadata
from ..token_metadata import (
    CREATE_V1_LAYOUT,
    MINT_V1_LAYOUT,
    PROGRAM_ID,
    SPL_ATA_PROGRAM,
    SPL_TOKEN_PROGRAM,
    SYSTEM_PROGRAM,
    SYSVAR_INSTRUCTIONS,
    TokenStandard,
    create_v1,
    find_metadata_pda,
    mint_v1,
)


def _borsh_string(value: str) -> bytes:
    data = value.encode("utf-8")
    return struct.pack("<I", len(data)) + data


class TestMetadataPda(unittest.TestCase):
    """Test cases for metadata PDA derivation."""

    def test_pda_is_deterministic(self):
        """Test PDA derivation is deterministic."""
        mint = Keypair().pubkey()
        self.assertEqual(find_metadata_pda(mint), find_metadata_pda(mint))

    def test_pda_matches_seed_rule(self):
        """Test the PDA uses the metadata seed rule."""
        mint = Keypair().pubkey()
        expected = Pubkey.find_program_address(
            [b"metadata", bytes(PROGRAM_ID), bytes(mint)], PROGRAM_ID
        )
        self.assertEqual(find_metadata_pda(mint), expected)

    def test_different_mints_give_different_pdas(self):
        """Test different mints give different PDAs."""
        self.assertNotEqual(
            find_metadata_pda(Keypair().pubkey())[0],
            find_metadata_pda(Keypair().pubkey())[0]
        )


class TestCreateV1(unittest.TestCase):
    """Test cases for the CreateV1 instruction."""

    def setUp(self):
        self.mint = Keypair().pubkey()
        self.payer = Keypair().pubkey()
        self.metadata = find_metadata_pda(self.mint)[0]
        self.ix = create_v1(
            metadata=self.metadata,
            mint=self.mint,
            authority=self.payer,
            payer=self.payer,
            update_authority=self.payer,
            name="Test",
            uri="https://x/y.json",
            decimals=6,
        )

    def test_data_layout(self):
        """Test the CreateV1 data bytes."""
        expected = (
            bytes([42, 0])
            + _borsh_string("Test")
            + _borsh_string("")
            + _borsh_string("https://x/y.json")
            + struct.pack("<H", 0)
            + b"\x00"           # creators: None
            + b"\x00"           # primary_sale_happened
            + b"\x01"           # is_mutable
            + bytes([TokenStandard.FUNGIBLE])
            + b"\x00\x00\x00\x00"  # collection, uses, collection_details, rule_set
            + b"\x01\x06"       # decimals: Some(6)
            + b"\x00"           # print_supply: None
        )
        self.assertEqual(bytes(self.ix.data), expected)

    def test_data_parses_back(self):
        """Test the CreateV1 data parses back."""
        parsed = CREATE_V1_LAYOUT.parse(bytes(self.ix.data))

        self.assertEqual(parsed.name, "Test")
        self.assertEqual(parsed.uri, "https://x/y.json")
        self.assertEqual(parsed.symbol, "")
        self.assertEqual(parsed.token_standard, TokenStandard.FUNGIBLE)
        self.assertTrue(parsed.decimals.is_some)
        self.assertEqual(parsed.decimals.value, 6)

    def test_accounts(self):
        """Test the CreateV1 account order and flags."""
        accounts = self.ix.accounts
        self.assertEqual(self.ix.program_id, PROGRAM_ID)
        self.assertEqual(len(accounts), 9)

        self.assertEqual(accounts[0].pubkey, self.metadata)
        self.assertTrue(accounts[0].is_writable)
        # master edition absent
        self.assertEqual(accounts[1].pubkey, PROGRAM_ID)
        self.assertFalse(accounts[1].is_writable)
        self.assertEqual(accounts[2].pubkey, self.mint)
        self.assertTrue(accounts[2].is_signer)
        self.assertTrue(accounts[2].is_writable)
        self.assertEqual(accounts[3].pubkey, self.payer)
        self.assertTrue(accounts[3].is_signer)
        self.assertEqual(accounts[4].pubkey, self.payer)
        self.assertTrue(accounts[4].is_writable)
        self.assertEqual(accounts[5].pubkey, self.payer)
        self.assertFalse(accounts[5].is_signer)
        self.assertEqual(accounts[6].pubkey, SYSTEM_PROGRAM)
        self.assertEqual(accounts[7].pubkey, SYSVAR_INSTRUCTIONS)
        self.assertEqual(accounts[8].pubkey, SPL_TOKEN_PROGRAM)

    def test_decimals_none(self):
        """Test CreateV1 without decimals."""
        ix = create_v1(
            metadata=self.metadata,
            mint=self.mint,
            authority=self.payer,
            payer=self.payer,
            update_authority=self.payer,
            name="NFT",
            uri="u",
            token_standard=TokenStandard.NON_FUNGIBLE,
        )
        parsed = CREATE_V1_LAYOUT.parse(bytes(ix.data))
        self.assertFalse(parsed.decimals.is_some)
        self.assertEqual(parsed.token_standard, TokenStandard.NON_FUNGIBLE)


class TestMintV1(unittest.TestCase):
    """Test cases for the MintV1 instruction."""

    def setUp(self):
        self.mint = Keypair().pubkey()
        self.payer = Keypair().pubkey()
        self.owner = Keypair().pubkey()
        self.token = Keypair().pubkey()
        self.metadata = find_metadata_pda(self.mint)[0]
        self.ix = mint_v1(
            token=self.token,
            token_owner=self.owner,
            metadata=self.metadata,
            mint=self.mint,
            authority=self.payer,
            payer=self.payer,
            amount=1_000_000,
        )

    def test_data_layout(self):
        """Test the MintV1 data bytes."""
        expected = bytes([43, 0]) + struct.pack("<Q", 1_000_000) + b"\x00"
        self.assertEqual(bytes(self.ix.data), expected)

    def test_max_amount(self):
        """Test the largest u64 amount."""
        ix = mint_v1(
            token=self.token,
            metadata=self.metadata,
            mint=self.mint,
            authority=self.payer,
            payer=self.payer,
            amount=2 ** 64 - 1,
        )
        self.assertEqual(MINT_V1_LAYOUT.parse(bytes(ix.data)).amount, 2 ** 64 - 1)

    def test_accounts(self):
        """Test the MintV1 account order and flags."""
        accounts = self.ix.accounts
        self.assertEqual(len(accounts), 15)
        self.assertEqual(accounts[0].pubkey, self.token)
        self.assertTrue(accounts[0].is_writable)
        self.assertEqual(accounts[1].pubkey, self.owner)
        self.assertEqual(accounts[2].pubkey, self.metadata)
        self.assertEqual(accounts[5].pubkey, self.mint)
        self.assertTrue(accounts[5].is_writable)
        self.assertEqual(accounts[6].pubkey, self.payer)
        self.assertTrue(accounts[6].is_signer)
        self.assertEqual(accounts[8].pubkey, self.payer)
        self.assertTrue(accounts[8].is_signer)
        self.assertTrue(accounts[8].is_writable)
        self.assertEqual(accounts[11].pubkey, SPL_TOKEN_PROGRAM)
        self.assertEqual(accounts[12].pubkey, SPL_ATA_PROGRAM)
        for index in (3, 4, 7, 13, 14):
            self.assertEqual(accounts[index].pubkey, token_metadata.PROGRAM_ID)
            self.assertFalse(accounts[index].is_signer)
