"""
Command line interface for token operations.

Usage::

    sss-shared create-token --uri https://example.com/token.json --name "Test Token" --decimals 6
    sss-shared mint-token --mint <MINT> --amount 1000000 [--owner <OWNER>]
    sss-shared assets --owner <OWNER>
    sss-shared payer
"""

import argparse
import json
import sys
from typing import List, Optional

from solders.pubkey import Pubkey

from .clients.das_client import DasClient
from .config import SolanaConfig
from .errors import SssError
from .logging_utils import configure_logging
from .token_service import TokenService


def _pubkey(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid address: {value}")


def _decimals(value: str) -> int:
    decimals = int(value)
    if not 0 <= decimals <= 255:
        raise argparse.ArgumentTypeError("decimals must be between 0 and 255")
    return decimals


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='sss-shared', description='Solana token operations')
    parser.add_argument(
        '--log-level',
        default='WARNING',
        help='Log level (default: WARNING)',
    )
    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Render logs as JSON lines',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    create = subparsers.add_parser('create-token', help='Create a fungible token')
    create.add_argument(
        '--uri',
        type=str,
        required=True,
        help='URI of the token metadata JSON',
    )
    create.add_argument(
        '--name',
        type=str,
        required=True,
        help='Token name',
    )
    create.add_argument(
        '--decimals',
        type=_decimals,
        default=6,
        help='Number of decimal places (default: 6)',
    )

    mint = subparsers.add_parser('mint-token', help='Mint tokens of an existing mint')
    mint.add_argument(
        '--mint',
        type=_pubkey,
        required=True,
        help='Mint address',
    )
    mint.add_argument(
        '--owner',
        type=_pubkey,
        help='Token owner (defaults to the payer)',
    )
    mint.add_argument(
        '--amount',
        type=int,
        required=True,
        help='Amount in base units',
    )

    assets = subparsers.add_parser('assets', help='List digital assets owned by an address')
    assets.add_argument(
        '--owner',
        type=_pubkey,
        required=True,
        help='Owner address',
    )

    subparsers.add_parser('payer', help='Show the payer address')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, json_output=args.json_logs)

    try:
        config = SolanaConfig.from_env()

        if args.command == 'create-token':
            service = TokenService.from_config(config)
            result = service.create_new_token(args.uri, args.name, args.decimals)
            print(f"Token created: {args.name}")
            print(f"Transaction signature: {result.signature}")
            print(f"Mint address: {result.mint}")
            print(f"Explorer: {config.explorer_address_url(str(result.mint))}")

        elif args.command == 'mint-token':
            service = TokenService.from_config(config)
            signature = service.mint_token(args.mint, args.owner, args.amount)
            print(f"Tokens minted: {args.amount}")
            print(f"Transaction signature: {signature}")
            print(f"Explorer: {config.explorer_tx_url(signature)}")

        elif args.command == 'assets':
            assets = DasClient.from_config(config).get_assets_by_owner(args.owner)
            print(json.dumps([asset.to_dict() for asset in assets], indent=2))

        elif args.command == 'payer':
            service = TokenService.from_config(config)
            print(service.identity.payer_pubkey())

    except SssError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
