"""Read-only command line queries against a Gyro deployment.

Usage:
    python -m gyrosdk network
    python -m gyrosdk balance [--account 0x...]
    python -m gyrosdk supply
    python -m gyrosdk tokens
    python -m gyrosdk reserves
    python -m gyrosdk token-balance 0xTOKEN [--address 0x...]

Node and deployments are taken from GYRO_* settings. No command here
submits a transaction.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from gyrosdk.client import Gyro
from gyrosdk.config import get_settings
from gyrosdk.errors import GyroError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gyrosdk", description="Gyro protocol queries")
    parser.add_argument("--account", type=str, default=None,
                        help="Account to query as (default: GYRO_ACCOUNT or node's first account)")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("network", help="Show resolved network and contract addresses")
    commands.add_parser("balance", help="Gyro balance of the account")
    commands.add_parser("supply", help="Total Gyro supply")
    commands.add_parser("tokens", help="Tokens accepted for minting")
    commands.add_parser("reserves", help="Current reserve composition")

    token_balance = commands.add_parser("token-balance", help="ERC-20 balance of a token")
    token_balance.add_argument("token", type=str, help="Token address")
    token_balance.add_argument("--address", type=str, default=None,
                               help="Holder address (default: the account)")
    return parser


async def run(args: argparse.Namespace) -> None:
    gyro = await Gyro.create(address=args.account)

    if args.command == "network":
        print(f"Network:  {gyro.network} (chain {gyro.deployment.chain_id})")
        print(f"Fund:     {gyro.deployment.fund_address}")
        print(f"Library:  {gyro.deployment.lib_address}")
        print(f"Account:  {gyro.address}")

    elif args.command == "balance":
        print(f"{await gyro.balance()} GYRO")

    elif args.command == "supply":
        print(f"{await gyro.total_supply()} GYRO")

    elif args.command == "tokens":
        tokens = await gyro.get_supported_tokens()
        print(f"Supported tokens ({len(tokens)} total):")
        print("-" * 60)
        for token in tokens:
            print(f"  {token.symbol:<8} {token.address}  decimals={token.decimals}  {token.name}")

    elif args.command == "reserves":
        reserves = await gyro.get_reserve_values()
        print(f"Reserve entries ({len(reserves)} total):")
        print("-" * 60)
        for reserve in reserves:
            flag = "" if reserve.error_code == 0 else f"  (error code {reserve.error_code})"
            print(f"  {reserve.address}  {reserve.amount}{flag}")

    elif args.command == "token-balance":
        print(await gyro.token_balance(args.token, args.address))


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(run(args))
    except GyroError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
