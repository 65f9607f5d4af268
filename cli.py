#!/usr/bin/env python3
"""Simple CLI for exercising the bridge core locally"""

import argparse
import asyncio
from typing import List, Optional

import httpx

from hfvbridge.core.chains import ChainRegistry
from hfvbridge.core.portfolio import Portfolio
from hfvbridge.dependencies import get_components
from hfvbridge.errors import BridgeCoreError
from hfvbridge.logging_config import setup_logging


def resolve_chain(registry: ChainRegistry, value: str) -> int:
    chain_id = int(value) if value.isdigit() else registry.get_chain_id(value)
    if chain_id is None or not registry.is_supported(chain_id):
        raise ValueError(f"Unknown chain: {value}")
    return chain_id


def print_portfolio(portfolio: Portfolio, registry: ChainRegistry, show_dust: bool = False):
    """Pretty print portfolio data"""
    print("\n🔄 Portfolio")
    print("=" * 60)
    print(f"Address: {portfolio.owner}")
    print(f"Total Value: ${portfolio.total_usd:,.2f} USD")

    visible = {id(entry) for entry in portfolio.visible_entries()}
    for chain_id, entries in portfolio.by_chain.items():
        shown = [e for e in entries if show_dust or id(e) in visible]
        if not shown:
            continue
        chain = registry.get(chain_id)
        print(f"\n{chain.name if chain else chain_id}:")
        print("-" * 60)
        for entry in sorted(shown, key=lambda e: e.usd_value or 0.0, reverse=True):
            value_str = f"${entry.usd_value:,.2f}" if entry.usd_value else "No price"
            print(f"  {entry.formatted_balance:>18,.6f} {entry.symbol:<8} {value_str:>12}  [{entry.source.value}]")

    dust = portfolio.dust_entries()
    if dust and not show_dust:
        print(f"\n{len(dust)} holdings below ${portfolio.dust_threshold_usd:,.2f} hidden (use --dust)")

    if portfolio.errors:
        print("\n⚠️  Chains without data:")
        for chain_id, error in portfolio.errors.items():
            print(f"  {chain_id}: {error}")


async def cli_chains(with_rpc: bool):
    registry = get_components().registry
    chains = registry.with_rpc() if with_rpc else registry.all()
    print(f"{len(chains)} chains")
    for chain in chains:
        rpc = "rpc" if chain.has_rpc else "   "
        router = "router" if chain.router_address else ""
        print(f"{chain.chain_id:>8}  {chain.key:<16} {chain.symbol:<6} {rpc} {router}")


async def cli_portfolio(address: str, chains: List[str], show_dust: bool):
    """CLI command to get portfolio"""
    components = get_components()
    chain_ids = [resolve_chain(components.registry, value) for value in chains] or None
    print(f"🔍 Sweeping balances for {address}...")

    portfolio = await components.portfolio.get_portfolio(address, chain_ids)
    print_portfolio(portfolio, components.registry, show_dust)


async def cli_prices(chains: List[str]):
    components = get_components()
    chain_ids = [resolve_chain(components.registry, value) for value in chains] or components.registry.chain_ids()
    prices = await components.prices.many_native_prices(chain_ids)
    for chain_id, price in prices.items():
        chain = components.registry.require(chain_id)
        print(f"{chain.name:<24} {chain.symbol:<6} ${price:,.4f}")


async def cli_quote(source: str, destination: str, token: str, amount: str, recipient: Optional[str]):
    components = get_components()
    wallet = components.wallet

    if await wallet.restore_session() is None:
        print("🔌 Waiting for wallet approval...")
        await wallet.connect()
    print(f"Connected: {wallet.address} on chain {wallet.chain_id}")

    request = components.bridge.build_request(
        resolve_chain(components.registry, source),
        resolve_chain(components.registry, destination),
        token,
        amount,
        recipient,
    )
    quote = await components.bridge.get_quote(request)
    print(f"\n💱 Quote {quote.quote_id} via {quote.path.value}")
    print(f"Send:     {request.amount_str} {request.token.symbol}")
    print(f"Receive:  ~{quote.estimated_output_amount} on chain {request.destination_chain_id}")
    print(f"Gas:      ~${quote.estimated_gas_usd:,.2f}")
    if quote.expires_at:
        print(f"Expires:  {quote.expires_at.isoformat()}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HFV bridge CLI")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command")

    chains_parser = subparsers.add_parser("chains", help="List supported chains")
    chains_parser.add_argument("--rpc", action="store_true", help="Only chains with an RPC endpoint")

    portfolio_parser = subparsers.add_parser("portfolio", help="Sweep balances across chains")
    portfolio_parser.add_argument("address", help="Wallet address")
    portfolio_parser.add_argument("chains", nargs="*", help="Chain ids or keys (default: all)")
    portfolio_parser.add_argument("--dust", action="store_true", help="Show holdings below the dust threshold")

    prices_parser = subparsers.add_parser("prices", help="Native asset USD prices")
    prices_parser.add_argument("chains", nargs="*", help="Chain ids or keys (default: all)")

    quote_parser = subparsers.add_parser("quote", help="Request a bridge quote through the connected wallet")
    quote_parser.add_argument("source", help="Source chain id or key")
    quote_parser.add_argument("destination", help="Destination chain id or key")
    quote_parser.add_argument("token", help="Token symbol or address on the source chain")
    quote_parser.add_argument("amount", help="Amount in whole token units")
    quote_parser.add_argument("--recipient", help="Destination address (default: connected account)")

    return parser


async def main():
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return

    command = args.command.lower()

    try:
        if command == "chains":
            await cli_chains(args.rpc)

        elif command == "portfolio":
            await cli_portfolio(args.address, args.chains, args.dust)

        elif command == "prices":
            await cli_prices(args.chains)

        elif command == "quote":
            await cli_quote(args.source, args.destination, args.token, args.amount, args.recipient)

        else:
            print(f"❌ Unknown command: {command}")
            parser.print_help()

    except (BridgeCoreError, httpx.HTTPError, ValueError) as e:
        print(f"❌ Error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
