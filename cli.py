#!/usr/bin/env python3
"""
cli.py - Command line entrypoint for the Odos connector.

Usage:
    python -m cli tokens --chain ethereum --network mainnet
    python -m cli quote --side sell --base WETH --quote USDC --amount 1.5
    python -m cli swap --side sell --base WETH --quote USDC --amount 0.1 --yes
"""

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable

import click

from chains.chain import default_chain_registry
from core.exceptions import GatewayError, TokenNotFoundError
from core.logging import get_logger, setup_logging
from core.models import Token
from dex.adapters.odos import OdosAdapter
from dex.registry import ConnectorRegistry
from execution.wallet import LocalWallet

logger = get_logger("odos.cli")


def resolve_token(adapter: OdosAdapter, value: str) -> Token:
    """Find a token by address or (case-insensitive) symbol."""
    if value.lower().startswith("0x"):
        token = adapter.get_token_by_address(value)
    else:
        matches = [t for t in adapter.tokens if t.symbol.upper() == value.upper()]
        token = matches[0] if matches else None
    if token is None:
        raise TokenNotFoundError(
            f"Token {value} is not supported on {adapter.chain_name}",
            details={"token": value},
        )
    return token


async def with_connector(
    chain: str,
    network: str,
    action: Callable[[OdosAdapter], Awaitable[Any]],
) -> Any:
    """Run an action against an initialized connector, then close everything."""
    registry = ConnectorRegistry(default_chain_registry())
    try:
        adapter = await registry.get_initialized(chain, network)
        return await action(adapter)
    finally:
        await registry.close_all()


def run(coro: Awaitable[Any]) -> Any:
    """Run a coroutine, turning connector errors into a non-zero exit."""
    try:
        return asyncio.run(coro)
    except GatewayError as e:
        logger.error(str(e), extra={"context": e.details})
        click.echo(json.dumps({"error": e.to_dict()}, indent=2, default=str), err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--log-level",
    "-l",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON log format",
)
def main(log_level: str, json_logs: bool) -> None:
    """Odos aggregator connector."""
    setup_logging(level=log_level, json_format=json_logs)


chain_option = click.option("--chain", "-c", default="ethereum", help="Gateway chain name")
network_option = click.option("--network", "-n", default="mainnet", help="Network of the chain")


@main.command()
@chain_option
@network_option
def tokens(chain: str, network: str) -> None:
    """List tokens the connector can quote."""
    async def action(adapter: OdosAdapter) -> list[dict]:
        return [t.to_dict() for t in adapter.tokens]

    click.echo(json.dumps(run(with_connector(chain, network, action)), indent=2))


@main.command()
@chain_option
@network_option
@click.option("--side", type=click.Choice(["sell", "buy"]), default="sell", help="Trade side")
@click.option("--base", "base_symbol", required=True, help="Base token symbol or address")
@click.option("--quote", "quote_symbol", required=True, help="Quote token symbol or address")
@click.option("--amount", required=True, help="Amount in human units")
def quote(chain: str, network: str, side: str, base_symbol: str, quote_symbol: str, amount: str) -> None:
    """Price a trade without executing it."""
    async def action(adapter: OdosAdapter) -> dict:
        base = resolve_token(adapter, base_symbol)
        quote_token = resolve_token(adapter, quote_symbol)
        if side == "sell":
            expected = await adapter.estimate_sell_trade(base, quote_token, amount)
        else:
            expected = await adapter.estimate_buy_trade(quote_token, base, amount)
        return expected.to_dict()

    click.echo(json.dumps(run(with_connector(chain, network, action)), indent=2))


@main.command()
@chain_option
@network_option
@click.option("--side", type=click.Choice(["sell", "buy"]), default="sell", help="Trade side")
@click.option("--base", "base_symbol", required=True, help="Base token symbol or address")
@click.option("--quote", "quote_symbol", required=True, help="Quote token symbol or address")
@click.option("--amount", required=True, help="Amount in human units")
@click.option("--simulate/--no-simulate", default=False, help="Ask Odos to simulate before assembling")
@click.option("--yes", is_flag=True, help="Submit without confirmation")
def swap(
    chain: str,
    network: str,
    side: str,
    base_symbol: str,
    quote_symbol: str,
    amount: str,
    simulate: bool,
    yes: bool,
) -> None:
    """Quote, assemble and submit a swap with WALLET_PRIVATE_KEY."""
    async def action(adapter: OdosAdapter) -> dict:
        wallet = LocalWallet.from_env(adapter.chain.provider)
        base = resolve_token(adapter, base_symbol)
        quote_token = resolve_token(adapter, quote_symbol)
        if side == "sell":
            expected = await adapter.estimate_sell_trade(base, quote_token, amount, user_address=wallet.address)
        else:
            expected = await adapter.estimate_buy_trade(quote_token, base, amount, user_address=wallet.address)

        click.echo(json.dumps(expected.to_dict(), indent=2))
        if not yes and not click.confirm("Submit this swap?"):
            return {"submitted": False}

        transaction = await adapter.assemble_transaction(expected.trade, wallet.address, simulate=simulate)
        submitted = await adapter.execute_trade(wallet, transaction)
        return {"submitted": True, "transaction": submitted.to_dict()}

    click.echo(json.dumps(run(with_connector(chain, network, action)), indent=2))


if __name__ == "__main__":
    main()
