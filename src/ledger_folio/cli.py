"""Click-based CLI for ledger-folio.

Thin wrapper around library modules. Zero business logic: every command
delegates to the prices, ledger, or analytics packages.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from ledger_folio.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


async def _create_store_async(config):
    """Create and initialize storage from config."""
    from ledger_folio.prices import create_store

    return await create_store(config.storage)


def _create_ledger(config):
    from ledger_folio.ledger import LedgerCLI

    return LedgerCLI(config.journal_path, config.default_currency, config.ledger)


def _format_amount(value) -> str:
    return f"{value:,.2f}"


def _format_percent(value) -> str:
    return f"{value * 100:.2f}%"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="LEDGER_FOLIO_CONFIG",
    default=None,
    help="Path to ledger-folio.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="ledger-folio")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Ledger Folio: commodity prices and portfolio breakdowns for a ledger journal."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# sync
# ---------------------------------------------------------------------------


@cli.group()
def sync() -> None:
    """Refresh stored price history."""


@sync.command("prices")
@click.pass_context
def sync_prices(ctx: click.Context) -> None:
    """Fetch every configured commodity and replace its stored prices."""
    config = _load_config(ctx)

    async def _run():
        from ledger_folio.prices import build_registry, sync_commodity_prices

        store = await _create_store_async(config)
        try:
            report = await sync_commodity_prices(
                config.commodities,
                build_registry(config),
                store,
                batch_size=config.sync.batch_size,
                shuffle=config.sync.shuffle,
            )
        finally:
            await store.close()

        console.print(
            f"[green]✓[/green] Stored {report.prices_inserted} prices "
            f"for {report.commodities} commodities "
            f"(fetch {report.fetch_seconds:.2f}s, write {report.write_seconds:.2f}s)"
        )
        if report.failed:
            console.print(
                f"[yellow]No prices for: {', '.join(report.failed)}[/yellow]"
            )

    _run_async(_run())


@sync.command("journal")
@click.pass_context
def sync_journal(ctx: click.Context) -> None:
    """Store the prices declared in the journal itself."""
    config = _load_config(ctx)

    async def _run():
        from ledger_folio.ledger import sync_journal_prices

        store = await _create_store_async(config)
        try:
            count = await sync_journal_prices(_create_ledger(config), store)
        finally:
            await store.close()
        console.print(f"[green]✓[/green] Stored {count} journal prices")

    _run_async(_run())


# ---------------------------------------------------------------------------
# balance
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--checking",
    is_flag=True,
    default=False,
    help="Show checking accounts instead of all assets.",
)
@click.option(
    "--date",
    "-d",
    "as_of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Valuation date (YYYY-MM-DD). Default: today.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def balance(ctx, checking: bool, as_of, output_format: str) -> None:
    """Show per-account investment, market value and returns."""
    config = _load_config(ctx)
    today = as_of.date() if as_of else date.today()

    async def _run():
        from ledger_folio.analytics import (
            AccountRules,
            PostingClassifier,
            asset_balance,
            checking_balance,
        )
        from ledger_folio.ledger import load_postings

        store = await _create_store_async(config)
        try:
            postings = await load_postings(_create_ledger(config), store, today)
        finally:
            await store.close()

        classifier = PostingClassifier(
            postings, AccountRules(default_currency=config.default_currency)
        )
        compute = checking_balance if checking else asset_balance
        return compute(postings, classifier, today)

    breakdowns = _run_async(_run())

    if output_format == "json":
        output = [b.model_dump(mode="json") for b in breakdowns.values()]
        click.echo(json.dumps(output, indent=2))
    else:
        _output_balance_table(breakdowns, "Checking" if checking else "Assets")


def _output_balance_table(breakdowns, title: str) -> None:
    """Render account breakdowns as a Rich table."""
    table = Table(title=title)
    table.add_column("Account", style="bold")
    table.add_column("Investment", justify="right")
    table.add_column("Withdrawal", justify="right")
    table.add_column("Market", justify="right")
    table.add_column("Gain", justify="right")
    table.add_column("Abs. Return", justify="right")
    table.add_column("XIRR", justify="right")

    for b in breakdowns.values():
        gain_style = "green" if b.gain_amount >= 0 else "red"
        table.add_row(
            b.group,
            _format_amount(b.investment_amount),
            _format_amount(b.withdrawal_amount),
            _format_amount(b.market_amount),
            f"[{gain_style}]{_format_amount(b.gain_amount)}[/{gain_style}]",
            _format_percent(b.absolute_return),
            _format_percent(b.xirr),
        )

    console.print(table)


# ---------------------------------------------------------------------------
# distribution
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def distribution(ctx: click.Context, output_format: str) -> None:
    """Show how market value is split across asset classes."""
    config = _load_config(ctx)

    async def _run():
        from ledger_folio.analytics import (
            AccountRules,
            PostingClassifier,
            asset_distribution,
        )
        from ledger_folio.ledger import load_postings

        store = await _create_store_async(config)
        try:
            postings = await load_postings(_create_ledger(config), store)
        finally:
            await store.close()

        classifier = PostingClassifier(
            postings, AccountRules(default_currency=config.default_currency)
        )
        return asset_distribution(postings, classifier)

    entries = _run_async(_run())

    if output_format == "json":
        output = [d.model_dump(mode="json") for d in entries]
        click.echo(json.dumps(output, indent=2))
        return

    table = Table(title="Asset Distribution")
    table.add_column("Category", style="bold")
    table.add_column("Amount", justify="right")
    table.add_column("Share", justify="right")
    for d in entries:
        table.add_row(d.category, _format_amount(d.amount), f"{d.percentage:.2f}%")
    console.print(table)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address. Default: from config.")
@click.option("--port", "-p", type=int, default=None, help="Port number. Default: from config.")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]uvicorn not installed. Install with: "
            "pip install ledger-folio[api][/red]"
        )
        raise SystemExit(1)

    config = _load_config(ctx)
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting ledger-folio API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "ledger_folio.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configured commodities and stored price coverage."""
    config = _load_config(ctx)

    async def _run():
        store = await _create_store_async(config)
        try:
            return await store.list_commodities(), await store.count()
        finally:
            await store.close()

    stored, total = _run_async(_run())
    coverage = {(row["commodity_type"], row["commodity_name"]): row for row in stored}

    table = Table(title="Ledger Folio Status")
    table.add_column("Commodity", style="bold")
    table.add_column("Type")
    table.add_column("Provider")
    table.add_column("Prices", justify="right")
    table.add_column("Range")

    for commodity in config.commodities:
        row = coverage.get((str(commodity.type), commodity.name))
        table.add_row(
            commodity.name,
            str(commodity.type),
            commodity.price.provider,
            str(row["count"]) if row else "0",
            f"{row['first_date']} → {row['last_date']}" if row else "N/A",
        )

    console.print(f"Journal: {config.journal_path}")
    console.print(f"Database: {config.storage.sqlite_path} ({total} prices)")
    console.print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
