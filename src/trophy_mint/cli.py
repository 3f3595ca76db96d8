"""CLI interface for Trophy Mint."""

import asyncio
import signal

import typer
from rich.console import Console
from rich.table import Table

from trophy_mint.achievements import AchievementAggregator
from trophy_mint.cache import CacheStore
from trophy_mint.chain import (
    MintPipeline,
    ReconciliationWorker,
    Web3ChainReader,
    Web3MintWriter,
    connect,
    derive_token_id,
)
from trophy_mint.config import Settings, configure_logging, get_settings
from trophy_mint.errors import TrophyMintError
from trophy_mint.steam import SteamClient
from trophy_mint.storage import MintLedger

app = typer.Typer(
    name="trophy-mint",
    help="Steam achievement rarity and on-chain achievement tokens",
    no_args_is_help=True,
)
console = Console()


def _require_chain(settings: Settings) -> None:
    if not settings.node_http_url or not settings.contract_address:
        console.print(
            "[bold red]Error:[/bold red] Set NODE_HTTP_URL and "
            "ACHIEVEMENT_NFT_CONTRACT_ADDRESS to talk to the chain."
        )
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
):
    """Run the HTTP API."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run("trophy_mint.web.app:create_app", factory=True, host=host, port=port)


@app.command()
def worker(
    from_block: int | None = typer.Option(
        None, "--from-block", help="Start after this block instead of a recent one"
    ),
):
    """Tail AchievementMinted events into the local mint ledger."""
    settings = get_settings()
    configure_logging(settings.log_level)
    _require_chain(settings)

    reader = Web3ChainReader(
        connect(settings.node_http_url, settings.http_timeout_seconds), settings.contract_address
    )
    reconciler = ReconciliationWorker(
        reader,
        MintLedger(settings.data_dir),
        poll_interval=settings.poll_interval_seconds,
        blocks_per_poll=settings.blocks_per_poll,
        cold_start_lookback=settings.cold_start_lookback_blocks,
        watermark=from_block,
    )

    async def _run():
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except NotImplementedError:
                # Windows event loops have no signal handlers
                pass
        await reconciler.run(stop)

    console.print(f"[bold blue]Watching {settings.contract_address}...[/bold blue]")
    asyncio.run(_run())


@app.command()
def achievements(
    steam_id: str = typer.Argument(..., help="64-bit Steam ID"),
    app_id: int = typer.Argument(..., help="Steam application ID"),
):
    """Show a player's achievements for a game, rarest unlocks first."""
    settings = get_settings()
    configure_logging("WARNING")

    async def _fetch():
        async with SteamClient(settings.steam_api_key, timeout=settings.http_timeout_seconds) as steam:
            cache = CacheStore(settings.redis_url, default_ttl=settings.cache_ttl_seconds)
            try:
                aggregator = AchievementAggregator(steam, cache, settings.cache_ttl_seconds)
                return await aggregator.get_achievements(steam_id, app_id)
            finally:
                await cache.close()

    try:
        view = asyncio.run(_fetch())
    except TrophyMintError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"{view.game_name} - {view.unlocked}/{len(view.achievements)} ({view.completion_percent}%)")
    table.add_column("", width=2)
    table.add_column("Achievement")
    table.add_column("Global %", justify="right")
    table.add_column("API name", style="dim")
    for ach in view.achievements:
        table.add_row(
            "[green]✓[/green]" if ach.achieved else "",
            ach.display_name or ach.name,
            f"{ach.percent:.1f}",
            ach.name,
        )
    console.print(table)


@app.command("token-id")
def token_id(
    app_id: int = typer.Argument(..., help="Steam application ID"),
    achievement: str = typer.Argument(..., help="Achievement API name"),
):
    """Print the token id minted for an achievement."""
    try:
        value = derive_token_id(app_id, achievement)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    console.print(str(value))
    console.print(f"[dim]0x{value:064x}[/dim]")


@app.command()
def mint(
    owner: str = typer.Argument(..., help="Address receiving the token"),
    app_id: int = typer.Argument(..., help="Steam application ID"),
    achievement: str = typer.Argument(..., help="Achievement API name"),
):
    """Mint an achievement token from the configured minter account."""
    settings = get_settings()
    configure_logging(settings.log_level)
    _require_chain(settings)
    if not settings.minter_address:
        console.print("[bold red]Error:[/bold red] Set MINTER_ADDRESS to mint.")
        raise typer.Exit(1)

    writer = Web3MintWriter(
        connect(settings.node_http_url, settings.http_timeout_seconds),
        settings.contract_address,
        settings.minter_address,
    )
    pipeline = MintPipeline(writer, MintLedger(settings.data_dir))

    with console.status("[dim]Minting...[/dim]"):
        result = asyncio.run(pipeline.mint(owner, app_id, achievement))

    if not result.ok:
        console.print(
            f"[bold red]Mint failed at {result.failed_stage.value}:[/bold red] {result.error}"
        )
        raise typer.Exit(1)
    console.print(
        f"[bold green]Minted![/bold green] token {result.token_id} "
        f"in block {result.block_number} ({result.transaction_hash})"
    )


@app.command()
def mints(
    owner: str | None = typer.Option(None, "--owner", "-o", help="Only mints owned by this address"),
):
    """List achievement mints recorded in the local ledger."""
    settings = get_settings()
    ledger = MintLedger(settings.data_dir)
    records = ledger.list_by_owner(owner) if owner else ledger.load()

    if not records:
        console.print("[yellow]No mints recorded yet.[/yellow]")
        return

    table = Table()
    table.add_column("Block", justify="right")
    table.add_column("Owner")
    table.add_column("App", justify="right")
    table.add_column("Achievement")
    table.add_column("Tx", style="dim")
    for r in records:
        table.add_row(str(r.block_number), r.owner, str(r.app_id), r.achievement_id, r.transaction_hash)
    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
