"""
Rent Reclaimer CLI
==================
Typer + Rich command-line interface.

Commands:
    rent-reclaimer run                       # single run
    rent-reclaimer run --watch --interval 60 # repeat until interrupted
    rent-reclaimer run --json                # print JSON report per run
    rent-reclaimer status                    # show resolved configuration
    rent-reclaimer notify                    # Telegram notifier (detect only)
"""

import asyncio
from typing import Optional, Tuple

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from solders.keypair import Keypair

from config.settings import Settings
from rent_reclaimer.modules.reclaimer.coordinator import ReclaimCoordinator
from rent_reclaimer.modules.reclaimer.errors import ConfigurationError, ReclaimerError
from rent_reclaimer.modules.reclaimer.models import RunReport
from rent_reclaimer.modules.reclaimer.reporting import ReportTemplates
from rent_reclaimer.modules.reclaimer.senders import build_sender
from rent_reclaimer.shared.infrastructure.ledger_client import SolanaLedgerClient
from rent_reclaimer.shared.infrastructure.wallet import load_keypair_from_file
from rent_reclaimer.shared.system.logging import Logger

app = typer.Typer(
    name="rent-reclaimer",
    help="Reclaim rent from empty SPL token accounts",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def _load_settings() -> Settings:
    settings = Settings.from_env().validate()
    try:
        Logger.set_level(settings.LOG_LEVEL)
    except ValueError as e:
        raise ConfigurationError(f"LOG_LEVEL: {e}") from e
    return settings


def _build(settings: Settings) -> Tuple[SolanaLedgerClient, ReclaimCoordinator, Keypair]:
    operator = load_keypair_from_file(settings.OWNER_KEYPAIR_PATH)
    ledger = SolanaLedgerClient(settings.SOLANA_RPC_URL, commitment=settings.COMMITMENT)
    policy = settings.policy()
    sender = build_sender(policy, ledger, settings.RELAY_RPC_URL)
    return ledger, ReclaimCoordinator(ledger, sender, policy), operator


def _print_report(report: RunReport, as_json: bool) -> None:
    if as_json:
        # Plain stdout so the output can be piped
        print(ReportTemplates.json(report))
    else:
        console.print(ReportTemplates.run_result(report))


async def _run(settings: Settings, watch: bool, interval: int, as_json: bool) -> Optional[RunReport]:
    ledger, coordinator, operator = _build(settings)
    Logger.info(
        "[RUN] Boot",
        solana_rpc=settings.SOLANA_RPC_URL,
        use_relay=settings.USE_RELAY,
        dry_run=settings.DRY_RUN,
    )

    async with ledger:
        if watch:
            await coordinator.run_loop(
                operator,
                interval_sec=interval,
                on_report=lambda report: _print_report(report, as_json),
            )
            return None

        report = await coordinator.run_once(operator)
        _print_report(report, as_json)
        return report


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: RUN
# ═══════════════════════════════════════════════════════════════════════════════

@app.command()
def run(
    watch: bool = typer.Option(False, "--watch", help="Repeat the run every --interval seconds"),
    once: bool = typer.Option(False, "--once", help="Single run (default)"),
    interval: int = typer.Option(60, "--interval", min=1, help="Seconds between runs in watch mode"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON report to stdout"),
):
    """
    Scan for empty token accounts and close the most valuable ones.

    DRY_RUN=1 (the default) only reports what would be closed.
    """
    if once and watch:
        console.print("[bold red]Choose either --once or --watch[/bold red]")
        raise typer.Exit(2)

    try:
        settings = _load_settings()
        asyncio.run(_run(settings, watch=watch, interval=interval, as_json=as_json))
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutdown requested.[/yellow]")
    except ReclaimerError as e:
        Logger.error("[RUN] Fatal", err=str(e))
        raise typer.Exit(1)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: STATUS
# ═══════════════════════════════════════════════════════════════════════════════

@app.command()
def status():
    """Show the resolved configuration."""
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(1)

    table = Table(title="Rent Reclaimer Config")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in settings.describe().items():
        table.add_row(key, str(value))
    console.print(table)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: NOTIFY
# ═══════════════════════════════════════════════════════════════════════════════

@app.command()
def notify():
    """Run the Telegram notifier bot (reports only, never closes)."""
    from rent_reclaimer.shared.notification.telegram_manager import TelegramNotifier

    try:
        settings = _load_settings()
        _, coordinator, operator = _build(settings)
        notifier = TelegramNotifier(settings, coordinator, str(operator.pubkey()))
        console.print(Panel.fit("[bold cyan]📣 Rent Reclaim Notifier[/bold cyan]", border_style="cyan"))
        notifier.run()
    except ReclaimerError as e:
        Logger.error("[TG] Fatal", err=str(e))
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
