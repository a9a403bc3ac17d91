"""CLI interface for the shop token cron."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.config import Settings, is_mock_mode
from src.cron.runner import CronRunner, RunResult
from src.refresh.pacing import Pacer

logger = logging.getLogger(__name__)

DEFAULT_LOOP_INTERVAL = 10 * 60  # 10 minutes, well inside the 30 minute lookahead


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Refresh expiring shop tokens and dispatch scheduled jobs",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Run one full cron cycle (refresh + jobs)")
    subparsers.add_parser("refresh", help="Refresh expiring tokens only")

    loop_cmd = subparsers.add_parser("loop", help="Run cron cycles on an interval")
    loop_cmd.add_argument(
        "--interval-seconds",
        type=int,
        default=DEFAULT_LOOP_INTERVAL,
        help="Seconds between cycles",
    )

    parser.set_defaults(command="run")
    return parser.parse_args(argv)


def build_runner(db, settings: Settings) -> CronRunner:
    """Create a runner with real or mock collaborators."""
    if is_mock_mode():
        from src.mock import MockJobInvoker, MockPlatformClient

        return CronRunner(db, settings, MockPlatformClient(), invoker=MockJobInvoker(), pacer=Pacer(0))

    from src.jobs.remote import RemoteJobInvoker
    from src.partner.client import PlatformClient

    return CronRunner(
        db,
        settings,
        PlatformClient.from_settings(settings),
        invoker=RemoteJobInvoker.from_settings(settings),
    )


async def run_once(settings: Settings, dispatch: bool) -> RunResult:
    """Execute a single cron cycle against the configured database."""
    from src.db.database import get_db_session

    with get_db_session() as db:
        runner = build_runner(db, settings)
        return await runner.run(dispatch=dispatch)


def print_result(console: Console, result: RunResult) -> None:
    """Render a run summary."""
    body = result.body
    if not result.success:
        console.print(f"[red]Run failed:[/red] {body.get('error')}")
        return

    table = Table(title="Token refresh", border_style="dim")
    table.add_column("Shop")
    table.add_column("Status")
    table.add_column("Detail")
    table.add_column("New expiry")
    for outcome in body.get("results", []):
        status = outcome["status"]
        style = "green" if status == "success" else "red"
        name = outcome.get("shop_name") or ""
        table.add_row(
            f"{outcome['shop_id']} {name}".strip(),
            f"[{style}]{status}[/{style}]",
            outcome["detail"],
            outcome.get("new_expires_at_iso") or "-",
        )
    console.print(table)
    console.print(f"Refreshed: [green]{body['refreshed']}[/green]  Failed: [red]{body['failed']}[/red]")

    for job_name in ("promotion_scheduler", "budget_scheduler", "data_sync"):
        section = body.get(job_name)
        if section is None:
            continue
        status = section.get("status")
        style = "green" if status == "completed" else "red"
        line = f"{job_name}: [{style}]{status}[/{style}]"
        if "processed" in section:
            line += f" ({section['processed']} shops)"
        if section.get("error"):
            line += f" - {section['error']}"
        console.print(line)


async def run_loop(console: Console, settings: Settings, interval_seconds: int) -> None:
    """Run cycles forever; a failed cycle never stops the loop."""
    while True:
        try:
            result = await run_once(settings, dispatch=True)
            print_result(console, result)
        except Exception as e:
            logger.error("Cron cycle failed: %s", e)
        await asyncio.sleep(interval_seconds)


def main(argv: list[str] | None = None) -> None:
    """Run the shop token cron CLI."""
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="[%(asctime)s] %(levelname)s %(message)s",
    )
    console = Console()
    args = parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    mode_text = "[yellow](MOCK MODE)[/yellow] " if is_mock_mode() else ""
    console.print(Panel.fit(
        f"[bold blue]Shop Token Cron[/bold blue] {mode_text}\n"
        f"Lookahead {settings.lookahead_minutes} min, "
        f"staleness cutoff {settings.max_staleness_hours} h, "
        f"batch {settings.refresh_batch_size}",
        border_style="blue",
    ))

    if is_mock_mode():
        from src.db.database import get_db_session
        from src.db.migrations import run_migrations
        from src.db.seed import has_demo_data, seed_demo_shops

        run_migrations()
        with get_db_session() as db:
            if not has_demo_data(db):
                seed_demo_shops(db)

    if args.command == "loop":
        try:
            asyncio.run(run_loop(console, settings, args.interval_seconds))
        except KeyboardInterrupt:
            console.print("\n[dim]Stopped.[/dim]")
        return

    result = asyncio.run(run_once(settings, dispatch=args.command == "run"))
    print_result(console, result)
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
