"""Console entry point.

Authenticates, lists the account's devices and polls every device until
the operator types ``c`` (or sends SIGINT/SIGTERM).

Usage
-----
Set environment variables (or pass the matching options) and run::

    export FLEETLOG_SERVER="my.geotab.com"
    export FLEETLOG_DATABASE="demo"
    export FLEETLOG_USERNAME="you@example.com"
    export FLEETLOG_PASSWORD="your-password"
    fleetlog --units imperial

Missing credentials are prompted for unless ``--no-prompt`` is given.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import getpass
import logging
import sys
from typing import Any

from fleetlog import __version__
from fleetlog.client import FleetClient
from fleetlog.config import FleetlogConfig
from fleetlog.exceptions import FleetlogAuthenticationError, FleetlogConfigError, FleetlogError, FleetlogTransportError
from fleetlog.models.reading import UnitSystem
from fleetlog.polling.stop import OperatorStopListener
from fleetlog.polling.supervisor import RunResult, Supervisor
from fleetlog.storage.sink import ReadingSink

_logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fleetlog",
        description="Poll every tracked vehicle and append readings to per-vehicle logs.",
    )
    parser.add_argument("--server", help="API host name (env FLEETLOG_SERVER).")
    parser.add_argument("--database", help="Database name (env FLEETLOG_DATABASE).")
    parser.add_argument("--username", help="User name (env FLEETLOG_USERNAME).")
    parser.add_argument("--password", help="Password (env FLEETLOG_PASSWORD).")
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between poll cycles per vehicle (default 20).",
    )
    parser.add_argument("--backup-dir", help="Directory for per-vehicle logs (default VehiclesInfoBackup).")
    parser.add_argument(
        "--units",
        choices=[member.value for member in UnitSystem],
        help="Odometer display unit (default metric).",
    )
    parser.add_argument(
        "--local-time",
        action="store_true",
        default=None,
        help="Write timestamps in local time instead of UTC.",
    )
    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Never prompt; fail when credentials are missing or rejected.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    mapping = {
        "server": args.server,
        "database": args.database,
        "username": args.username,
        "password": args.password,
        "poll_interval": args.interval,
        "backup_dir": args.backup_dir,
        "unit_system": args.units,
        "local_time": args.local_time,
    }
    return {key: value for key, value in mapping.items() if value is not None}


async def _prompt(text: str, *, secret: bool = False) -> str:
    reader = getpass.getpass if secret else input
    return (await asyncio.to_thread(reader, text)).strip()


async def _collect_credentials(config: FleetlogConfig) -> FleetlogConfig:
    """Prompt for any missing credential field."""
    updates: dict[str, str] = {}
    if not config.database:
        updates["database"] = await _prompt("Database: ")
    if not config.username:
        updates["username"] = await _prompt("Username: ")
    if not config.password:
        updates["password"] = await _prompt("Password: ", secret=True)
    return dataclasses.replace(config, **updates) if updates else config


async def _ask_retry() -> bool:
    answer = await _prompt("\nPress Enter to exit or type anything else and Enter to try again: ")
    return bool(answer)


def _print_summary(result: RunResult) -> None:
    print(f"Workers stopped ({result.stop_reason or 'no stop requested'})")
    for entity_id, stats in result.stats.items():
        print(
            f"  {entity_id}: cycles={stats.cycles} written={stats.readings_written} "
            f"fetch_failures={stats.fetch_failures} write_failures={stats.write_failures}"
        )
    if result.skipped:
        print(f"  skipped: {', '.join(result.skipped)}")


async def _poll(client: FleetClient, config: FleetlogConfig, *, interactive: bool) -> int:
    print("Retrieving devices...")
    try:
        devices = await client.list_entities()
    except FleetlogError as exc:
        print(f"Problems retrieving devices: {exc}", file=sys.stderr)
        if interactive:
            await _prompt("Press Enter to exit...")
        return 1

    sink = ReadingSink(config.backup_dir, local_time=config.local_time)
    supervisor = Supervisor(
        client,
        sink,
        unit_system=config.unit_system,
        poll_interval=config.poll_interval,
    )
    listener = OperatorStopListener(stop_keys="cC" if interactive else "")

    print(f"Polling {len(devices)} devices every {config.poll_interval:g}s into {sink.directory}")
    if devices:
        print("\nFor cancelling, type 'c' or 'C' and press Enter")
    result = await supervisor.run(devices, stop_requested=listener.wait())
    _print_summary(result)
    return 0


async def _run(config: FleetlogConfig, *, interactive: bool) -> int:
    prompted = not config.has_credentials
    while True:
        if interactive and not config.has_credentials:
            config = await _collect_credentials(config)
        if not config.has_credentials:
            print("Database, username and password are required", file=sys.stderr)
            return 1

        async with FleetClient(config) as client:
            try:
                await client.login()
            except (FleetlogAuthenticationError, FleetlogTransportError) as exc:
                print(f"Failed to authenticate: {exc}", file=sys.stderr)
                if not interactive or not await _ask_retry():
                    return 1
                if prompted:
                    config = dataclasses.replace(config, database="", username="", password="")
                continue

            print("Successfully authenticated")
            return await _poll(client, config, interactive=interactive)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = FleetlogConfig.from_env(**_overrides_from_args(args)).validate()
    except FleetlogConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    interactive = not args.no_prompt and sys.stdin.isatty()
    try:
        return asyncio.run(_run(config, interactive=interactive))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
