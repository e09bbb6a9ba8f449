"""Command-line interface for Remote System Monitor."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from remote_sys_monitor import __version__
from remote_sys_monitor.config import (
    LOG_LEVELS,
    SLACK_HOOK_ENV,
    Config,
    ConfigError,
    check_to_dict,
    create_example_config,
)
from remote_sys_monitor.monitor import Monitor
from remote_sys_monitor.notifiers import build_notifiers
from remote_sys_monitor.runners import RemoteConnectionError

console = Console(stderr=True)

NOTHING_TO_SEND = (
    "No ❌ found in checks, not posting. Use --full to post anyway and --help for more options."
)


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_config(path: str) -> Config:
    """Load a configuration file or exit with status 1."""
    try:
        return Config.from_yaml(path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/]")
    except ConfigError as e:
        console.print(f"[red]Invalid configuration:[/] {e}")
    sys.exit(1)


def create_checks_table(config: Config) -> Table:
    """Create a Rich table listing servers and their checks."""
    table = Table(title="Configured Checks", show_header=True, header_style="bold")

    table.add_column("Server", style="cyan", no_wrap=True)
    table.add_column("Target")
    table.add_column("Check", no_wrap=True)
    table.add_column("Kind", justify="center")
    table.add_column("Parameters")

    for server in config.servers:
        target = "local" if server.local else f"{server.user}@{server.host}:{server.port}"
        server_style = "" if server.enabled else "dim"
        checks = server.sorted_checks()
        if not checks:
            table.add_row(server.name, target, "-", "-", "-", style=server_style)
            continue
        for index, (check_name, spec) in enumerate(checks):
            params = {k: v for k, v in check_to_dict(spec).items() if k != "kind"}
            table.add_row(
                server.name if index == 0 else "",
                target if index == 0 else "",
                check_name,
                spec.kind,
                ", ".join(f"{k}={v}" for k, v in params.items()),
                style=server_style,
            )

    return table


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Remote System Monitor - run health checks over SSH and report to Slack."""
    pass


@main.command()
@click.argument("config", type=click.Path(dir_okay=False))
@click.option(
    "--full", "-f",
    is_flag=True,
    help="Send the report even when every check passed",
)
@click.option(
    "--print", "-p", "print_report",
    is_flag=True,
    help="Print the report to standard output",
)
@click.option(
    "--json", "output_json",
    is_flag=True,
    help="Print the report as JSON",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (default: from config)",
)
def run(
    config: str,
    full: bool,
    print_report: bool,
    output_json: bool,
    log_level: Optional[str],
) -> None:
    """Run all configured checks and notify on failure."""
    cfg = load_config(config)
    setup_logging(log_level or cfg.log_level)

    try:
        notifiers = build_notifiers(cfg.notifiers)
    except ConfigError as e:
        console.print(f"[red]Invalid configuration:[/] {e}")
        sys.exit(1)
    if not notifiers:
        console.print(
            f"[red]No notifier configured.[/] Set {SLACK_HOOK_ENV} or add a 'notifiers' section."
        )
        sys.exit(1)

    monitor = Monitor(cfg, notifiers=notifiers)
    try:
        report = monitor.run()
    except RemoteConnectionError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    elif print_report:
        click.echo(report.text)

    if not monitor.notify(report, force=full):
        console.print(NOTHING_TO_SEND)


@main.command()
@click.argument("config", type=click.Path(dir_okay=False))
def validate(config: str) -> None:
    """Check a configuration file and list its checks."""
    cfg = load_config(config)
    console.print(create_checks_table(cfg))
    total = sum(len(s.checks) for s in cfg.servers)
    console.print(f"[green]Configuration OK:[/] {len(cfg.servers)} servers, {total} checks")


@main.command()
@click.option(
    "-o", "--output",
    default="rsm.yaml",
    help="Output file path",
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing file",
)
def init(output: str, force: bool) -> None:
    """Create an example configuration file."""
    path = Path(output)

    if path.exists() and not force:
        console.print(f"[red]File already exists: {path}[/]")
        console.print("Use --force to overwrite")
        sys.exit(1)

    example = create_example_config()
    example.to_yaml(path)

    console.print(f"[green]Created example configuration: {path}[/]")
    console.print("Edit this file to add your servers and checks.")


if __name__ == "__main__":
    main()
