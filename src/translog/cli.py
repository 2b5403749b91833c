"""
CLI entry point for Translog.

This module provides the Typer-based command-line interface for Translog.

Commands:
    init        Create a new, empty log file
    append      Insert one message into a log
    doctor      Check the SQLite runtime and the installed schema script

Architecture Note:
    The CLI is intentionally thin - it parses arguments and delegates to the
    Log facade. There are no playback or query commands.
"""

import json
import sqlite3
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from translog import __version__
from translog.errors import TransLogError
from translog.log import Log
from translog.logging import setup_logging
from translog.schema import LogConfig, LoggingConfig, OpenMode, Time, load_config
from translog.store.initializer import SCHEMA_VERSION, read_schema, schema_file

# Initialize Typer app with metadata
app = typer.Typer(
    name="translog",
    help="Record timestamped pub/sub messages into a SQLite log.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to a YAML configuration file.",
        exists=True,
        readable=True,
        resolve_path=True,
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        help="Enable debug logging.",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]translog[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Translog - Durable append-only log for pub/sub messages.
    """
    pass


def _load_config(config_path: Path | None, verbose: bool) -> LogConfig:
    """Load configuration and set up logging from it."""
    try:
        config = load_config(config_path) if config_path else LogConfig()
    except (OSError, ValidationError) as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(code=1)

    logging_config = config.logging
    if verbose:
        logging_config = LoggingConfig(level="debug", format=logging_config.format)
    setup_logging(logging_config)
    return config


def _report_failure(action: str, error: TransLogError | None, json_output: bool = False) -> None:
    if json_output:
        print(json.dumps({"ok": False, "error": error.to_dict() if error else None}, indent=2))
    else:
        console.print(f"[red]{action} failed: {error}[/red]")
    raise typer.Exit(code=1)


@app.command()
def init(
    path: Annotated[
        Path,
        typer.Argument(
            help="Path of the log file to create.",
            resolve_path=True,
        ),
    ],
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Create a new log file with an empty schema.

    Example:
        $ translog init run.tlog
    """
    config = _load_config(config_path, verbose)

    if path.exists():
        console.print(f"[yellow]File already exists: {path}[/yellow]")
        raise typer.Exit(code=1)

    with Log(config=config) as log:
        if not log.open(path, OpenMode.READ_WRITE_CREATE):
            _report_failure("init", log.last_error)

    console.print(f"[green]Created log[/green] {path} [dim](schema {SCHEMA_VERSION})[/dim]")


@app.command()
def append(
    path: Annotated[
        Path,
        typer.Argument(
            help="Path of the log file.",
            resolve_path=True,
        ),
    ],
    topic: Annotated[
        str,
        typer.Option("--topic", "-t", help="Topic name."),
    ],
    type_name: Annotated[
        str,
        typer.Option("--type", help="Message type name."),
    ],
    data: Annotated[
        Optional[str],
        typer.Option("--data", "-d", help="Payload as a hex string."),
    ] = None,
    payload_file: Annotated[
        Optional[Path],
        typer.Option(
            "--file",
            "-f",
            help="Read the payload from a file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    sec: Annotated[
        Optional[int],
        typer.Option("--sec", help="Receive time seconds (default: now)."),
    ] = None,
    nsec: Annotated[
        int,
        typer.Option("--nsec", help="Receive time nanoseconds."),
    ] = 0,
    create: Annotated[
        bool,
        typer.Option("--create", help="Create the log file if it doesn't exist."),
    ] = False,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results in JSON format."),
    ] = False,
) -> None:
    """
    Insert one message into a log.

    Example:
        $ translog append run.tlog --topic /odom --type Pose --data 010203
    """
    config = _load_config(config_path, verbose)

    if (data is None) == (payload_file is None):
        console.print("[red]Exactly one of --data or --file is required[/red]")
        raise typer.Exit(code=2)

    if payload_file is not None:
        payload = payload_file.read_bytes()
    else:
        try:
            payload = bytes.fromhex(data)
        except ValueError as e:
            console.print(f"[red]Invalid hex payload: {e}[/red]")
            raise typer.Exit(code=2)

    time = Time.now() if sec is None else Time(sec=sec, nsec=nsec)
    mode = OpenMode.READ_WRITE_CREATE if create else OpenMode.READ_WRITE

    with Log(config=config) as log:
        if not log.open(path, mode):
            _report_failure("open", log.last_error, json_output)
        if not log.insert_message(time, topic, type_name, payload):
            _report_failure("append", log.last_error, json_output)

    if json_output:
        print(json.dumps({
            "ok": True,
            "path": str(path),
            "topic": topic,
            "type": type_name,
            "time": {"sec": time.sec, "nsec": time.nsec},
            "size": len(payload),
        }, indent=2))
    else:
        console.print(
            f"[green]Appended[/green] {len(payload)} bytes to "
            f"[cyan]{topic}[/cyan] [dim]({type_name})[/dim]"
        )


@app.command()
def doctor(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    config_path: ConfigOption = None,
) -> None:
    """
    Check system environment.

    Verifies:
    - Python version (3.11+)
    - SQLite library version
    - The schema script is installed and readable

    Example:
        $ translog doctor
    """
    config = _load_config(config_path, verbose=False)
    checks = []

    # Check 1: Python version
    py_version = sys.version_info
    py_ok = py_version >= (3, 11)
    checks.append({
        "name": "Python version",
        "ok": py_ok,
        "value": f"{py_version.major}.{py_version.minor}.{py_version.micro}",
        "message": "OK" if py_ok else "Requires Python 3.11+",
    })

    # Check 2: SQLite library
    sqlite_ok = sqlite3.sqlite_version_info >= (3, 7, 7)
    checks.append({
        "name": "SQLite",
        "ok": sqlite_ok,
        "value": sqlite3.sqlite_version,
        "message": "OK" if sqlite_ok else "Requires SQLite 3.7.7+ for URI open modes",
    })

    # Check 3: Schema script
    script_path = schema_file(config.schema_path)
    try:
        read_schema(script_path)
        schema_ok = True
        schema_message = f"Version {SCHEMA_VERSION}"
    except TransLogError as e:
        schema_ok = False
        schema_message = e.message
    checks.append({
        "name": "Schema script",
        "ok": schema_ok,
        "value": str(script_path),
        "message": schema_message,
    })

    all_ok = all(check["ok"] for check in checks)

    if json_output:
        output = {
            "ok": all_ok,
            "version": __version__,
            "checks": checks,
        }
        print(json.dumps(output, indent=2))
    else:
        console.print(f"[bold]Translog Doctor[/bold] v{__version__}")
        console.print()

        for check in checks:
            icon = "[green]✓[/green]" if check["ok"] else "[red]✗[/red]"
            if check["ok"]:
                console.print(f"{icon} {check['name']}: [dim]{check['value']}[/dim] - {check['message']}")
            else:
                console.print(f"{icon} {check['name']}: [dim]{check['value']}[/dim]")
                console.print(f"    [red]{check['message']}[/red]")

        console.print()
        if all_ok:
            console.print("[green]All checks passed![/green]")
        else:
            console.print("[yellow]Some checks failed. See above for details.[/yellow]")

    raise typer.Exit(code=0 if all_ok else 1)
