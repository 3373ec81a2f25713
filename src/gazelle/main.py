"""CLI entrypoint for gazelle."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any

import typer

from .domain import FailurePolicy
from .errors import GazelleError
from .logger import setup_logging
from .settings import DryRunFormat, GazelleSettings, ReportMode
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Stablecoin collateral and vault holdings reporting tool.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("gazelle")


@app.callback(invoke_without_command=True)
def report(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [gazelle] table).",
        ),
    ] = None,
    mode: Annotated[
        ReportMode | None,
        typer.Option(
            "--mode",
            "-m",
            help="Report to build (stablecoin or vault).",
        ),
    ] = None,
    stable_name: Annotated[
        str | None,
        typer.Option("--stable", help="Stablecoin to report on, e.g. agEUR."),
    ] = None,
    block_number: Annotated[
        int | None,
        typer.Option(
            "--block-number",
            help="Block number to use for rpc calls. If not provided, the latest block will be used.",
        ),
    ] = None,
    rpc_url: Annotated[
        str | None,
        typer.Option("--rpc-url", help="RPC endpoint used in vault mode."),
    ] = None,
    dry_run: Annotated[
        bool | None,
        typer.Option(
            "--dry-run/--no-dry-run",
            help="Print the report instead of sending it to the chat channel.",
        ),
    ] = None,
    dry_run_format: Annotated[
        DryRunFormat | None,
        typer.Option("--format", "-f", help="Dry-run output format."),
    ] = None,
    failure_policy: Annotated[
        FailurePolicy | None,
        typer.Option(
            "--failure-policy",
            help="fail_fast aborts on a bad asset; degrade drops it and reports the omission.",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    global_timeout_seconds: Annotated[
        float | None,
        typer.Option(
            "--global-timeout-seconds",
            help="Abort the whole run after this many seconds (0 disables).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Build a report and print it or send it to the chat channel."""
    if config_path:
        os.environ["GAZELLE_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Any] = {}
    if mode is not None:
        init_kwargs["mode"] = mode
    if stable_name is not None:
        init_kwargs["stable_name"] = stable_name
    if block_number is not None:
        init_kwargs["block_number"] = block_number
    if rpc_url is not None:
        init_kwargs["rpc_url"] = rpc_url
    if dry_run is not None:
        init_kwargs["dry_run"] = dry_run
    if dry_run_format is not None:
        init_kwargs["dry_run_format"] = dry_run_format
    if failure_policy is not None:
        init_kwargs["failure_policy"] = failure_policy
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()
    if global_timeout_seconds is not None:
        init_kwargs["global_timeout_seconds"] = global_timeout_seconds

    settings = GazelleSettings(**init_kwargs)

    setup_logging(settings.log_level)
    logger = _build_logger()
    state = AppState(settings=settings, logger=logger)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if settings.mode == ReportMode.VAULT and not settings.rpc_url:
        raise typer.BadParameter(
            "rpc_url is required in vault mode.",
            param_hint=["--rpc-url", "GAZELLE_RPC_URL"],
        )
    if not settings.dry_run and not settings.telegram_chat_id:
        raise typer.BadParameter(
            "telegram_chat_id is required when running with --no-dry-run.",
            param_hint=["GAZELLE_TELEGRAM_CHAT_ID"],
        )

    from .pipeline.run import run_report

    try:
        asyncio.run(run_report(state))
    except GazelleError as e:
        typer.echo(f"Report failed: {e}", err=True)
        raise typer.Exit(code=1) from e


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
