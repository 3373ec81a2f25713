"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio

from ..adapters.chain_adapters import BaseChainReader
from ..adapters.data_adapters import BaseDataAdapter
from ..adapters.price_adapters import BasePriceAdapter, BaseRateAdapter
from ..errors import GazelleError
from ..report import TelegramPublisher
from ..settings import ReportMode
from ..state import AppState
from .context import PipelineContext
from .report import build_report, publish_report
from .stablecoin import collect_stablecoin_data
from .vault import collect_vault_positions


async def run_report(
    state: AppState,
    *,
    data_adapter: BaseDataAdapter | None = None,
    rate_adapter: BaseRateAdapter | None = None,
    price_adapter: BasePriceAdapter | None = None,
    chain_reader: BaseChainReader | None = None,
    publisher: TelegramPublisher | None = None,
) -> PipelineContext:
    """Execute the complete report pipeline.

    This is a thin orchestrator that sequences the pipeline steps:
    1. Data collection (subgraph + rates, or on-chain positions)
    2. Pricing
    3. Report generation
    4. Publishing (stdout in dry-run mode)

    Collaborators default to the configured ones and may be injected.
    A fatal error stops the run before anything is published.

    Args:
        state: Application state containing settings and logger
    """
    s = state.settings
    log = state.logger

    log.info(
        "Starting report",
        extra={"mode": s.mode.value, "dry_run": s.dry_run},
    )

    timeout_s = s.global_timeout_seconds

    ctx = PipelineContext(state=state)

    async def _run_pipeline() -> None:
        if s.mode == ReportMode.VAULT:
            await collect_vault_positions(ctx, chain_reader, price_adapter)
        else:
            await collect_stablecoin_data(ctx, data_adapter, rate_adapter, price_adapter)
        await build_report(ctx)
        await publish_report(ctx, publisher)

    try:
        if timeout_s is None or timeout_s <= 0:
            await _run_pipeline()
        else:
            async with asyncio.timeout(timeout_s):
                await _run_pipeline()
    except asyncio.TimeoutError as exc:
        log.error(
            "Report pipeline timed out",
            extra={"mode": s.mode.value, "timeout_seconds": timeout_s},
        )
        raise asyncio.TimeoutError(
            f"Report exceeded global timeout {timeout_s}s\n N.B. This can be changed via "
            "`global_timeout_seconds`."
        ) from exc
    except GazelleError as exc:
        log.error("Report aborted: %s", exc)
        raise

    log.info("Report completed", extra={"mode": s.mode.value})
    return ctx
