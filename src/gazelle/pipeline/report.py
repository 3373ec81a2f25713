"""Report generation."""

from __future__ import annotations

from ..errors import UpstreamUnavailable
from ..processors import ReportAggregator
from ..report import TelegramPublisher
from ..report import publish_report as publish_report_impl
from ..settings import ReportMode
from .context import PipelineContext


async def build_report(ctx: PipelineContext) -> None:
    """Aggregate the collected data into a report.

    Args:
        ctx: Pipeline context holding the collected payload or positions and prices

    Sets the report in the context.
    """
    s = ctx.state.settings
    log = ctx.state.logger

    aggregator = ReportAggregator(
        field_scales=s.field_scale_config, failure_policy=s.failure_policy
    )

    log.info("Generating %s report...", s.mode.value)
    if s.mode == ReportMode.VAULT:
        report = aggregator.build_vault(s.vault.name, ctx.positions_required, ctx.prices)
    else:
        report = aggregator.build(
            ctx.stablecoin_payload_required,
            ctx.exchange_rate_required,
            ctx.prices,
            stable_name=s.stable_name,
        )

    for omission in report.omissions:
        log.warning(
            "Omitted %s %s: %s", omission.scope.value, omission.subject, omission.reason
        )
    ctx.report = report


async def publish_report(
    ctx: PipelineContext, publisher: TelegramPublisher | None = None
) -> None:
    """Publish the report.

    A delivery failure is logged; the report itself was built successfully.
    """
    s = ctx.state.settings
    report = ctx.report_required
    log = ctx.state.logger

    log.info("Publishing report (dry_run=%s)...", s.dry_run)

    try:
        await publish_report_impl(s, report, publisher)
    except UpstreamUnavailable as e:
        log.error("Failed to publish report: %s", e)
