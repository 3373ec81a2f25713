from __future__ import annotations

import json
from unittest.mock import AsyncMock

from typer.testing import CliRunner

from gazelle import main
from gazelle.errors import UpstreamUnavailable

runner = CliRunner()


def test_show_config_redacts_secrets(monkeypatch):
    monkeypatch.setenv("GAZELLE_TELEGRAM_TOKEN", "123:abc")

    result = runner.invoke(main.app, ["--show-config", "--mode", "vault"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["mode"] == "vault"
    assert data["telegram_token"] == "***redacted***"


def test_vault_mode_requires_rpc_url():
    result = runner.invoke(main.app, ["--mode", "vault"])

    assert result.exit_code != 0


def test_report_failure_exits_non_zero(monkeypatch):
    failing = AsyncMock(side_effect=UpstreamUnavailable("subgraph", "HTTP 502"))
    monkeypatch.setattr("gazelle.pipeline.run.run_report", failing)

    result = runner.invoke(main.app, ["--failure-policy", "degrade"])

    assert result.exit_code == 1
    failing.assert_awaited_once()
    assert failing.await_args.args[0].settings.failure_policy.value == "degrade"
