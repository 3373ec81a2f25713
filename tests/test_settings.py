"""Tests for settings configuration loading."""

from __future__ import annotations

from textwrap import dedent

import pytest
from pydantic import ValidationError

from gazelle.domain import FailurePolicy
from gazelle.settings import GazelleSettings, ReportMode


def write_config(tmp_path, monkeypatch, body: str):
    config_path = tmp_path / "config.toml"
    config_path.write_text(dedent(body).strip())
    monkeypatch.setenv("GAZELLE_CONFIG", str(config_path))
    return config_path


def test_defaults():
    settings = GazelleSettings()

    assert settings.mode is ReportMode.STABLECOIN
    assert settings.dry_run is True
    assert settings.failure_policy is FailurePolicy.FAIL_FAST
    assert settings.stable_name == "agEUR"
    assert settings.field_scale_config.stock_slp_scale_offset == 18


def test_loads_gazelle_table(tmp_path, monkeypatch):
    write_config(
        tmp_path,
        monkeypatch,
        """
        [gazelle]
        mode = "vault"
        failure_policy = "degrade"
        rpc_url = "https://rpc.example"
        rpc_delay = 0.33

        [gazelle.field_scales]
        stock_slp_scale_offset = 12

        [gazelle.vault]
        name = "Yield Vault"
        constant_product_venues = ["0xpair"]

        [[gazelle.vault.assets]]
        symbol = "USDC"
        holder = "0xholder"
        token = "0xusdc"

        [[gazelle.vault.stable_swap_venues]]
        pool = "0xcurve"
        lp_token = "0xlp"
        """,
    )

    settings = GazelleSettings()

    assert settings.mode is ReportMode.VAULT
    assert settings.failure_policy is FailurePolicy.DEGRADE
    assert settings.rpc_url_required == "https://rpc.example"
    assert settings.rpc_delay == 0.33
    assert settings.field_scale_config.stock_slp_scale_offset == 12
    assert settings.vault.name == "Yield Vault"
    assert settings.vault.assets[0].lp_owner_address == "0xholder"
    assert settings.vault.stable_swap_venues[0].gauge is None


def test_env_overrides_config_file(tmp_path, monkeypatch):
    write_config(tmp_path, monkeypatch, 'stable_name = "agGBP"')
    monkeypatch.setenv("GAZELLE_STABLE_NAME", "agEUR")

    assert GazelleSettings().stable_name == "agEUR"


def test_cli_overrides_env(monkeypatch):
    monkeypatch.setenv("GAZELLE_LOG_LEVEL", "debug")

    assert GazelleSettings().log_level == "DEBUG"
    assert GazelleSettings(log_level="warning").log_level == "WARNING"


def test_secrets_rejected_in_config_file(tmp_path, monkeypatch):
    write_config(tmp_path, monkeypatch, 'telegram_token = "123:abc"')

    with pytest.raises(ValueError, match="Security violation"):
        GazelleSettings()


def test_secrets_redacted(monkeypatch):
    monkeypatch.setenv("GAZELLE_PRICE_API_KEY", "cmc-key")

    settings = GazelleSettings()
    data = settings.as_safe_dict()

    assert settings.price_api_key.get_secret_value() == "cmc-key"
    assert data["price_api_key"] == "***redacted***"
    assert data["telegram_token"] is None


def test_is_broadcast():
    assert not GazelleSettings(telegram_token="t").is_broadcast
    assert not GazelleSettings(dry_run=False).is_broadcast
    assert GazelleSettings(dry_run=False, telegram_token="t").is_broadcast


def test_vault_asset_needs_token_or_strategy():
    with pytest.raises(ValidationError, match="token or a strategy"):
        GazelleSettings(vault={"assets": [{"symbol": "USDC", "holder": "0xholder"}]})


def test_rpc_url_required():
    with pytest.raises(ValueError, match="rpc_url"):
        GazelleSettings().rpc_url_required
