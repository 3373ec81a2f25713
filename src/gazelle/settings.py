"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

import tomllib

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    DEFAULT_EXCHANGE_RATE_URL,
    DEFAULT_PRICE_API_URL,
    DEFAULT_SUBGRAPH_URL,
    DEFAULT_TELEGRAM_API_URL,
)
from .domain import FailurePolicy
from .processors.normalizer import FieldScales

load_dotenv()

SECRET_FIELDS = {"telegram_token", "price_api_key", "exchange_rate_api_key"}


class ReportMode(str, Enum):
    STABLECOIN = "stablecoin"
    VAULT = "vault"


class DryRunFormat(str, Enum):
    TEXT = "text"
    TABLE = "table"
    JSON = "json"


class FieldScaleSettings(BaseModel):
    """Decimals the indexed stablecoin fields are recorded at."""

    total_minted_decimals: int = Field(default=18, ge=0)
    stock_user_decimals: int = Field(default=18, ge=0)
    total_hedge_amount_decimals: int = Field(default=18, ge=0)
    stock_slp_scale_offset: int = Field(default=18, ge=0)

    model_config = ConfigDict(extra="ignore")

    def to_field_scales(self) -> FieldScales:
        return FieldScales(**self.model_dump())


class VaultAssetSettings(BaseModel):
    """One asset held by the vault.

    ``token`` may be omitted when ``strategy`` is set; the strategy's want
    token is used instead.
    """

    symbol: str
    holder: str
    token: str | None = None
    strategy: str | None = None
    primary_pool: str | None = None
    manager: str | None = None
    lp_owner: str | None = None

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def require_token_source(self) -> "VaultAssetSettings":
        if self.token is None and self.strategy is None:
            raise ValueError(
                f"vault asset {self.symbol!r} needs either a token or a strategy address"
            )
        return self

    @property
    def lp_owner_address(self) -> str:
        return self.lp_owner or self.holder


class StableSwapVenueSettings(BaseModel):
    """Stable-swap pool, its LP token and an optional staking gauge."""

    pool: str
    lp_token: str
    gauge: str | None = None

    model_config = ConfigDict(extra="ignore")


class VaultSettings(BaseModel):
    name: str = "Vault"
    assets: list[VaultAssetSettings] = Field(default_factory=list)
    constant_product_venues: list[str] = Field(default_factory=list)
    stable_swap_venues: list[StableSwapVenueSettings] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class GazelleSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with GAZELLE_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- global toggles ---
    mode: ReportMode = ReportMode.STABLECOIN
    dry_run: bool = True
    dry_run_format: DryRunFormat = DryRunFormat.TEXT
    failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST

    # --- indexed data ---
    subgraph_url: str = DEFAULT_SUBGRAPH_URL
    stable_name: str | None = "agEUR"
    field_scales: FieldScaleSettings = Field(default_factory=FieldScaleSettings)

    # --- prices ---
    price_api_url: str = DEFAULT_PRICE_API_URL
    price_api_key: SecretStr | None = None
    price_max_age_seconds: int | None = Field(default=None, gt=0)
    exchange_rate_url: str = DEFAULT_EXCHANGE_RATE_URL
    exchange_rate_api_key: SecretStr | None = None

    # --- chain ---
    rpc_url: str | None = None
    block_number: int | None = None
    vault: VaultSettings = Field(default_factory=VaultSettings)

    # --- delivery ---
    telegram_api_url: str = DEFAULT_TELEGRAM_API_URL
    telegram_token: SecretStr | None = None
    telegram_chat_id: str | None = None

    # --- retries and timeouts ---
    http_timeout: float = 10.0
    http_max_tries: int = Field(default=5, ge=1)
    rpc_max_concurrent_calls: int = Field(default=5, ge=1)
    rpc_delay: float = 0.15
    rpc_jitter: float = 0.10
    global_timeout_seconds: float | None = 300.0

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="GAZELLE_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator(*sorted(SECRET_FIELDS), mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("GAZELLE_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    # Try default locations
                    local_config = Path("gazelle.toml")
                    user_config = Path.home() / ".config" / "gazelle" / "config.toml"
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [gazelle]
                body = data.get("gazelle", data)
                if not isinstance(body, dict):
                    return {}

                for key in SECRET_FIELDS:
                    if key in body:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables or CLI flags."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key):
                data[key] = "***redacted***"
        return data

    @property
    def rpc_url_required(self) -> str:
        """Get rpc_url, raising ValueError if not set."""
        if self.rpc_url is None:
            raise ValueError("rpc_url must be configured")
        return self.rpc_url

    @property
    def is_broadcast(self) -> bool:
        """Check if the report goes to the chat channel rather than stdout."""
        return not self.dry_run and self.telegram_token is not None

    @property
    def field_scale_config(self) -> FieldScales:
        return self.field_scales.to_field_scales()
