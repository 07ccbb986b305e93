"""Pipeline configuration: dataclass defaults + TOML file + environment variables."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

# Chain id per webhook network name.
DEFAULT_NETWORKS: dict[str, int] = {
    "BASE_MAINNET": 8453,
    "BASE_SEPOLIA": 84532,
}

CONFIG_FIELD_STRATEGIES = ("match_old_value", "by_operation_code")


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the delivery processor and its store."""

    db_path: str = "./fundind.db"
    concurrency: int = 8  # deliveries processed at once by process_many
    delivery_timeout_s: float = 60.0
    max_cas_retries: int = 16
    applied_events_limit: int = 5000  # event keys remembered per aggregate document
    default_token_decimals: int = 18
    config_field_strategy: str = "by_operation_code"  # DeFi config updates only
    networks: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_NETWORKS))
    log_level: str = "info"

    def __post_init__(self) -> None:
        if self.config_field_strategy not in CONFIG_FIELD_STRATEGIES:
            raise ValueError(
                f"config_field_strategy must be one of {CONFIG_FIELD_STRATEGIES}, "
                f"got {self.config_field_strategy!r}"
            )
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if self.max_cas_retries < 1:
            raise ValueError("max_cas_retries must be >= 1")
        if self.applied_events_limit < 1:
            raise ValueError("applied_events_limit must be >= 1")

    def network_id(self, network: str | None) -> int | None:
        """Chain id for a webhook network name (case-insensitive), or None."""
        if not network:
            return None
        return self.networks.get(network.upper())


# (env suffix, field, converter)
_ENV_OVERRIDES: list[tuple[str, str, Any]] = [
    ("DB_PATH", "db_path", str),
    ("CONCURRENCY", "concurrency", int),
    ("DELIVERY_TIMEOUT", "delivery_timeout_s", float),
    ("MAX_CAS_RETRIES", "max_cas_retries", int),
    ("APPLIED_EVENTS_LIMIT", "applied_events_limit", int),
    ("CONFIG_FIELD_STRATEGY", "config_field_strategy", str),
    ("LOG_LEVEL", "log_level", str),
]


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "FUNDIND_",
) -> PipelineConfig:
    """Load pipeline configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (FUNDIND_DB_PATH, FUNDIND_CONCURRENCY, ...)
        2. TOML config file ([pipeline], [storage], [networks])
        3. Defaults from PipelineConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    known = {f.name for f in fields(PipelineConfig)}
    kwargs: dict[str, Any] = {}

    # ── Pipeline section ───────────────────────────────────
    pipeline = raw.get("pipeline", {})
    for key, value in pipeline.items():
        if key in known and key not in ("networks", "db_path"):
            kwargs[key] = value

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        kwargs["db_path"] = str(v)

    # ── Networks section (merged over the defaults) ────────
    networks = dict(DEFAULT_NETWORKS)
    for name, chain_id in raw.get("networks", {}).items():
        networks[name.upper()] = int(chain_id)
    kwargs["networks"] = networks

    cfg = PipelineConfig(**kwargs)

    # ── Environment variable overrides (highest priority) ──
    overrides: dict[str, Any] = {}
    for suffix, name, conv in _ENV_OVERRIDES:
        if (v := os.environ.get(f"{env_prefix}{suffix}")) is not None:
            overrides[name] = conv(v)
    if overrides:
        cfg = replace(cfg, **overrides)

    # Expand ~ in paths
    if cfg.db_path.startswith("~"):
        cfg = replace(cfg, db_path=str(Path(cfg.db_path).expanduser()))

    return cfg
