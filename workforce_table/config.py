from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
import os
import yaml

from workforce_table.domain.transform.utilisation import InvalidRatePolicy
from workforce_table.infra.logging.setup import mapLogLevel


@dataclass(frozen=True)
class Settings:
    # Paths
    log_dir: str = "./logs"
    report_dir: str = "./reports"

    # Logging
    log_level: str = "INFO"

    # Transform
    as_of: date | None = None
    invalid_rate_policy: InvalidRatePolicy = InvalidRatePolicy.PASSTHROUGH

    # Report
    report_items_limit: int = 200

    def today(self) -> date:
        return self.as_of or date.today()


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def parse_as_of(value: str | date | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid as_of date (expected yyyy-mm-dd): {value}") from exc


def parse_policy(value: str | InvalidRatePolicy) -> InvalidRatePolicy:
    if isinstance(value, InvalidRatePolicy):
        return value
    try:
        return InvalidRatePolicy(str(value).strip().lower())
    except ValueError as exc:
        allowed = "|".join(p.value for p in InvalidRatePolicy)
        raise ValueError(f"Invalid rate policy: {value} (expected {allowed})") from exc


def load_settings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults
    """
    sources: list[str] = []
    defaults = Settings()

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    # 2) env
    env = {
        "log_dir": _env_get("WORKFORCE_TABLE_LOG_DIR"),
        "report_dir": _env_get("WORKFORCE_TABLE_REPORT_DIR"),
        "log_level": _env_get("WORKFORCE_TABLE_LOG_LEVEL"),
        "as_of": _env_get("WORKFORCE_TABLE_AS_OF"),
        "invalid_rate_policy": _env_get("WORKFORCE_TABLE_INVALID_RATE_POLICY"),
        "report_items_limit": _env_get("WORKFORCE_TABLE_REPORT_ITEMS_LIMIT"),
    }
    if any(v is not None for v in env.values()):
        sources.append("env")

    def parse_int(v: str | None) -> int | None:
        if v is None:
            return None
        return int(v)

    # merge config -> env -> cli
    merged = {
        "log_dir": cfg.get("log_dir", defaults.log_dir),
        "report_dir": cfg.get("report_dir", defaults.report_dir),
        "log_level": cfg.get("log_level", defaults.log_level),
        "as_of": cfg.get("as_of", defaults.as_of),
        "invalid_rate_policy": cfg.get("invalid_rate_policy", defaults.invalid_rate_policy),
        "report_items_limit": cfg.get("report_items_limit", defaults.report_items_limit),
    }

    # apply env
    for key in ("log_dir", "report_dir", "log_level", "as_of", "invalid_rate_policy"):
        if env[key] is not None:
            merged[key] = env[key]
    if env["report_items_limit"] is not None:
        merged["report_items_limit"] = parse_int(env["report_items_limit"])

    # 3) apply CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")

    for k, v in cli_overrides.items():
        if v is None:
            continue
        merged[k] = v

    log_level = str(merged["log_level"]).strip().upper()
    mapLogLevel(log_level)

    settings = Settings(
        log_dir=str(merged["log_dir"]),
        report_dir=str(merged["report_dir"]),
        log_level=log_level,
        as_of=parse_as_of(merged["as_of"]),
        invalid_rate_policy=parse_policy(merged["invalid_rate_policy"]),
        report_items_limit=int(merged["report_items_limit"]),
    )

    return LoadedSettings(settings=settings, sources_used=sources)
