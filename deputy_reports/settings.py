# deputy_reports/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

load_dotenv()

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "config.yaml"


def load_config(path: Path = CONFIG_PATH) -> Dict[str, Any]:
    """
    config/config.yaml — не секретные дефолты. Файла может и не быть.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}


CONFIG = load_config()

DEFAULT_RETRY = {
    "total": 0,
    "backoff_factor": 0.5,
    "status_forcelist": [429, 500, 502, 503, 504],
}


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


def _default_base_url() -> str:
    install = os.getenv("DEPUTY_INSTALL") or ""
    geo = os.getenv("DEPUTY_GEO") or ""
    return f"https://{install}.{geo}.deputy.com/api/v1"


@dataclass(frozen=True)
class DeputySettings:
    base_url: str
    token: str = field(repr=False)
    timeout_sec: int = 30
    default_limit: int = 500
    roster_page_size: int = 100
    roster_max_days: Optional[int] = None
    full_fetch: str = "plain"
    known_schedule_ids: Tuple[int, ...] = ()
    high_id_floor: Optional[int] = None
    retry_total: int = 0
    retry_backoff_factor: float = 0.5
    retry_statuses: Tuple[int, ...] = field(default=(429, 500, 502, 503, 504))

    @property
    def paginated_fetch(self) -> bool:
        return self.full_fetch == "paginated"


def load_settings(
    config: Optional[Dict[str, Any]] = None, token: Optional[str] = None
) -> DeputySettings:
    """
    Собирает неизменяемые настройки клиента.
    Приоритет: явный аргумент > .env/окружение > config.yaml > дефолты.
    """
    cfg = CONFIG if config is None else config
    api_cfg = (cfg or {}).get("api") or {}
    retry_cfg = {**DEFAULT_RETRY, **(api_cfg.get("retry") or {})}

    full_fetch = api_cfg.get("full_fetch", "plain")
    if full_fetch not in ("plain", "paginated"):
        raise ValueError(f"api.full_fetch must be plain|paginated, got {full_fetch!r}")

    roster_max_days = api_cfg.get("roster_max_days")
    high_id_floor = api_cfg.get("high_id_floor")

    return DeputySettings(
        base_url=(
            os.getenv("DEPUTY_BASE_URL") or api_cfg.get("base_url") or _default_base_url()
        ),
        token=token or os.getenv("DEPUTY_ACCESS_TOKEN") or "",
        timeout_sec=_env_int("DEPUTY_TIMEOUT_SEC") or int(api_cfg.get("timeout_sec", 30)),
        default_limit=(
            _env_int("DEPUTY_PAGE_SIZE") or int(api_cfg.get("default_limit", 500))
        ),
        roster_page_size=int(api_cfg.get("roster_page_size", 100)),
        roster_max_days=int(roster_max_days) if roster_max_days is not None else None,
        full_fetch=full_fetch,
        known_schedule_ids=tuple(int(x) for x in api_cfg.get("known_schedule_ids") or []),
        high_id_floor=int(high_id_floor) if high_id_floor is not None else None,
        retry_total=int(retry_cfg["total"]),
        retry_backoff_factor=float(retry_cfg["backoff_factor"]),
        retry_statuses=tuple(int(s) for s in retry_cfg["status_forcelist"]),
    )
