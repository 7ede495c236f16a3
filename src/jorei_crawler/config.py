import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError
from .utils import parse_bound, solr_bound


DEFAULT_CONFIG_PATH = Path("config/config.json")
DEFAULT_BASE_URL = "https://jorei.slis.doshisha.ac.jp"
DEFAULT_USER_AGENT = "jorei-crawler/0.1 (+https://jorei.slis.doshisha.ac.jp/)"


@dataclass(frozen=True)
class CrawlConfig:
    output_dir: Path
    index_path: Path
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rows: int = 50
    sleep_time_ms: int = 500
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 30.0
    verify_tls: bool = False
    show_progress: bool = True

    def __post_init__(self) -> None:
        if self.rows <= 0:
            raise ConfigError(f"rows must be a positive integer, got {self.rows}")
        if self.sleep_time_ms < 0:
            raise ConfigError(f"sleep_time_ms must not be negative, got {self.sleep_time_ms}")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ConfigError(
                f"start_date {self.start_date} is after end_date {self.end_date}"
            )
        try:
            solr_bound(self.start_date)
            solr_bound(self.end_date, end=True)
        except OverflowError:
            raise ConfigError(
                f"date range {self.start_date}..{self.end_date} cannot be expressed in UTC"
            ) from None

    @property
    def sleep_seconds(self) -> float:
        return self.sleep_time_ms / 1000

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "CrawlConfig":
        try:
            output_dir = Path(data["output_dir"])
            index_path = Path(data["index_path"])
        except KeyError as exc:
            raise ConfigError(f"missing required setting: {exc.args[0]}") from None
        try:
            return CrawlConfig(
                output_dir=output_dir,
                index_path=index_path,
                start_date=_parse_optional_date(data.get("start_date")),
                end_date=_parse_optional_date(data.get("end_date"), end=True),
                rows=int(data.get("rows", 50)),
                sleep_time_ms=int(data.get("sleep_time_ms", 500)),
                base_url=str(data.get("base_url") or DEFAULT_BASE_URL).rstrip("/"),
                user_agent=data.get("user_agent") or DEFAULT_USER_AGENT,
                timeout_seconds=float(data.get("timeout_seconds", 30)),
                verify_tls=_parse_flag(data, "verify_tls", False),
                show_progress=_parse_flag(data, "show_progress", True),
            )
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc


def load_config(
    path: Path | None = None, overrides: Optional[Dict[str, Any]] = None
) -> CrawlConfig:
    """Read a JSON config file; values in ``overrides`` win over the file."""
    config_path = path or DEFAULT_CONFIG_PATH
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"cannot read config {config_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"config {config_path} must hold a JSON object")
    raw.update(overrides or {})
    return CrawlConfig.from_dict(raw)


def _parse_optional_date(value: Any, *, end: bool = False) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return parse_bound(str(value), end=end)


def _parse_flag(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value
