from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable

import yaml

DEFAULT_PARAMS_PATH = Path(__file__).resolve().parents[1] / "config" / "sources.yaml"
DATA_DIR_ENV = "CATALOG_SNIPER_DATA_DIR"
USER_AGENT_ENV = "CATALOG_SNIPER_USER_AGENT"
DEFAULT_USER_AGENT = "catalog-sniper/0.1"


@dataclass(frozen=True, slots=True)
class APISource:
    """One catalog search endpoint and the file its results are merged into."""

    name: str
    base_url: str
    output_file: str


@dataclass(frozen=True, slots=True)
class FetchSettings:
    timeout_sec: float = 30.0
    max_attempts: int = 3
    retry_delay_sec: float = 2.0
    page_delay_sec: float = 1.0
    # Override via env CATALOG_SNIPER_USER_AGENT
    user_agent: str = field(
        default_factory=lambda: os.environ.get(USER_AGENT_ENV, DEFAULT_USER_AGENT)
    )


@dataclass(frozen=True)
class Config:
    data_dir: Path
    sources: tuple[APISource, ...]
    fetch: FetchSettings = field(default_factory=FetchSettings)

    def output_path(self, output_file: str) -> Path:
        path = Path(output_file)
        if path.is_absolute():
            return path
        return self.data_dir / path

    @property
    def output_files(self) -> list[str]:
        return list(dict.fromkeys(s.output_file for s in self.sources))

    def only(self, output_files: Iterable[str]) -> "Config":
        wanted = set(output_files)
        unknown = wanted - set(self.output_files)
        if unknown:
            raise ValueError(f"Unknown output file(s): {', '.join(sorted(unknown))}")
        return replace(
            self,
            sources=tuple(s for s in self.sources if s.output_file in wanted),
        )


def resolve_data_dir(data_dir: str | os.PathLike[str] | None = None) -> Path:
    base = Path(data_dir) if data_dir else Path(os.getenv(DATA_DIR_ENV, "."))
    return base.resolve()


def _parse_source(index: int, raw: Any) -> APISource:
    if not isinstance(raw, dict):
        raise ValueError(f"sources[{index}] must be a mapping")
    values = {}
    for key in ("name", "base_url", "output_file"):
        value = str(raw.get(key) or "").strip()
        if not value:
            raise ValueError(f"sources[{index}].{key} must be set")
        values[key] = value
    return APISource(**values)


def _parse_fetch(raw: Any) -> FetchSettings:
    if not isinstance(raw, dict):
        return FetchSettings()
    defaults = FetchSettings()
    return FetchSettings(
        timeout_sec=max(float(raw.get("timeout_sec", defaults.timeout_sec)), 0.1),
        max_attempts=max(int(raw.get("max_attempts", defaults.max_attempts)), 1),
        retry_delay_sec=max(
            float(raw.get("retry_delay_sec", defaults.retry_delay_sec)), 0.0
        ),
        page_delay_sec=max(
            float(raw.get("page_delay_sec", defaults.page_delay_sec)), 0.0
        ),
        user_agent=str(raw.get("user_agent") or defaults.user_agent),
    )


def load_config(
    params_path: Path | None = None,
    *,
    data_dir: str | os.PathLike[str] | None = None,
) -> Config:
    params_path = params_path or DEFAULT_PARAMS_PATH

    with params_path.open("r", encoding="utf-8") as fh:
        params = yaml.safe_load(fh) or {}
    if not isinstance(params, dict):
        raise ValueError(f"{params_path} must contain a mapping")

    sources_raw = params.get("sources") or []
    if not isinstance(sources_raw, list) or not sources_raw:
        raise ValueError("sources must be a non-empty list in the params file")
    sources = tuple(_parse_source(i, raw) for i, raw in enumerate(sources_raw))

    return Config(
        data_dir=resolve_data_dir(data_dir),
        sources=sources,
        fetch=_parse_fetch(params.get("fetch", {})),
    )
