"""Build configuration (JSON/YAML file, environment, CLI overrides).

Precedence, lowest first: built-in defaults, ``DLLIST_CONCURRENCY``, the
configuration file, explicit overrides (CLI flags).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from .constants import RegionMeta, REGIONS, region_by_name
from .orchestrator import DEFAULT_CONCURRENCY
from .packing.errors import config_error
from .utils.io import load_document

__all__ = ["BuildConfig", "load_config", "resolve_config", "CONCURRENCY_ENV"]

CONCURRENCY_ENV = "DLLIST_CONCURRENCY"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    catalog: Optional[Path] = None
    metadata: Optional[Path] = None
    output_dir: Path = Path("lists")
    concurrency: int = DEFAULT_CONCURRENCY
    regions: Optional[tuple[str, ...]] = None
    compress: bool = True
    generate_titles: bool = True

    def selected_regions(self) -> tuple[RegionMeta, ...]:
        if not self.regions:
            return REGIONS
        # "PAL" and "pal" name one region; keep first-seen order
        return tuple(dict.fromkeys(region_by_name(name) for name in self.regions))


_PATH_KEYS = {"catalog", "metadata", "output_dir"}


def _coerce(data: Mapping[str, Any], base_dir: Path) -> dict[str, Any]:
    known = {f.name for f in fields(BuildConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise config_error(
            f"Unknown configuration keys: {', '.join(unknown)}",
            {"keys": unknown},
        )
    out: dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if key in _PATH_KEYS:
            p = Path(str(value))
            out[key] = p if p.is_absolute() else base_dir / p
        elif key == "concurrency":
            try:
                out[key] = int(value)
            except (TypeError, ValueError) as exc:
                raise config_error(
                    f"concurrency must be an integer, got {value!r}"
                ) from exc
        elif key == "regions":
            if isinstance(value, str):
                value = [value]
            out[key] = tuple(str(v) for v in value)
        elif key in ("compress", "generate_titles"):
            if not isinstance(value, bool):
                raise config_error(f"'{key}' must be true or false")
            out[key] = value
    return out


def load_config(path: str | Path) -> BuildConfig:
    p = Path(path)
    try:
        data = load_document(p)
    except FileNotFoundError as exc:
        raise config_error(f"Configuration file not found: {p}") from exc
    except ValueError as exc:
        raise config_error(str(exc), {"path": str(p)}) from exc
    return replace(_env_defaults(), **_coerce(data, p.parent))


def _env_defaults() -> BuildConfig:
    raw = os.environ.get(CONCURRENCY_ENV)
    if not raw:
        return BuildConfig()
    try:
        return BuildConfig(concurrency=int(raw))
    except ValueError as exc:
        raise config_error(
            f"{CONCURRENCY_ENV} must be an integer, got {raw!r}"
        ) from exc


def _validate(cfg: BuildConfig) -> BuildConfig:
    if cfg.concurrency < 1:
        raise config_error(
            f"concurrency must be at least 1, got {cfg.concurrency}"
        )
    if cfg.catalog is None:
        raise config_error("No catalog configured")
    if cfg.regions:
        for name in cfg.regions:
            try:
                region_by_name(name)
            except KeyError as exc:
                raise config_error(
                    f"Unknown region '{name}'",
                    {"known": [m.region.name for m in REGIONS]},
                ) from exc
    return cfg


def resolve_config(
    path: str | Path | None = None, **overrides: Any
) -> BuildConfig:
    """Load ``path`` (if given), apply non-None ``overrides`` and validate."""
    cfg = load_config(path) if path is not None else _env_defaults()
    cleaned = _coerce(
        {k: v for k, v in overrides.items() if v is not None}, Path.cwd()
    )
    return _validate(replace(cfg, **cleaned))
