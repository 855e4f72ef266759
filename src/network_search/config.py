"""
Search settings.

Every tunable is a named field, fixed at construction. Settings load from a
dict, a YAML file, or ``NETWORK_SEARCH_*`` environment variables.

Usage:
    from network_search.config import SearchSettings

    settings = SearchSettings.from_dict({
        "sources": [
            {"type": "local", "post_types": ["page"]},
            {"type": "remote_wp", "base_url": "https://footeducation.com", "score_bonus": 60},
        ],
        "allowed_origins": ["https://footeducation.com"],
    })

Environment Variables:
    NETWORK_SEARCH_CONFIG: Path to a YAML settings file (loaded first)
    NETWORK_SEARCH_AGGREGATOR_BASE_URL, NETWORK_SEARCH_RESULTS_PATH,
    NETWORK_SEARCH_SUGGEST_PATH, NETWORK_SEARCH_ALLOWED_ORIGINS (comma separated),
    NETWORK_SEARCH_SUGGEST_LIMIT, NETWORK_SEARCH_REMOTE_TIMEOUT,
    NETWORK_SEARCH_SUGGEST_TIMEOUT, NETWORK_SEARCH_RESULTS_TTL,
    NETWORK_SEARCH_REMOTE_TTL, NETWORK_SEARCH_SUGGEST_TTL,
    NETWORK_SEARCH_NEGATIVE_TTL, NETWORK_SEARCH_SITEMAP_TTL,
    NETWORK_SEARCH_OVERALL_TIMEOUT, NETWORK_SEARCH_CACHE_MAX_SIZE
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from network_search.domain.entities import SearchSource
from network_search.shared.exceptions import ConfigurationError, ErrorContext

logger = logging.getLogger(__name__)

ENV_PREFIX = "NETWORK_SEARCH_"

DEFAULT_SOURCES: tuple[dict[str, Any], ...] = ({"type": "local", "post_types": ["page"]},)


def build_sources(raw_sources: Iterable[Mapping[str, Any] | SearchSource]) -> tuple[SearchSource, ...]:
    """
    Convert raw source definitions, skipping invalid ones.

    A source that fails validation (e.g. remote without base URL) is logged
    and dropped; the remaining sources are still served.
    """
    sources: list[SearchSource] = []
    for index, raw in enumerate(raw_sources):
        if isinstance(raw, SearchSource):
            sources.append(raw)
            continue
        try:
            sources.append(SearchSource.from_dict(raw))
        except ConfigurationError as e:
            logger.warning(f"Skipping search source #{index}: {e}")
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping search source #{index}: malformed definition ({e})")
    return tuple(sources)


@dataclass(frozen=True)
class SearchSettings:
    """Process-wide configuration for search aggregation."""

    aggregator_base_url: str = "http://localhost:8765/"
    results_path: str = "/network-search/"
    suggest_path: str = "/api/suggest"
    sources: tuple[SearchSource, ...] = field(default_factory=lambda: build_sources(DEFAULT_SOURCES))
    allowed_origins: tuple[str, ...] = ()
    suggest_limit: int = 10
    remote_timeout: float = 5.0
    suggest_timeout: float = 3.0
    local_timeout: float = 5.0
    overall_timeout: float | None = None
    results_ttl: float = 600.0
    remote_ttl: float = 300.0
    suggest_ttl: float = 60.0
    negative_ttl: float = 60.0
    sitemap_ttl: float = 6 * 3600.0
    cache_max_size: int = 2048
    suggest_local_per_site: int = 2
    suggest_remote_per_call: int = 3
    watched_post_types: tuple[str, ...] = ("page",)

    def __post_init__(self) -> None:
        base = self.aggregator_base_url.strip()
        object.__setattr__(self, "aggregator_base_url", base.rstrip("/") + "/")
        for path_field in ("results_path", "suggest_path"):
            value = getattr(self, path_field)
            if not value.startswith("/"):
                object.__setattr__(self, path_field, f"/{value}")
        for ttl_field in ("results_ttl", "remote_ttl", "suggest_ttl", "negative_ttl", "sitemap_ttl"):
            if getattr(self, ttl_field) < 0:
                raise ConfigurationError(
                    f"{ttl_field} must be >= 0",
                    context=ErrorContext(operation="SearchSettings", input_value=getattr(self, ttl_field)),
                )
        if self.suggest_limit < 0:
            raise ConfigurationError("suggest_limit must be >= 0")
        if self.remote_timeout <= 0 or self.suggest_timeout <= 0 or self.local_timeout <= 0:
            raise ConfigurationError("timeouts must be positive")

    @property
    def results_url(self) -> str:
        return self.aggregator_base_url.rstrip("/") + self.results_path

    @property
    def suggest_url(self) -> str:
        return self.aggregator_base_url.rstrip("/") + self.suggest_path

    def origin_allowed(self, origin: str | None) -> bool:
        return bool(origin) and origin in self.allowed_origins

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None = None) -> SearchSettings:
        """Build settings from a mapping; unknown keys are ignored with a warning."""
        data = dict(data or {})
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {k: v for k, v in data.items() if k in known and v is not None}
        if "sources" in kwargs:
            kwargs["sources"] = build_sources(kwargs["sources"])
        for tuple_field in ("allowed_origins", "watched_post_types"):
            if tuple_field in kwargs:
                value = kwargs[tuple_field]
                if isinstance(value, str):
                    value = [v.strip() for v in value.split(",") if v.strip()]
                kwargs[tuple_field] = tuple(value)
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SearchSettings:
        """Load settings from a YAML file."""
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Cannot load settings from {path}: {e}",
                context=ErrorContext(operation="from_yaml", input_value=str(path)),
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SearchSettings:
        """
        Load settings from environment variables.

        ``NETWORK_SEARCH_CONFIG`` (a YAML file) provides the base; individual
        ``NETWORK_SEARCH_*`` variables override it.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}

        config_path = env.get(f"{ENV_PREFIX}CONFIG", "").strip()
        if config_path:
            path = Path(config_path).expanduser()
            try:
                loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Cannot load settings from {path}: {e}") from e
            if isinstance(loaded, dict):
                data.update(loaded)

        converters: dict[str, Any] = {
            "aggregator_base_url": str,
            "results_path": str,
            "suggest_path": str,
            "allowed_origins": str,
            "suggest_limit": int,
            "remote_timeout": float,
            "suggest_timeout": float,
            "local_timeout": float,
            "overall_timeout": float,
            "results_ttl": float,
            "remote_ttl": float,
            "suggest_ttl": float,
            "negative_ttl": float,
            "sitemap_ttl": float,
            "cache_max_size": int,
        }
        for name, convert in converters.items():
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None or raw.strip() == "":
                continue
            try:
                data[name] = convert(raw.strip())
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}",
                    context=ErrorContext(input_value=raw),
                ) from e

        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["sources"] = [source.to_dict() for source in self.sources]
        data["allowed_origins"] = list(self.allowed_origins)
        data["watched_post_types"] = list(self.watched_post_types)
        return data
