"""
Domain Entity: SearchSource

One configured origin of searchable content: the local multi-tenant store
or a remote WordPress REST API. Sources are searched independently and
never reference each other.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from network_search.shared.exceptions import ConfigurationError, ErrorContext

DEFAULT_POST_TYPES: tuple[str, ...] = ("page",)

# Hard caps, independent of caller-supplied limits
LOCAL_PER_SITE_CAP = 10
REMOTE_PER_CALL_CAP = 20


class SourceKind(str, Enum):
    """Search source identifier."""

    LOCAL = "local"
    REMOTE_WP = "remote_wp"

    @classmethod
    def parse(cls, value: str) -> SourceKind:
        """Accept both the enum values and the legacy "multisite"/"wp" names."""
        aliases = {"multisite": cls.LOCAL, "wp": cls.REMOTE_WP}
        normalized = value.strip().lower()
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ConfigurationError(
                f"Unknown search source type: {value!r}",
                context=ErrorContext(input_value=value, suggestion="Use 'local' or 'remote_wp'"),
            ) from None


@dataclass(frozen=True)
class SearchSource:
    """
    Configuration for one search source.

    Local sources query every public tenant site of the local store;
    remote sources query ``{base_url}/wp-json/wp/v2/<post_type>``.

    ``score_bonus`` is added to every hit from this source after scoring,
    so content from a trusted aggregator can be boosted relative to
    local results.
    """

    kind: SourceKind
    post_types: tuple[str, ...] = DEFAULT_POST_TYPES
    base_url: str = ""
    name: str = ""
    per_site_limit: int = LOCAL_PER_SITE_CAP
    per_call_limit: int = REMOTE_PER_CALL_CAP
    score_bonus: int = 0
    enabled: bool = True

    def __post_init__(self) -> None:
        post_types = tuple(dict.fromkeys(p.strip() for p in self.post_types if p and p.strip()))
        object.__setattr__(self, "post_types", post_types or DEFAULT_POST_TYPES)

        if self.kind is SourceKind.REMOTE_WP:
            base_url = (self.base_url or "").strip().rstrip("/")
            if not base_url:
                raise ConfigurationError(
                    "Remote WordPress source is missing its base URL",
                    context=ErrorContext(operation="SearchSource", suggestion="Set 'base_url'"),
                )
            parsed = urlparse(base_url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ConfigurationError(
                    f"Remote WordPress source has an invalid base URL: {base_url!r}",
                    context=ErrorContext(operation="SearchSource", input_value=base_url),
                )
            object.__setattr__(self, "base_url", base_url)
            if not self.name:
                object.__setattr__(self, "name", parsed.hostname or base_url)
        elif not self.name:
            object.__setattr__(self, "name", "local")

        if self.per_site_limit < 0 or self.per_call_limit < 0:
            raise ConfigurationError(f"Source {self.name!r} has a negative limit")
        if self.score_bonus < 0:
            raise ConfigurationError(f"Source {self.name!r} has a negative score bonus")

    @property
    def is_remote(self) -> bool:
        return self.kind is SourceKind.REMOTE_WP

    @classmethod
    def local(cls, post_types: Iterable[str] = DEFAULT_POST_TYPES, **kwargs: Any) -> SearchSource:
        return cls(kind=SourceKind.LOCAL, post_types=tuple(post_types), **kwargs)

    @classmethod
    def remote_wp(cls, base_url: str, post_types: Iterable[str] = DEFAULT_POST_TYPES, **kwargs: Any) -> SearchSource:
        return cls(kind=SourceKind.REMOTE_WP, base_url=base_url, post_types=tuple(post_types), **kwargs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchSource:
        """
        Build a source from a plain mapping (YAML/env/dict config).

        Accepted keys: type, base (or base_url), post_types, name, limit
        (or per_site_limit / per_call_limit), score_bonus, enabled.
        """
        if "type" not in data and "kind" not in data:
            raise ConfigurationError("Search source is missing its 'type'", context=ErrorContext(input_value=dict(data)))
        kind = SourceKind.parse(str(data.get("type", data.get("kind"))))

        post_types = data.get("post_types") or DEFAULT_POST_TYPES
        if isinstance(post_types, str):
            post_types = post_types.split(",")

        kwargs: dict[str, Any] = {
            "kind": kind,
            "post_types": tuple(post_types),
            "base_url": data.get("base_url", data.get("base", "")) or "",
            "name": data.get("name", "") or "",
            "score_bonus": int(data.get("score_bonus", 0)),
            "enabled": bool(data.get("enabled", True)),
        }
        limit = data.get("limit")
        if kind is SourceKind.LOCAL:
            kwargs["per_site_limit"] = int(data.get("per_site_limit", limit if limit is not None else LOCAL_PER_SITE_CAP))
        else:
            kwargs["per_call_limit"] = int(data.get("per_call_limit", limit if limit is not None else REMOTE_PER_CALL_CAP))
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.kind.value,
            "name": self.name,
            "post_types": list(self.post_types),
            "score_bonus": self.score_bonus,
            "enabled": self.enabled,
        }
        if self.is_remote:
            data["base_url"] = self.base_url
            data["per_call_limit"] = self.per_call_limit
        else:
            data["per_site_limit"] = self.per_site_limit
        return data
