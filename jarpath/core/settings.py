from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def default_local_repository() -> Path:
    return Path.home() / ".m2" / "repository"


def default_cache_dir() -> Path:
    return Path.home() / ".jarpath" / "cache"


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name, "").strip().lower()
    if not raw:
        return bool(default)
    return raw in _TRUE_VALUES


@dataclass(frozen=True, slots=True)
class RuntimeSettings:
    """Process-wide flags threaded through to the dependency resolver.

    The classpath core never interprets these; it only forwards them.

    Environment variables
    - JARPATH_OFFLINE, JARPATH_FRESH, JARPATH_QUIET: "1"/"true"/"yes"/"on"
    - JARPATH_LOCAL_REPOSITORY: Maven-layout repository root
    - JARPATH_CACHE_DIR: where resolved dependency lists are remembered
    """

    offline: bool = False
    fresh: bool = False
    quiet: bool = False
    local_repository: Path = field(default_factory=default_local_repository)
    cache_dir: Path = field(default_factory=default_cache_dir)

    def with_overrides(
        self,
        *,
        offline: Optional[bool] = None,
        fresh: Optional[bool] = None,
        quiet: Optional[bool] = None,
        local_repository: Optional[str | Path] = None,
        cache_dir: Optional[str | Path] = None,
    ) -> "RuntimeSettings":
        """Return a copy where every non-None argument replaces the current value."""
        changes = {}
        if offline is not None:
            changes["offline"] = offline
        if fresh is not None:
            changes["fresh"] = fresh
        if quiet is not None:
            changes["quiet"] = quiet
        if local_repository is not None:
            changes["local_repository"] = Path(local_repository).expanduser()
        if cache_dir is not None:
            changes["cache_dir"] = Path(cache_dir).expanduser()
        return replace(self, **changes)


def settings_from_env(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
    env = os.environ if environ is None else environ
    repo = env.get("JARPATH_LOCAL_REPOSITORY", "").strip()
    cache_dir = env.get("JARPATH_CACHE_DIR", "").strip()
    return RuntimeSettings(
        offline=_env_bool(env, "JARPATH_OFFLINE", False),
        fresh=_env_bool(env, "JARPATH_FRESH", False),
        quiet=_env_bool(env, "JARPATH_QUIET", False),
        local_repository=Path(repo).expanduser() if repo else default_local_repository(),
        cache_dir=Path(cache_dir).expanduser() if cache_dir else default_cache_dir(),
    )
