from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import List, Optional, Sequence

from jarpath.core.dependencies.classpath import ModularClassPath
from jarpath.core.dependencies.cache import SQLiteDependencyCache
from jarpath.core.dependencies.resolver import DependencyResolver, LocalRepositoryResolver
from jarpath.core.settings import RuntimeSettings, settings_from_env

from .manifest import ArchiveMetadata, WarningSink, extract_archive_metadata
from .resource import ResourceRef
from .script_source import ScriptSource

log = logging.getLogger("jarpath.source")


class ClassPathStrategy(Enum):
    """How the classpath of an archive is assembled (first match wins)."""

    COORDINATE = "coordinate"
    EMBEDDED_CLASS_PATH = "embedded-class-path"
    EXTRAS_ONLY = "extras-only"
    EMPTY = "empty"


def classify_class_path(
    resource_ref: ResourceRef,
    embedded_class_path: Optional[str],
    additional_deps: Sequence[str],
) -> ClassPathStrategy:
    if resource_ref.is_coordinate:
        return ClassPathStrategy.COORDINATE
    if embedded_class_path is not None:
        return ClassPathStrategy.EMBEDDED_CLASS_PATH
    if additional_deps:
        return ClassPathStrategy.EXTRAS_ONLY
    return ClassPathStrategy.EMPTY


def resolve_class_path(
    resource_ref: ResourceRef,
    embedded_class_path: Optional[str],
    additional_deps: Sequence[str],
    *,
    resolver: DependencyResolver,
    offline: bool,
    fresh: bool,
    quiet: bool,
) -> ModularClassPath:
    """Resolve the runtime classpath of an archive.

    - COORDINATE: the archive is itself a dependency; resolve extras plus it.
    - EMBEDDED_CLASS_PATH: resolved extras first, then the manifest entries
      verbatim. Validity comes from the resolved part only.
    - EXTRAS_ONLY: resolve the extras.
    - EMPTY: an empty, valid classpath.

    Resolver errors propagate unchanged.
    """
    deps = list(additional_deps)
    strategy = classify_class_path(resource_ref, embedded_class_path, deps)
    log.debug("Classpath strategy for %s: %s", resource_ref.location, strategy.value)

    def _resolve(coordinates: List[str]) -> ModularClassPath:
        return resolver.resolve(coordinates, [], offline=offline, fresh=fresh, verbose=not quiet)

    if strategy is ClassPathStrategy.COORDINATE:
        return _resolve(deps + [resource_ref.original_resource])
    if strategy is ClassPathStrategy.EMBEDDED_CLASS_PATH:
        resolved = _resolve(deps)
        embedded = ModularClassPath.from_manifest_class_path(embedded_class_path)
        return ModularClassPath([*resolved, *embedded], valid=resolved.is_valid)
    if strategy is ClassPathStrategy.EXTRAS_ONLY:
        return _resolve(deps)
    return ModularClassPath.empty()


def default_resolver(settings: RuntimeSettings) -> LocalRepositoryResolver:
    """Local repository resolver that remembers results under `settings.cache_dir`."""
    return LocalRepositoryResolver(
        settings.local_repository,
        cache=SQLiteDependencyCache(settings.cache_dir / "dependencies.db"),
    )


class JarSource:
    """A runnable prebuilt JAR: a local file, a downloaded one, or a coordinate.

    Only information found in the JAR itself is used, so every JarSource for
    the same file reports the same metadata. The manifest is read once, at
    construction; classpaths are resolved on every call.
    """

    def __init__(
        self,
        resource_ref: ResourceRef,
        jar_file: Optional[Path | str],
        *,
        resolver: Optional[DependencyResolver] = None,
        settings: Optional[RuntimeSettings] = None,
        warn: Optional[WarningSink] = None,
    ) -> None:
        self._resource_ref = resource_ref
        self._jar_file = Path(jar_file) if jar_file is not None else None
        self._settings = settings if settings is not None else settings_from_env()
        self._resolver = resolver if resolver is not None else default_resolver(self._settings)
        self._metadata = extract_archive_metadata(self._jar_file, location=resource_ref.location, warn=warn)
        self._script_source: Optional[ScriptSource] = None
        self._lock = Lock()

    @classmethod
    def from_script_source(cls, script: ScriptSource, **kwargs) -> "JarSource":
        """JarSource for the archive a script builds; the script view is reused."""
        jsrc = cls(script.resource_ref, script.jar_file, **kwargs)
        jsrc._script_source = script
        return jsrc

    @property
    def resource_ref(self) -> ResourceRef:
        return self._resource_ref

    @property
    def jar_file(self) -> Optional[Path]:
        return self._jar_file

    @property
    def metadata(self) -> ArchiveMetadata:
        return self._metadata

    @property
    def settings(self) -> RuntimeSettings:
        return self._settings

    def as_jar_source(self) -> "JarSource":
        return self

    def as_script_source(self) -> ScriptSource:
        if self._script_source is None:
            with self._lock:
                if self._script_source is None:
                    self._script_source = ScriptSource.prepare_script(self._resource_ref)
        return self._script_source

    def is_up_to_date(self) -> bool:
        """False if the JAR is missing or its classpath no longer checks out."""
        return (
            self._jar_file is not None
            and self._jar_file.exists()
            and self.resolve_class_path([]).is_valid
        )

    def all_dependencies(self) -> List[str]:
        return []

    def resolve_class_path(self, additional_deps: Sequence[str]) -> ModularClassPath:
        return resolve_class_path(
            self._resource_ref,
            self._metadata.class_path,
            additional_deps,
            resolver=self._resolver,
            offline=self._settings.offline,
            fresh=self._settings.fresh,
            quiet=self._settings.quiet,
        )

    @property
    def java_version(self) -> str:
        return f"{self._metadata.build_jdk}+"

    @property
    def main_class(self) -> Optional[str]:
        return self._metadata.main_class

    @property
    def runtime_options(self) -> List[str]:
        return list(self._metadata.runtime_options)

    def is_created_jar(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"JarSource({self._resource_ref.location!r}, jar_file={str(self._jar_file)!r})"


def prepare_jar(
    resource_ref: ResourceRef,
    jar_file: Optional[Path | str] = None,
    **kwargs,
) -> JarSource:
    """Create a JarSource; `jar_file` defaults to the resource's own file."""
    return JarSource(resource_ref, jar_file if jar_file is not None else resource_ref.file, **kwargs)
