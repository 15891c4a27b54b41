from __future__ import annotations

import logging
import re
import sqlite3
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Deque, Dict, FrozenSet, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from defusedxml import ElementTree as DefusedET

from .cache import SQLiteDependencyCache
from .classpath import ArtifactInfo, ModularClassPath
from .coordinates import Coordinate, parse_coordinate
from .errors import ArtifactNotFoundError, ResolutionError

log = logging.getLogger("jarpath.dependencies")

# Scopes that contribute to a runtime classpath.
_RUNTIME_SCOPES = frozenset({"compile", "runtime"})

_PROPERTY_REF = re.compile(r"\$\{([^}]+)\}")

# POMs are untrusted input; bound what we parse.
_MAX_POM_BYTES = 2 * 1024 * 1024
_MAX_PARENT_DEPTH = 16

# Artifacts from these groups are placed on the module path.
_MODULE_PATH_GROUPS = frozenset({"org.openjfx"})


@runtime_checkable
class DependencyResolver(Protocol):
    """Turns coordinates into a flat, deduplicated, transitively closed classpath.

    Implementations own caching, retries and network access. Failures to
    resolve must raise (typically a ResolutionError subclass).
    """

    def resolve(
        self,
        coordinates: Sequence[str],
        repositories: Sequence[str],
        *,
        offline: bool,
        fresh: bool,
        verbose: bool,
    ) -> ModularClassPath: ...


@dataclass(frozen=True, slots=True)
class _Dependency:
    group_id: str
    artifact_id: str
    version: Optional[str]
    classifier: Optional[str]
    type: str
    scope: str
    optional: bool
    exclusions: FrozenSet[Tuple[str, str]]


@dataclass(frozen=True, slots=True)
class _Pom:
    coordinate: Coordinate
    properties: Dict[str, str]
    managed: Dict[str, str]
    dependencies: Tuple[_Dependency, ...]

    def interpolate(self, value: Optional[str]) -> Optional[str]:
        return _interpolate(value, self.properties)


def _strip_ns(tag: str) -> str:
    return tag.split("}", 1)[1] if "}" in tag else tag


def _child(el, name: str):
    for c in list(el):
        if _strip_ns(c.tag) == name:
            return c
    return None


def _children(el, name: str) -> List:
    if el is None:
        return []
    return [c for c in list(el) if _strip_ns(c.tag) == name]


def _text(el, name: str) -> Optional[str]:
    if el is None:
        return None
    c = _child(el, name)
    if c is None or c.text is None:
        return None
    value = c.text.strip()
    return value or None


def _interpolate(value: Optional[str], properties: Dict[str, str]) -> Optional[str]:
    """Expand ${name} references; unknown references are left untouched."""
    if value is None:
        return None
    for _ in range(8):
        expanded = _PROPERTY_REF.sub(lambda m: properties.get(m.group(1), m.group(0)), value)
        if expanded == value:
            break
        value = expanded
    return value


def _is_version_range(version: str) -> bool:
    return version[:1] in ("[", "(") or "," in version


@dataclass
class LocalRepositoryResolver:
    """Resolve coordinates against a Maven-layout repository on local disk.

    Resolution rules
    - Breadth-first over the dependency graph: the nearest declaration wins.
    - Deduplicated by group:artifact:classifier:type.
    - Only compile and runtime scoped, non-optional dependencies are followed.
    - Missing versions come from dependencyManagement (own POM, parents, imported BOMs).

    Validity
    - With a `cache`, a previously resolved coordinate list is reused and its
      artifacts are re-checked against the mtimes recorded when it was
      resolved. A deleted or modified artifact makes the result invalid.
    - A freshly walked graph is always valid.

    Notes
    - This resolver never touches the network, so `offline` changes nothing.
    - `fresh` discards parsed POMs and the cached result for the request.
    - Not safe for concurrent use (the POM cache is shared).

    Complexity
    - O(a + d) for a artifacts and d declared dependency edges (POMs parsed once).
    - O(a) stat calls when served from the cache.
    """

    repository_root: Path
    cache: Optional[SQLiteDependencyCache] = None
    _pom_cache: Dict[Path, Optional[_Pom]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.repository_root = Path(self.repository_root).expanduser()

    def _cache_key(self, coordinates: Sequence[str]) -> str:
        return f"{self.repository_root}|{','.join(coordinates)}"

    def _cached(self, key: str) -> Optional[List[ArtifactInfo]]:
        if self.cache is None:
            return None
        try:
            return self.cache.get(key)
        except (sqlite3.Error, OSError) as e:
            log.warning("Dependency cache unavailable (%s): %s", self.cache.db_path, e)
            return None

    def _store(self, key: str, artifacts: List[ArtifactInfo]) -> None:
        if self.cache is None:
            return
        try:
            self.cache.put(key, artifacts)
        except (sqlite3.Error, OSError) as e:
            log.warning("Could not update dependency cache %s: %s", self.cache.db_path, e)

    def resolve(
        self,
        coordinates: Sequence[str],
        repositories: Sequence[str],
        *,
        offline: bool,
        fresh: bool,
        verbose: bool,
    ) -> ModularClassPath:
        level = logging.INFO if verbose else logging.DEBUG
        if repositories:
            log.debug("Ignoring repository overrides %s: only %s is consulted", list(repositories), self.repository_root)
        if fresh:
            self._pom_cache.clear()
        if not coordinates:
            return ModularClassPath.empty()

        key = self._cache_key(coordinates)
        cached = None if fresh else self._cached(key)
        if cached is not None:
            stale = [a for a in cached if not a.is_up_to_date()]
            for a in stale:
                log.log(level, "Cached artifact changed or missing: %s", a.file)
            return ModularClassPath(cached, valid=not stale)

        log.log(level, "Resolving dependencies %s (offline=%s)", ", ".join(coordinates), offline)

        queue: Deque[Tuple[Coordinate, FrozenSet[Tuple[str, str]]]] = deque(
            (parse_coordinate(c), frozenset()) for c in coordinates
        )
        seen: Dict[str, Coordinate] = {}
        artifacts: List[ArtifactInfo] = []

        while queue:
            coord, exclusions = queue.popleft()
            if coord.key in seen:
                if seen[coord.key].version != coord.version:
                    log.debug("Omitting %s: %s is nearer", coord, seen[coord.key].version)
                continue
            if _is_version_range(coord.version):
                raise ResolutionError(f"Version ranges are not supported: {coord}")
            seen[coord.key] = coord

            path = coord.local_path(self.repository_root)
            if not path.is_file():
                raise ArtifactNotFoundError(str(coord), str(path))
            if coord.type != "pom":
                artifacts.append(
                    ArtifactInfo(
                        coordinate=coord,
                        file=path,
                        timestamp=path.stat().st_mtime,
                        module_path=coord.group_id in _MODULE_PATH_GROUPS,
                    )
                )

            pom = self._load_pom(coord.with_type("pom"))
            if pom is None:
                log.debug("No POM for %s, assuming it has no dependencies", coord)
                continue
            for child, child_exclusions in self._runtime_dependencies(pom, exclusions):
                queue.append((child, child_exclusions))

        log.log(level, "Resolved %d artifact(s)", len(artifacts))
        self._store(key, artifacts)
        return ModularClassPath(artifacts)

    def _runtime_dependencies(self, pom: _Pom, exclusions: FrozenSet[Tuple[str, str]]):
        for dep in pom.dependencies:
            if dep.optional or dep.scope not in _RUNTIME_SCOPES:
                continue
            if _is_excluded(dep.group_id, dep.artifact_id, exclusions):
                continue
            version = dep.version or pom.managed.get(f"{dep.group_id}:{dep.artifact_id}")
            version = pom.interpolate(version)
            if not version or "${" in version:
                log.warning(
                    "Skipping %s:%s required by %s: version cannot be determined",
                    dep.group_id,
                    dep.artifact_id,
                    pom.coordinate.gav,
                )
                continue
            child = Coordinate(dep.group_id, dep.artifact_id, version, dep.classifier, dep.type)
            yield child, exclusions | dep.exclusions

    def _load_pom(self, coord: Coordinate, depth: int = 0) -> Optional[_Pom]:
        path = coord.local_path(self.repository_root)
        if path in self._pom_cache:
            return self._pom_cache[path]
        pom = self._parse_pom(path, depth) if path.is_file() else None
        self._pom_cache[path] = pom
        return pom

    def _parse_pom(self, path: Path, depth: int) -> _Pom:
        if path.stat().st_size > _MAX_POM_BYTES:
            raise ResolutionError(f"POM too large: {path}")
        try:
            root = DefusedET.fromstring(path.read_bytes())
        except (DefusedET.ParseError, ValueError) as e:
            raise ResolutionError(f"Malformed POM {path}: {e}") from e

        parent_el = _child(root, "parent")
        parent: Optional[_Pom] = None
        if parent_el is not None and depth < _MAX_PARENT_DEPTH:
            pg, pa, pv = _text(parent_el, "groupId"), _text(parent_el, "artifactId"), _text(parent_el, "version")
            if pg and pa and pv:
                parent = self._load_pom(Coordinate(pg, pa, pv, None, "pom"), depth + 1)

        group_id = _text(root, "groupId") or _text(parent_el, "groupId") or ""
        artifact_id = _text(root, "artifactId") or ""
        version = _text(root, "version") or _text(parent_el, "version") or ""

        properties: Dict[str, str] = dict(parent.properties) if parent else {}
        props_el = _child(root, "properties")
        for prop in list(props_el) if props_el is not None else []:
            properties[_strip_ns(prop.tag)] = (prop.text or "").strip()
        if parent is not None:
            properties["project.parent.groupId"] = parent.coordinate.group_id
            properties["project.parent.version"] = parent.coordinate.version
        properties.update(
            {
                "project.groupId": group_id,
                "project.artifactId": artifact_id,
                "project.version": version,
                "pom.groupId": group_id,
                "pom.version": version,
            }
        )

        managed: Dict[str, str] = dict(parent.managed) if parent else {}
        dm = _child(root, "dependencyManagement")
        for dep in self._read_dependencies(_child(dm, "dependencies") if dm is not None else None):
            version_ = _interpolate(dep.version, properties)
            if dep.scope == "import" and dep.type == "pom" and version_:
                bom = self._load_pom(Coordinate(dep.group_id, dep.artifact_id, version_, None, "pom"), depth + 1)
                if bom is not None:
                    for k, v in bom.managed.items():
                        managed.setdefault(k, v)
                continue
            if version_:
                managed[f"{dep.group_id}:{dep.artifact_id}"] = version_

        deps = tuple(
            _Dependency(
                group_id=_interpolate(d.group_id, properties) or d.group_id,
                artifact_id=_interpolate(d.artifact_id, properties) or d.artifact_id,
                version=d.version,
                classifier=d.classifier,
                type=d.type,
                scope=d.scope,
                optional=d.optional,
                exclusions=d.exclusions,
            )
            for d in self._read_dependencies(_child(root, "dependencies"))
        )
        return _Pom(
            coordinate=Coordinate(group_id, artifact_id, version, None, "pom"),
            properties=properties,
            managed=managed,
            dependencies=deps,
        )

    @staticmethod
    def _read_dependencies(deps_el) -> List[_Dependency]:
        out: List[_Dependency] = []
        for d in _children(deps_el, "dependency"):
            group_id = _text(d, "groupId")
            artifact_id = _text(d, "artifactId")
            if not group_id or not artifact_id:
                continue
            exclusions = frozenset(
                (_text(e, "groupId") or "*", _text(e, "artifactId") or "*")
                for e in _children(_child(d, "exclusions"), "exclusion")
            )
            out.append(
                _Dependency(
                    group_id=group_id,
                    artifact_id=artifact_id,
                    version=_text(d, "version"),
                    classifier=_text(d, "classifier"),
                    type=_text(d, "type") or "jar",
                    scope=_text(d, "scope") or "compile",
                    optional=(_text(d, "optional") or "false").lower() == "true",
                    exclusions=exclusions,
                )
            )
        return out


def _is_excluded(group_id: str, artifact_id: str, exclusions: FrozenSet[Tuple[str, str]]) -> bool:
    for g, a in exclusions:
        if g in ("*", group_id) and a in ("*", artifact_id):
            return True
    return False
