from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from jarpath.core.dependencies import ArtifactInfo, ModularClassPath, parse_coordinate


class FakeResolver:
    """Records every call; maps each coordinate to <root>/<g_a_v>.jar."""

    def __init__(self, root: Path, *, valid: bool = True) -> None:
        self.root = root
        self.valid = valid
        self.calls: List[Dict] = []

    def resolve(self, coordinates, repositories, *, offline, fresh, verbose) -> ModularClassPath:
        self.calls.append(
            {
                "coordinates": list(coordinates),
                "repositories": list(repositories),
                "offline": offline,
                "fresh": fresh,
                "verbose": verbose,
            }
        )
        artifacts = [
            ArtifactInfo(coordinate=parse_coordinate(c), file=self.root / (c.replace(":", "_") + ".jar"))
            for c in coordinates
        ]
        return ModularClassPath(artifacts, valid=self.valid)


def _manifest_bytes(attrs: Dict[str, str]) -> bytes:
    lines = ["Manifest-Version: 1.0"] + [f"{k}: {v}" for k, v in attrs.items()]
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


@pytest.fixture
def fake_resolver(tmp_path: Path) -> FakeResolver:
    return FakeResolver(tmp_path / "resolved")


@pytest.fixture
def make_jar(tmp_path: Path):
    """Factory writing a minimal JAR with the given manifest attributes."""

    def _make(
        name: str = "app.jar",
        attrs: Optional[Dict[str, str]] = None,
        *,
        raw_manifest: Optional[bytes] = None,
        with_manifest: bool = True,
    ) -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            if with_manifest:
                data = raw_manifest if raw_manifest is not None else _manifest_bytes(attrs or {})
                zf.writestr("META-INF/MANIFEST.MF", data)
            zf.writestr("com/example/Main.class", b"\xca\xfe\xba\xbe")
        return path

    return _make


@pytest.fixture
def make_resolver(tmp_path: Path):
    def _make(*, valid: bool = True) -> FakeResolver:
        return FakeResolver(tmp_path / "resolved", valid=valid)

    return _make


@pytest.fixture(autouse=True)
def _isolated_dependency_cache(tmp_path: Path, monkeypatch) -> None:
    """Keep resolved-dependency caches out of the real home directory."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("JARPATH_CACHE_DIR", str(tmp_path / "cache"))
