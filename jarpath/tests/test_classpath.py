import os
from pathlib import Path

from jarpath.core.dependencies import ArtifactInfo, ModularClassPath, parse_coordinate


def test_from_manifest_class_path_keeps_literal_order(monkeypatch) -> None:
    monkeypatch.setattr(os, "pathsep", ":")

    mcp = ModularClassPath.from_manifest_class_path("/x.jar:/y.jar::")

    assert mcp.class_paths == [str(Path("/x.jar")), str(Path("/y.jar"))]
    assert all(a.coordinate is None for a in mcp)
    assert mcp.is_valid is True


def test_class_path_string_uses_platform_separator(tmp_path: Path) -> None:
    mcp = ModularClassPath([ArtifactInfo(None, tmp_path / "a.jar"), ArtifactInfo(None, tmp_path / "b.jar")])

    assert mcp.class_path == os.pathsep.join([str(tmp_path / "a.jar"), str(tmp_path / "b.jar")])


def test_module_path_split_and_arguments(tmp_path: Path) -> None:
    fx = ArtifactInfo(parse_coordinate("org.openjfx:javafx-base:21"), tmp_path / "fx.jar", module_path=True)
    lib = ArtifactInfo(parse_coordinate("org.lib:util:1.0"), tmp_path / "util.jar")
    mcp = ModularClassPath([fx, lib])

    assert mcp.module_path_entries == [fx]
    assert mcp.class_path_entries == [lib]
    assert mcp.auto_detected_module_arguments() == [
        "--module-path",
        str(tmp_path / "fx.jar"),
        "--add-modules=javafx.base",
    ]


def test_no_module_arguments_without_module_entries(tmp_path: Path) -> None:
    assert ModularClassPath([ArtifactInfo(None, tmp_path / "a.jar")]).auto_detected_module_arguments() == []


def test_artifact_up_to_date_tracks_file_changes(tmp_path: Path) -> None:
    jar = tmp_path / "a.jar"
    jar.write_bytes(b"1")
    mtime = jar.stat().st_mtime

    assert ArtifactInfo(None, jar).is_up_to_date() is True
    assert ArtifactInfo(None, jar, timestamp=mtime).is_up_to_date() is True
    assert ArtifactInfo(None, jar, timestamp=mtime - 100).is_up_to_date() is False
    assert ArtifactInfo(None, tmp_path / "missing.jar").is_up_to_date() is False


def test_empty_classpath_is_valid_and_empty() -> None:
    mcp = ModularClassPath.empty()

    assert len(mcp) == 0
    assert mcp.class_path == ""
    assert mcp.is_valid is True
