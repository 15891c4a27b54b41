from pathlib import Path

from jarpath.core.settings import RuntimeSettings, default_cache_dir, default_local_repository, settings_from_env


def test_defaults_when_environment_is_empty() -> None:
    s = settings_from_env({})

    assert s == RuntimeSettings()
    assert s.local_repository == default_local_repository()


def test_flags_and_repository_from_environment(tmp_path: Path) -> None:
    s = settings_from_env(
        {
            "JARPATH_OFFLINE": "true",
            "JARPATH_FRESH": "1",
            "JARPATH_QUIET": "no",
            "JARPATH_LOCAL_REPOSITORY": str(tmp_path),
        }
    )

    assert (s.offline, s.fresh, s.quiet) == (True, True, False)
    assert s.local_repository == tmp_path


def test_settings_read_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("JARPATH_OFFLINE", "yes")
    monkeypatch.delenv("JARPATH_FRESH", raising=False)

    s = settings_from_env()

    assert s.offline is True
    assert s.fresh is False


def test_overrides_only_replace_given_values(tmp_path: Path) -> None:
    base = RuntimeSettings(offline=True, local_repository=tmp_path)

    s = base.with_overrides(quiet=True)

    assert (s.offline, s.fresh, s.quiet) == (True, False, True)
    assert s.local_repository == tmp_path
    assert base.with_overrides(local_repository=tmp_path / "other").local_repository == tmp_path / "other"


def test_cache_dir_from_environment_and_overrides(tmp_path: Path) -> None:
    s = settings_from_env({"JARPATH_CACHE_DIR": str(tmp_path / "c")})

    assert s.cache_dir == tmp_path / "c"
    assert s.with_overrides(cache_dir=tmp_path / "d").cache_dir == tmp_path / "d"
    assert settings_from_env({}).cache_dir == default_cache_dir()
