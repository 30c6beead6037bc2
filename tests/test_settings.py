from pathlib import Path

from legalage_circuit.settings import (
    ARTIFACT_FILES,
    DEFAULT_ZOKRATES_HOME,
    resolve_zokrates_bin,
    resolve_zokrates_home,
    resolve_zokrates_paths,
)


def test_default_paths_when_unset():
    paths = resolve_zokrates_paths({})

    assert paths.home == Path(DEFAULT_ZOKRATES_HOME)
    assert str(paths.home) == "~/fork/ZoKrates/zokrates_stdlib/stdlib"
    assert not paths.home.is_absolute()
    assert str(paths.binary) == "~/fork/ZoKrates/zokrates_stdlib/stdlib/../../target/release/zokrates"
    assert not paths.binary.is_absolute()


def test_empty_variables_count_as_unset():
    paths = resolve_zokrates_paths({"ZOKRATES_HOME": "", "ZOKRATES_BIN": ""})

    assert paths == resolve_zokrates_paths({})


def test_home_override_moves_default_binary():
    paths = resolve_zokrates_paths({"ZOKRATES_HOME": "zokrates/stdlib"})

    assert paths.home == Path("zokrates/stdlib")
    assert paths.binary == Path("zokrates/stdlib/../../target/release/zokrates")


def test_explicit_binary_wins():
    home = resolve_zokrates_home({"ZOKRATES_HOME": "/opt/zokrates/stdlib"})
    binary = resolve_zokrates_bin({"ZOKRATES_BIN": "/usr/local/bin/zokrates"}, home)

    assert home == Path("/opt/zokrates/stdlib")
    assert binary == Path("/usr/local/bin/zokrates")


def test_tilde_is_kept_literally_in_overrides():
    paths = resolve_zokrates_paths({"ZOKRATES_HOME": "~/zk/stdlib", "ZOKRATES_BIN": "~/bin/zokrates"})

    assert str(paths.home) == "~/zk/stdlib"
    assert str(paths.binary) == "~/bin/zokrates"


def test_resolution_reads_process_environment(monkeypatch):
    monkeypatch.setenv("ZOKRATES_HOME", "/srv/stdlib")
    monkeypatch.delenv("ZOKRATES_BIN", raising=False)

    paths = resolve_zokrates_paths()

    assert paths.home == Path("/srv/stdlib")
    assert paths.binary == Path("/srv/stdlib/../../target/release/zokrates")


def test_artifact_files_end_with_log():
    assert ARTIFACT_FILES == ["out", "out.ztf", "proving.key", "verification.key", "abi.json", "log"]
