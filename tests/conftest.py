from pathlib import Path

import pytest

from legalage_circuit.settings import ZokratesPaths

# Stand-in for the zokrates binary: echoes its arguments, records the
# subcommand, fails on demand and drops the files the real tool would write.
FAKE_ZOKRATES = """#!/bin/sh
echo "zokrates $*"
if [ -n "$FAKE_ZOKRATES_TRACE" ]; then
    echo "$1" >> "$FAKE_ZOKRATES_TRACE"
fi
if [ "$1" = "$FAKE_ZOKRATES_FAIL_ON" ]; then
    echo "error: $1 failed" >&2
    exit 3
fi
if [ -n "$FAKE_ZOKRATES_NO_OUTPUTS" ]; then
    exit 0
fi
case "$1" in
    compile)
        echo "program" > out
        echo "ztf" > out.ztf
        echo "{}" > abi.json
        ;;
    setup)
        echo "pk" > proving.key
        echo "vk" > verification.key
        ;;
esac
"""


@pytest.fixture
def fake_zokrates(tmp_path: Path) -> Path:
    binary = tmp_path / "zokrates-home" / "target" / "release" / "zokrates"
    binary.parent.mkdir(parents=True)
    binary.write_text(FAKE_ZOKRATES)
    binary.chmod(0o755)
    return binary


@pytest.fixture
def zokrates_paths(tmp_path: Path, fake_zokrates: Path) -> ZokratesPaths:
    return ZokratesPaths(home=tmp_path / "zokrates-home" / "stdlib", binary=fake_zokrates)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    circuit_dir = tmp_path / "circuit"
    circuit_dir.mkdir()
    (circuit_dir / "legalage.zok").write_text("def main() -> field { return 1; }\n")
    return circuit_dir


@pytest.fixture
def trace_file(tmp_path: Path) -> Path:
    return tmp_path / "trace.txt"


@pytest.fixture
def read_trace(trace_file: Path):
    """Subcommands the fake binary has seen, in invocation order."""

    def _read() -> list[str]:
        if not trace_file.exists():
            return []
        return trace_file.read_text().split()

    return _read
