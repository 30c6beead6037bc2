import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

#
# ZoKrates Toolchain Locations
#

ZOKRATES_HOME_ENV = "ZOKRATES_HOME"
ZOKRATES_BIN_ENV = "ZOKRATES_BIN"

# stdlib directory of a local ZoKrates checkout, used verbatim (no tilde expansion)
DEFAULT_ZOKRATES_HOME = "~/fork/ZoKrates/zokrates_stdlib/stdlib"

# release binary, relative to the stdlib directory
DEFAULT_ZOKRATES_BIN_FROM_HOME = Path("..") / ".." / "target" / "release" / "zokrates"

#
# Circuit and Artifacts
#

CIRCUIT_FILE = "legalage.zok"
LOG_FILE = "log"

# NOTE: order matches the cleanup order, the log file is always last.
ARTIFACT_FILES = [
    "out",
    "out.ztf",
    "proving.key",
    "verification.key",
    "abi.json",
    LOG_FILE,
]

# artifacts consumed by the legalage prover after setup
KEY_ARTIFACT_FILES = [
    "out",
    "abi.json",
    "proving.key",
    "verification.key",
]

#
# Exit Codes
#

EXIT_COMMAND_NOT_FOUND = 127


# ---------------------------------------------------------------------------- #
#                               Path Resolution                                #
# ---------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ZokratesPaths:
    home: Path
    binary: Path


def _env_or_default(env: Mapping[str, str], key: str, default: str) -> str:
    # empty counts as unset, same as `${VAR:-default}`
    value = env.get(key)
    return value if value else default


def resolve_zokrates_home(env: Mapping[str, str]) -> Path:
    return Path(_env_or_default(env, ZOKRATES_HOME_ENV, DEFAULT_ZOKRATES_HOME))


def resolve_zokrates_bin(env: Mapping[str, str], home: Path) -> Path:
    default = str(home / DEFAULT_ZOKRATES_BIN_FROM_HOME)
    return Path(_env_or_default(env, ZOKRATES_BIN_ENV, default))


def resolve_zokrates_paths(env: Mapping[str, str] | None = None) -> ZokratesPaths:
    """Resolve the ZoKrates stdlib directory and binary from the environment.

    `ZOKRATES_BIN` defaults to a path relative to the *resolved* home, so
    pointing `ZOKRATES_HOME` at another checkout moves the binary with it.
    """
    if env is None:
        env = os.environ
    home = resolve_zokrates_home(env)
    return ZokratesPaths(home=home, binary=resolve_zokrates_bin(env, home))
