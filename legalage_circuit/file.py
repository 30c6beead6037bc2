import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger("zokrates")


# ---------------------------------------------------------------------------- #
#                               Removal Helpers                                #
# ---------------------------------------------------------------------------- #


def remove_file(path: Path) -> bool:
    """Remove a single file in the manner of `rm -f`. A missing file is not an
    error. Any other failure is reported as a warning and `False` is returned.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"unable to remove {path}: {e}")
        return False
    logger.debug(f"removed {path}")
    return True


# ---------------------------------------------------------------------------- #


def remove_files(directory: Path, names: list[str]) -> list[Path]:
    return [directory / name for name in names if remove_file(directory / name)]


# ---------------------------------------------------------------------------- #
#                                Binary Lookup                                 #
# ---------------------------------------------------------------------------- #


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


# ---------------------------------------------------------------------------- #


def path_to_binary(binary: str | Path) -> Path | None:
    """Given an explicit path or a bare command name, returns the executable
    path or `None`. Bare names are looked up on `PATH`.
    """
    if os.sep in str(binary):
        candidate = Path(binary)
        return candidate if is_executable(candidate) else None
    found = shutil.which(str(binary))
    return Path(found) if found else None


# ---------------------------------------------------------------------------- #
#                              Artifact Inventory                              #
# ---------------------------------------------------------------------------- #


def collect_artifacts(directory: Path, names: list[str]) -> dict[str, Path | None]:
    artifacts: dict[str, Path | None] = {}
    for name in names:
        path = directory / name
        artifacts[name] = path if path.is_file() else None
    return artifacts


# ---------------------------------------------------------------------------- #
