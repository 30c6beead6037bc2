import logging
import os
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import psutil

logger = logging.getLogger("zokrates")

# ---------------------------------------------------------------------------- #
#                               Helper Functions                               #
# ---------------------------------------------------------------------------- #


# build a table mapping all non-printable characters to None
LINE_BREAK_CHARACTERS = set(["\n", "\r"])
NO_PRINT_TRANS_TABLE = {
    i: None
    for i in range(0, sys.maxunicode + 1)
    if not chr(i).isprintable() and not chr(i) in LINE_BREAK_CHARACTERS
}


# ---------------------------------------------------------------------------- #


def to_printable_text(data: bytes | None) -> str:
    """Decode raw process output as UTF-8 and drop non-printable characters."""
    if data is None:
        return ""
    return data.decode("utf-8", errors="ignore").translate(NO_PRINT_TRANS_TABLE)


# ---------------------------------------------------------------------------- #


def live_child_pids() -> set[int]:
    return {p.pid for p in psutil.Process().children(recursive=True)}


# ---------------------------------------------------------------------------- #


def reap_new_children(known_pids: set[int]):
    """Wait for (or terminate) every child process not in `known_pids`.
    Wrapper scripts standing in for the binary may leave orphans behind.
    """
    for child in psutil.Process().children(recursive=True):
        if child.pid in known_pids:
            continue
        logger.debug(f"possible zombie detected, waiting for {child.pid} ...")
        try:
            if child.status() == psutil.STATUS_ZOMBIE:
                child.wait()
            elif child.is_running():
                child.terminate()
                child.wait(timeout=5)
        except (psutil.NoSuchProcess, psutil.TimeoutExpired):
            logger.error(f"unable to clean up possible zombie {child.pid}")


# ---------------------------------------------------------------------------- #
#                            Execution Status Class                            #
# ---------------------------------------------------------------------------- #


@dataclass
class ExecStatus:
    command: str
    stdout: str
    stderr: str
    stdout_raw: bytes | None
    stderr_raw: bytes | None
    returncode: int
    delta_time: float
    env: dict[str, str] | None = None
    cwd: Path | None = None

    def is_failure(self):
        return not self.returncode == 0

    @property
    def output_raw(self) -> bytes:
        """Everything the process wrote, stdout first."""
        return (self.stdout_raw or b"") + (self.stderr_raw or b"")

    def __str__(self):
        return f"""
command   : {self.command}
returncode: {self.returncode}
stdout:
{self.stdout}
stderr:
{self.stderr}
time: {self.delta_time}s
"""


# ---------------------------------------------------------------------------- #
#                       Core Command Invocation Function                       #
# ---------------------------------------------------------------------------- #


def invoke_command(
    command: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    is_log_debug: bool = True,
    explicit_clean_zombies=False,
    merge_stderr: bool = False,
) -> ExecStatus:
    """Run `command` to completion and collect its output.

    With `merge_stderr` the child's stderr goes into its stdout pipe, like
    `2>&1`, so `stdout_raw` keeps the interleaving the child produced and
    `stderr_raw` is `None`. There is no timeout, the call blocks until the
    child exits. A missing executable raises `FileNotFoundError`.
    """

    logger.info("run command: " + " ".join(command))
    logger.debug(f"  - cwd     : {cwd}")
    logger.debug(f"  - env     : {env}")

    # passed variables override the inherited environment
    combined_env = None if env is None else {**os.environ, **env}

    known_pids = live_child_pids() if explicit_clean_zombies else set()

    # ------------------------------ call subprocess ----------------------------- #

    start_time = time.time()
    complete_proc = subprocess.run(
        command,
        close_fds=True,
        shell=False,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
        cwd=cwd,
        env=combined_env,
    )
    delta_time = time.time() - start_time

    status = ExecStatus(
        command=" ".join(command),
        stdout=to_printable_text(complete_proc.stdout),
        stderr=to_printable_text(complete_proc.stderr),
        stdout_raw=complete_proc.stdout,
        stderr_raw=complete_proc.stderr,
        returncode=complete_proc.returncode,
        delta_time=delta_time,
        env=env,
        cwd=cwd,
    )

    # --------------------------- debug process output --------------------------- #

    logger.info(f"  => exit {status.returncode}")
    if is_log_debug:
        logger.debug("========== START OUTPUT ==========")
        logger.debug(status.stdout)
        if status.stderr:
            logger.debug("---------- stderr ----------")
            logger.debug(status.stderr)
        logger.debug("=========== END OUTPUT ===========")

    if explicit_clean_zombies:
        reap_new_children(known_pids)

    return status
