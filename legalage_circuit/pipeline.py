import logging
from dataclasses import dataclass, field
from pathlib import Path

from legalage_circuit.cmd import ExecStatus, invoke_command
from legalage_circuit.file import collect_artifacts, path_to_binary, remove_files
from legalage_circuit.settings import (
    ARTIFACT_FILES,
    CIRCUIT_FILE,
    KEY_ARTIFACT_FILES,
    LOG_FILE,
    ZokratesPaths,
)

logger = logging.getLogger("zokrates")


# ---------------------------------------------------------------------------- #
#                              ZoKrates Exceptions                             #
# ---------------------------------------------------------------------------- #


class ZokratesException(Exception):
    pass


class ZokratesCommandFailed(ZokratesException):
    status: ExecStatus

    def __init__(self, message: str, status: ExecStatus):
        super().__init__(message)
        self.status = status


class ZokratesBinaryNotFound(ZokratesException):
    binary: Path

    def __init__(self, binary: Path):
        super().__init__(f"zokrates binary not found: {binary}")
        self.binary = binary


# ---------------------------------------------------------------------------- #
#                           Pipeline Private Helper                            #
# ---------------------------------------------------------------------------- #


def __zokrates_check_for_failure(status: ExecStatus, error_msg: str, exception_msg: str):
    if status.is_failure():
        logger.critical(error_msg)
        logger.info("=== OUTPUT ===")
        logger.info(status.stdout)
        logger.info("==============")
        raise ZokratesCommandFailed(exception_msg, status)


# ---------------------------------------------------------------------------- #
#                                Pipeline Steps                                #
# ---------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ZokratesStep:
    name: str
    args: tuple[str, ...] = ()

    def command(self, binary: Path) -> list[str]:
        return [str(binary), self.name, *self.args]


def zokrates_steps(circuit: str = CIRCUIT_FILE) -> list[ZokratesStep]:
    return [
        ZokratesStep("check", ("--input", circuit)),
        ZokratesStep("compile", ("--input", circuit)),
        ZokratesStep("setup"),
    ]


@dataclass
class PipelineResult:
    statuses: list[ExecStatus] = field(default_factory=list)
    artifacts: dict[str, Path | None] = field(default_factory=dict)

    def missing_artifacts(self) -> list[str]:
        return [name for name, path in self.artifacts.items() if path is None]


# ---------------------------------------------------------------------------- #
#                              Pipeline Functions                              #
# ---------------------------------------------------------------------------- #


def artifact_files(log_name: str = LOG_FILE) -> list[str]:
    return [log_name if name == LOG_FILE else name for name in ARTIFACT_FILES]


# ---------------------------------------------------------------------------- #


def clean_artifacts(workdir: Path, log_name: str = LOG_FILE) -> list[Path]:
    removed = remove_files(workdir, artifact_files(log_name))
    logger.info(f"removed {len(removed)} stale artifact(s) from {workdir}")
    return removed


# ---------------------------------------------------------------------------- #


def run_zokrates_step(
    paths: ZokratesPaths,
    step: ZokratesStep,
    workdir: Path,
    log_path: Path,
    append: bool = True,
    env: dict[str, str] | None = None,
) -> ExecStatus:
    """Run a single zokrates subcommand inside `workdir`.

    The merged stdout/stderr of the step is written to `log_path`, truncating
    it unless `append` is set. A non-zero exit raises `ZokratesCommandFailed`
    after the output has been logged.
    """
    mode = "ab" if append else "wb"

    def binary_not_found(reason: str) -> ZokratesBinaryNotFound:
        with open(log_path, mode) as log:
            log.write(f"{paths.binary}: command not found\n".encode())
        logger.critical(f"zokrates binary {paths.binary} {reason}")
        return ZokratesBinaryNotFound(paths.binary)

    binary = path_to_binary(paths.binary)
    if binary is None:
        raise binary_not_found("does not exist or is not executable")

    # relative binaries are resolved before switching into the workdir
    try:
        status = invoke_command(
            step.command(binary.absolute()), cwd=workdir, env=env, merge_stderr=True
        )
    except OSError as e:
        # e.g. a missing shebang interpreter or a non-executable format
        raise binary_not_found(f"cannot be executed: {e}") from e
    with open(log_path, mode) as log:
        log.write(status.output_raw)

    __zokrates_check_for_failure(
        status,
        f"zokrates {step.name} failed with exit {status.returncode} in {workdir}",
        f"zokrates {step.name} failed",
    )
    logger.info(f"zokrates {step.name} done ({status.delta_time:.2f}s)")
    return status


# ---------------------------------------------------------------------------- #
#                               Combined Actions                               #
# ---------------------------------------------------------------------------- #


def compile_circuit_and_make_setup(
    paths: ZokratesPaths,
    workdir: Path = Path("."),
    circuit: str = CIRCUIT_FILE,
    log_name: str = LOG_FILE,
    env: dict[str, str] | None = None,
) -> PipelineResult:
    """Clean stale artifacts, then run `check`, `compile` and `setup` in order.

    Stops at the first failing step by letting its exception propagate, so
    later steps never run. The log file collects the output of every step
    that did run, in order.
    """
    clean_artifacts(workdir, log_name)
    log_path = workdir / log_name

    result = PipelineResult()
    for index, step in enumerate(zokrates_steps(circuit)):
        status = run_zokrates_step(paths, step, workdir, log_path, append=index > 0, env=env)
        result.statuses.append(status)

    result.artifacts = collect_artifacts(workdir, KEY_ARTIFACT_FILES)
    for name in result.missing_artifacts():
        logger.warning(f"zokrates finished but {name} was not produced in {workdir}")

    return result
