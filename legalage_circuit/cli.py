#!/usr/bin/env python3

import argparse
import logging
import sys
from pathlib import Path

from legalage_circuit.pipeline import (
    ZokratesBinaryNotFound,
    ZokratesCommandFailed,
    clean_artifacts,
    compile_circuit_and_make_setup,
)
from legalage_circuit.settings import (
    CIRCUIT_FILE,
    EXIT_COMMAND_NOT_FOUND,
    LOG_FILE,
    resolve_zokrates_paths,
)

logger = logging.getLogger("zokrates")


def exit_code_of(returncode: int) -> int:
    # killed by signal N shows up as -N, the shell reports 128 + N
    return returncode if returncode > 0 else 128 - returncode


class CircuitClient:
    """Command line front end for compiling the legalage circuit and running
    the trusted setup through an external zokrates binary.
    """

    logger_prefix: str
    verbosity: int
    workdir: Path

    argument_parser: argparse.ArgumentParser
    args: argparse.Namespace

    def __init__(self, logger_prefix: str = "LegalAge"):
        self.logger_prefix = logger_prefix
        self.verbosity = 1
        self.workdir = Path(".")
        self.argument_parser = self.generate_parser()
        self.args = argparse.Namespace()

    def extract_workdir(self) -> Path:
        workdir = Path(self.args.workdir)
        if not workdir.is_dir():
            self.argument_parser.error(f"--workdir {workdir} is not a directory!")
        return workdir

    def set_logger_config(self):
        logger.propagate = False
        verbosity = min(max(0, self.verbosity), 2)
        logging_level = {0: logging.ERROR, 1: logging.INFO, 2: logging.DEBUG}.get(
            verbosity, logging.ERROR
        )
        logger.setLevel(logging.DEBUG)

        # repeated invocations in one process must not stack handlers
        logger.handlers.clear()
        console_handler = logging.StreamHandler()
        formatter = logging.Formatter(
            f"[{self.logger_prefix} %(asctime)s ~ %(levelname)s]: %(message)s"
        )
        console_handler.setFormatter(formatter)
        console_handler.setLevel(logging_level)
        logger.addHandler(console_handler)

    def add_location_flags(
        self, parser: argparse.ArgumentParser, *, with_input: bool, is_top_level: bool
    ):
        """Flags accepted before a subcommand and again after run/clean. Below the
        top level they default to SUPPRESS so they never reset an earlier value.
        """

        def default(value: str) -> str:
            return value if is_top_level else argparse.SUPPRESS

        parser.add_argument(
            "-C",
            "--workdir",
            metavar="WORKDIR",
            type=str,
            default=default("."),
            help="directory holding the circuit and its artifacts",
        )
        parser.add_argument(
            "--log", metavar="LOG_FILE", type=str, default=default(LOG_FILE), help="zokrates log file"
        )
        if with_input:
            parser.add_argument(
                "-i",
                "--input",
                metavar="CIRCUIT",
                type=str,
                default=default(CIRCUIT_FILE),
                help="circuit source file, relative to the workdir",
            )

    def generate_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="legalage-circuit",
            description="Compile the legalage circuit and generate its proving and "
            "verification keys with zokrates (check, compile, setup)",
            epilog="The zokrates toolchain is located through ZOKRATES_HOME and ZOKRATES_BIN.",
        )
        parser.add_argument("-v", "--verbosity", default=1, choices=[0, 1, 2], type=int)
        self.add_location_flags(parser, with_input=True, is_top_level=True)
        subparsers = parser.add_subparsers(dest="command")
        # no subcommand behaves like `run`
        parser.set_defaults(command="run")

        # --- Subcommand: run ---
        run_subparser = subparsers.add_parser(
            "run", help="Remove stale artifacts, then run zokrates check, compile and setup"
        )
        self.add_location_flags(run_subparser, with_input=True, is_top_level=False)

        # --- Subcommand: clean ---
        clean_subparser = subparsers.add_parser("clean", help="Only remove stale artifacts")
        self.add_location_flags(clean_subparser, with_input=False, is_top_level=False)

        return parser

    def start(self, argv: list[str] | None = None) -> int:
        self.args = self.argument_parser.parse_args(argv)
        self.verbosity = self.args.verbosity
        self.set_logger_config()
        self.workdir = self.extract_workdir()

        match self.args.command:
            case "clean":
                clean_artifacts(self.workdir, self.args.log)
                return 0
            case _:
                return self.run()

    def run(self) -> int:
        paths = resolve_zokrates_paths()

        logger.info(f"=== Start {self.logger_prefix} Circuit Setup ===")
        logger.info(f" * zokrates home: {paths.home}")
        logger.info(f" * zokrates bin : {paths.binary}")
        logger.info(f" * workdir      : {self.workdir}")
        logger.info(f" * circuit      : {self.args.input}")
        logger.info("===")

        try:
            compile_circuit_and_make_setup(
                paths, self.workdir, circuit=self.args.input, log_name=self.args.log
            )
        except ZokratesBinaryNotFound:
            return EXIT_COMMAND_NOT_FOUND
        except ZokratesCommandFailed as e:
            logger.error(f"{e}, see {self.workdir / self.args.log}")
            return exit_code_of(e.status.returncode)

        logger.info(f"=== End {self.logger_prefix} Circuit Setup ===")
        return 0


def main(argv: list[str] | None = None) -> int:
    return CircuitClient().start(argv)


def app():
    sys.exit(main())


if __name__ == "__main__":
    app()
