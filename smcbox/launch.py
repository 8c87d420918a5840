"""Start several clients or output parties as child processes and wait for them."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import subprocess
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from .op_generator import generate_op_config

__all__ = ["launch_clients", "launch_output_parties", "clients_main", "ops_main"]

_log = logging.getLogger(__name__)

DEFAULT_COMMAND = "../../cmd/cmd"


def _prefix(command: str | os.PathLike | Sequence[str]) -> list[str]:
    if isinstance(command, (str, os.PathLike)):
        return [os.fspath(command)]
    return [str(part) for part in command]


def _interrupt(process: subprocess.Popen) -> None:
    try:
        process.send_signal(signal.SIGINT)
    except (OSError, ValueError):
        process.terminate()


def _run_all(invocations: Iterable[list[str]]) -> list[int]:
    processes: list[subprocess.Popen] = []
    try:
        for args in invocations:
            processes.append(subprocess.Popen(args))
        return [process.wait() for process in processes]
    except BaseException:
        for process in processes:
            if process.poll() is None:
                _interrupt(process)
        raise


def launch_clients(count: int, confpath: str, inputpath: str,
                   command: str | os.PathLike | Sequence[str] = DEFAULT_COMMAND) -> list[int]:
    """Start count clients, c1 upwards; return their exit codes once all have finished."""
    prefix = _prefix(command)
    codes = _run_all(
        prefix + [
            f"-confpath={confpath}config_c{number}.json",
            f"-inputpath={inputpath}input_c{number}.json",
        ]
        for number in range(1, count + 1)
    )
    _log.info("All clients have finished.")
    return codes


def launch_output_parties(count: int,
                          command: str | os.PathLike | Sequence[str] = DEFAULT_COMMAND,
                          generator_dir: str | Path = "../generator") -> list[int]:
    """Write output-party configs, start count output parties and return their exit codes."""
    base = Path(generator_dir)
    config_dir = base / "config"
    generate_op_config(count, ["60000"], base / "outputparty_template.json", config_dir)
    prefix = _prefix(command)
    experiments = base / "input" / "experiments.json"
    return _run_all(
        prefix + [
            f"-confpath={config_dir / f'config_op{number}.json'}",
            f"-exppath={experiments}",
        ]
        for number in range(1, count + 1)
    )


def clients_main(argv: list[str] | None = None) -> int:
    """Command line: start -n clients with configs and inputs under the given prefixes."""
    parser = argparse.ArgumentParser(prog="smcbox-launch-clients")
    parser.add_argument("-n", type=int, default=1, help="number of clients")
    parser.add_argument("-confpath", "--confpath", default="", help="config file path")
    parser.add_argument("-inputpath", "--inputpath", default="", help="experiments file path")
    parser.add_argument("--command", default=DEFAULT_COMMAND, help="client program")
    args = parser.parse_args(argv)
    try:
        launch_clients(args.n, args.confpath, args.inputpath, args.command)
    except OSError as exc:
        print(f"Failed to start client: {exc}", file=sys.stderr)
        return 1
    return 0


def ops_main(argv: list[str] | None = None) -> int:
    """Command line: configure and start -n output parties."""
    parser = argparse.ArgumentParser(prog="smcbox-launch-ops")
    parser.add_argument("-n", type=int, default=1, help="number of output parties")
    parser.add_argument("--command", default=DEFAULT_COMMAND, help="output party program")
    parser.add_argument("--generator-dir", default="../generator",
                        help="directory holding the template, config and input")
    args = parser.parse_args(argv)
    try:
        launch_output_parties(args.n, args.command, args.generator_dir)
    except (OSError, ValueError) as exc:
        print(f"Failed to start output party: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(clients_main())