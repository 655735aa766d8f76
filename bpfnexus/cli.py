"""Command-line entry point: generate the tracing script and run the tracing loop."""

from __future__ import annotations

import sys
import threading

from bpfnexus.command import CommandRunner
from bpfnexus.config import load_config
from bpfnexus.distribution import DistributionCalculator
from bpfnexus.logparser import LogParser
from bpfnexus.script_writer import generate_bpftrace_script, write_bpftrace_script
from bpfnexus.terminal import SharedTraceState, Terminal
from bpfnexus.tracer import TraceController

PROGRAM_NAME = "bpfnexus"


def usage(program_name: str) -> str:
    """Return the usage text."""
    return (
        f"Usage: {program_name} --config <config.yaml>\n"
        "Options:\n"
        "  --help\t\tShow this help message.\n"
        "  --config <file>\tSpecify the YAML configuration file.\n"
    )


def _run_terminal(command: str, state: SharedTraceState) -> None:
    with Terminal(command, state) as terminal:
        terminal.start()


def _run(config_file: str) -> None:
    config = load_config(config_file)
    dist_calc = DistributionCalculator()
    controller = TraceController(dist_calc)
    parser = LogParser()

    script = generate_bpftrace_script(config.tracers, controller)
    write_bpftrace_script(script, config.script_path)
    if config.no_exec:
        return

    state = SharedTraceState()
    terminal_thread = threading.Thread(
        target=_run_terminal, args=(config.command, state), daemon=True
    )
    terminal_thread.start()

    runner = CommandRunner()
    try:
        while not state.terminate.is_set():
            output = runner.run_bpftrace(config.logs_dir, config.script_path, config.sudo)
            parser.parse_string(output)
            dist_calc.compute_distribution(parser.arg_counts)
            if controller.regenerate_all_auto_triggers():
                write_bpftrace_script(
                    controller.generate_script(), config.script_path, True
                )
            state.terminate.wait(1)
    except KeyboardInterrupt:
        state.terminate.set()
        runner.cancel()

    print("BPFtrace runner exiting.")
    terminal_thread.join()
    print("Application exited cleanly.")


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run; return the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    config_file = ""

    remaining = iter(args)
    for arg in remaining:
        if arg in ("--help", "-h"):
            print(usage(PROGRAM_NAME), end="")
            return 0
        if arg in ("--config", "-c"):
            value = next(remaining, None)
            if value is not None:
                config_file = value
                continue
        print(f"Unknown argument: {arg}", file=sys.stderr)
        print(usage(PROGRAM_NAME), end="")
        return 1

    if not config_file:
        print("Error: No configuration file provided.", file=sys.stderr)
        print(usage(PROGRAM_NAME), end="")
        return 1

    try:
        _run(config_file)
    except Exception as exc:  # noqa: BLE001 - top-level report of any failure
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())