"""Building the initial bpftrace script and writing scripts to disk."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from bpfnexus.config import TraceDescriptor
from bpfnexus.tracer import DEFAULT_INTERVAL, SCRIPT_HEADER, TraceController


def generate_bpftrace_script(
    descriptors: Iterable[TraceDescriptor], controller: TraceController
) -> str:
    """Register a tracer for each descriptor and return the resulting script."""
    blocks = "".join(controller.add_tracer(td).script for td in descriptors)
    return SCRIPT_HEADER + blocks + controller.generate_interval(DEFAULT_INTERVAL)


def write_bpftrace_script(
    script: str, filename: str | Path, is_update: bool = False
) -> None:
    """Write ``script`` to ``filename`` and report it on standard output."""
    Path(filename).write_text(script, encoding="utf-8")
    stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    action = "updated threholds in" if is_update else "Script written to"
    print(f"\033[36m[BPFNexus]\033[0m {stamp}: {action} {filename}")