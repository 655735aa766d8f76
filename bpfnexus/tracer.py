"""Tracer definitions and generation of bpftrace probe scripts."""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum

from bpfnexus.config import TraceDescriptor
from bpfnexus.distribution import DistributionCalculator

_ARG_PATTERN = re.compile(r"arg\d+", re.ASCII)
_INDENT4 = " " * 4
_INDENT8 = " " * 8
SCRIPT_HEADER = "#!/usr/bin/env bpftrace\n\n"
DEFAULT_INTERVAL = 5


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def find_vars(text: str) -> list[str]:
    """Return the distinct ``argN`` names in ``text``, ordered by their number."""
    return sorted(set(_ARG_PATTERN.findall(text)), key=lambda name: (int(name[3:]), name))


class TracerType(Enum):
    MANUAL = "manual"
    AUTO = "auto"
    CPU = "cpu"
    DISK = "disk"
    MEMORY = "memory"
    NETWORK = "network"


_PREFIXED_TYPES = (
    TracerType.AUTO,
    TracerType.CPU,
    TracerType.DISK,
    TracerType.MEMORY,
    TracerType.NETWORK,
)


def _classify(trigger: str) -> TracerType:
    for tracer_type in _PREFIXED_TYPES:
        if trigger.startswith(tracer_type.value):
            return tracer_type
    return TracerType.MANUAL


class Tracer:
    """One probe with its trigger condition and the maps it fills."""

    def __init__(
        self,
        descriptor: TraceDescriptor,
        tracer_id: int,
        dist_calc: DistributionCalculator,
    ) -> None:
        self.descriptor = descriptor
        self.id = tracer_id
        self.dist_calc = dist_calc
        self.enabled = True
        self.type = _classify(descriptor.trigger)
        self.trigger_script = ""
        self.triggers: list[str] = []
        self.script = ""

        self.args = find_vars(descriptor.trigger)
        self.arg_keys = "".join(f", {arg}" for arg in self.args)
        self.sampler_map_names = [
            f"@sampler{tracer_id}_{descriptor.func}_{arg}" for arg in self.args
        ]
        self.count_map_name = f"@count{tracer_id}_{descriptor.func}"
        self.stack_map_name = f"@stack{tracer_id}_{descriptor.func}"

        if self.type is TracerType.AUTO:
            # An automatic tracer starts by tracing every call until samples exist.
            self._set_trigger_script("true", regenerate=False)
        elif self.type is TracerType.MANUAL:
            self.trigger_script = descriptor.trigger

        self.generate_script()

    def generate_script(self) -> str:
        """Rebuild and return the probe block for this tracer."""
        td = self.descriptor
        lines = [
            f"{td.hook_type}:{td.file_path}:{td.func}\n",
            "{\n",
            f"{_INDENT4}if ({self.trigger_script})\n",
            f"{_INDENT4}{{\n",
            f'{_INDENT8}printf("{td.file_path}:{td.func}:{td.trigger}, '
            f'Comm: %s, PID: %d\\n", comm, pid);\n',
            f"{_INDENT8}{self.count_map_name}[comm, pid{self.arg_keys}] = count();\n",
            f"{_INDENT8}{self.stack_map_name}[comm, pid{self.arg_keys}] = ustack;\n",
            f"{_INDENT4}}}\n",
        ]
        if self.type is TracerType.AUTO:
            lines.extend(
                f"{_INDENT4}{name}[{arg}] = count();\n"
                for name, arg in zip(self.sampler_map_names, self.args)
            )
        lines.append("}\n\n\n")
        self.script = "".join(lines)
        return self.script

    def _set_trigger_script(self, new_script: str, regenerate: bool = True) -> bool:
        changed = new_script != self.trigger_script
        self.trigger_script = new_script
        if changed:
            print(
                f"\033[36m[BPFNexus]\033[0m {_timestamp()}: Tracer ID {self.id} "
                f"updated with trigger condition: {new_script}"
            )
            if regenerate:
                self.generate_script()
        return changed

    def generate_auto_triggers(self) -> bool:
        """Derive the trigger from rare argument values; return whether it changed."""
        self.triggers = [
            condition
            for arg in self.args
            if (
                condition := self.dist_calc.rare_arg_condition(
                    self.id, self.descriptor.func, int(arg[3:])
                )
            )
        ]
        if self.triggers:
            new_script = " || ".join(f"({trigger})" for trigger in self.triggers)
        else:
            new_script = "true"
        return self._set_trigger_script(new_script)


class TraceController:
    """Owns all tracers and assembles the full bpftrace script."""

    def __init__(self, dist_calc: DistributionCalculator) -> None:
        self.dist_calc = dist_calc
        self.tracers: dict[int, Tracer] = {}
        self.stack_map_names: set[str] = set()
        self.count_map_names: set[str] = set()
        self.sampler_map_names: set[str] = set()
        self._next_id = 0

    def add_tracer(self, descriptor: TraceDescriptor) -> Tracer:
        """Create a tracer for ``descriptor`` under the next free id."""
        tracer = Tracer(descriptor, self._next_id, self.dist_calc)
        self.tracers[self._next_id] = tracer
        self._next_id += 1

        self.stack_map_names.add(tracer.stack_map_name)
        self.count_map_names.add(tracer.count_map_name)
        if tracer.type is TracerType.AUTO:
            self.sampler_map_names.update(tracer.sampler_map_names)
        return tracer

    def get(self, tracer_id: int) -> Tracer | None:
        return self.tracers.get(tracer_id)

    def regenerate_all_auto_triggers(self) -> bool:
        """Refresh every automatic tracer; return whether any trigger changed."""
        changed = False
        for tracer in self.tracers.values():
            if tracer.type is TracerType.AUTO and tracer.generate_auto_triggers():
                changed = True
        return changed

    def generate_interval(self, seconds: int) -> str:
        """Build the interval probe that dumps and clears all maps, then exits."""
        names = [
            *sorted(self.count_map_names),
            *sorted(self.stack_map_names),
            *sorted(self.sampler_map_names),
        ]
        body = "".join(f"{_INDENT4}print({name});clear({name});\n" for name in names)
        return f"interval:s:{int(seconds)}\n{{\n{body}{_INDENT4}exit();\n}}\n"

    def generate_script(self) -> str:
        """Assemble the whole script from the current tracers."""
        blocks = "".join(self.tracers[key].script for key in sorted(self.tracers))
        return SCRIPT_HEADER + blocks + self.generate_interval(DEFAULT_INTERVAL)