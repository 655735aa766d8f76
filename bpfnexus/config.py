"""Loading of the YAML trace configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

_TRUE_WORDS = ("y", "yes", "true", "on")
_FALSE_WORDS = ("n", "no", "false", "off")


def _spellings(words: tuple[str, ...]) -> frozenset[str]:
    return frozenset(form for w in words for form in (w, w.capitalize(), w.upper()))


_TRUE = _spellings(_TRUE_WORDS)
_FALSE = _spellings(_FALSE_WORDS)


class ConfigError(ValueError):
    """The configuration file is missing, malformed or incomplete."""


@dataclass(frozen=True)
class TraceDescriptor:
    """One probe to attach: a function in a file, a hook type and a trigger."""

    file_path: str
    func: str
    hook_type: str
    trigger: str


@dataclass(frozen=True)
class TraceConfig:
    """Settings read from the ``TraceCondition`` section."""

    command: str
    logs_dir: str
    script_path: str
    sudo: bool
    no_exec: bool
    tracers: list[TraceDescriptor] = field(default_factory=list)


def _get(node: Any, key: str, where: str) -> Any:
    if not isinstance(node, dict) or key not in node:
        raise ConfigError(f"missing key: {where}")
    return node[key]


def _string(node: Any, key: str, where: str) -> str:
    value = _get(node, key, where)
    if not isinstance(value, str):
        raise ConfigError(f"expected a scalar for {where}")
    return value


def _boolean(node: Any, key: str, where: str) -> bool:
    value = _string(node, key, where)
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"expected a boolean for {where}, got {value!r}")


def _sequence(value: Any, where: str) -> list[Any]:
    if value is None or isinstance(value, str):
        return []
    if isinstance(value, list):
        return value
    raise ConfigError(f"expected a sequence for {where}")


def _tracers(condition: dict[str, Any]) -> list[TraceDescriptor]:
    tracers = []
    for target in _sequence(condition.get("Targets"), "TraceCondition.Targets"):
        file_path = _string(target, "FilePath", "Targets[].FilePath")
        for func in _sequence(target.get("Functions"), "Targets[].Functions"):
            name = _string(func, "Func", "Functions[].Func")
            hook_type = _string(func, "HookType", "Functions[].HookType")
            for trigger in _sequence(func.get("Triggers"), "Functions[].Triggers"):
                if not isinstance(trigger, str):
                    raise ConfigError("expected a scalar trigger")
                tracers.append(TraceDescriptor(file_path, name, hook_type, trigger))
    return tracers


def load_config(path: str | Path) -> TraceConfig:
    """Read and validate the configuration file at ``path``."""
    try:
        with open(path, encoding="utf-8") as handle:
            document = yaml.load(handle, Loader=yaml.BaseLoader)
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    condition = _get(document, "TraceCondition", "TraceCondition")
    if not isinstance(condition, dict):
        raise ConfigError("TraceCondition must be a mapping")

    return TraceConfig(
        command=_string(condition, "Command", "TraceCondition.Command"),
        logs_dir=_string(condition, "LogsDir", "TraceCondition.LogsDir"),
        script_path=_string(condition, "ScriptPath", "TraceCondition.ScriptPath"),
        sudo=_boolean(condition, "Sudo", "TraceCondition.Sudo"),
        no_exec=_boolean(condition, "NoExec", "TraceCondition.NoExec"),
        tracers=_tracers(condition),
    )