# bpfnexus

bpfnexus reads a YAML description of the functions you want to trace and
writes a bpftrace script for them. It can then run that script over and
over. Each round counts how often each sampled argument value occurs, and
those counts are used to narrow every `auto` trigger down to the rarest
value ranges seen so far.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```
bpfnexus --config trace.yaml
```

Options:

- `--config <file>`, `-c <file>`: the YAML configuration file.
- `--help`, `-h`: print the usage message.

The exit status is 1 in three cases: an unknown argument, a missing configuration file, or an error while running. The error is printed as `Error: ...`.

The generated script is always written to `ScriptPath`. When `NoExec` is false, bpfnexus also does the following:

1. It starts `Command` in a pseudo-terminal, in a background thread.
2. It runs `bpftrace <ScriptPath>` repeatedly. `sudo` is prepended when `Sudo` is true. Each run's output is saved to `LogsDir/trace_YYYYMMDD_HHMMSS.log`. If `LogsDir` does not exist, you are asked whether to create it. Answering anything but `y` stops the program with an error.
3. After each run, it parses the sampler counts from the output and rebuilds the value histograms. If any automatic trigger changed, it rewrites the script and prints an "updated threholds" notice.
4. It waits one second and starts the next run. Press Ctrl-C to stop.

The generated script ends with an `interval:s:5` probe. That probe prints and clears every count, stack and sampler map, then exits. Each bpftrace run therefore lasts about five seconds.

## Configuration

```yaml
TraceCondition:
  Command: ./my_app
  Sudo: true
  NoExec: false
  LogsDir: ./tracer_logs
  ScriptPath: ./trace.bt
  Targets:
    - FilePath: /usr/lib/libc.so.6
      Functions:
        - Func: ioctl
          HookType: uprobe
          Triggers:
            - "auto arg1"
            - "arg2 == 42"
```

`Command`, `LogsDir`, `ScriptPath`, `Sudo` and `NoExec` are required. `Sudo` and `NoExec` accept the YAML 1.1 spellings of booleans: `true`/`false`, `yes`/`no`, `on`/`off` and `y`/`n`. `Targets`, `Functions` and `Triggers` may be left out. A missing key, a value of the wrong kind, or unreadable YAML raises `bpfnexus.config.ConfigError`.

Each trigger produces one tracer. The text of the trigger decides its kind:

- A trigger that starts with `auto` is adjusted automatically. It starts as `true`, and every `argN` it mentions gets a sampler map `@samplerID_func_argN`. Once histograms exist, the condition becomes an OR of ranges. For each argument, these ranges cover the least populated tenth of its bins, and always at least one bin.
- A trigger that starts with `cpu`, `disk`, `memory` or `network` is recognised as a tracer kind of that name. Its probe condition is left empty.
- Any other trigger is placed verbatim into the probe's `if (...)` condition.

Every tracer records `@countID_func[comm, pid, args...]` and `@stackID_func[comm, pid, args...]`. It also prints a line for each hit.

## Library use

```python
from bpfnexus.config import load_config
from bpfnexus.distribution import DistributionCalculator
from bpfnexus.logparser import LogParser
from bpfnexus.script_writer import generate_bpftrace_script, write_bpftrace_script
from bpfnexus.tracer import TraceController

config = load_config("trace.yaml")
dist_calc = DistributionCalculator()
controller = TraceController(dist_calc)
script = generate_bpftrace_script(config.tracers, controller)
write_bpftrace_script(script, config.script_path)

parser = LogParser()
parser.parse_string(bpftrace_output)
dist_calc.compute_distribution(parser.arg_counts)
if controller.regenerate_all_auto_triggers():
    write_bpftrace_script(controller.generate_script(), config.script_path, True)
```

- `bpfnexus.logparser.LogParser` sums the counts of `@samplerN_func_argM[value]: count` entries into `arg_counts`. `parse_string` reads every entry in a string, and `parse_file` reads the first entry on each line of a file. The totals are available through `format_results` and `print_results`.
- `bpfnexus.distribution.DistributionCalculator` bins the values of each (sampler, function, argument) group using Sturges' rule (`num_bins`). `rare_arg_condition` builds the bpftrace condition for the rarest bins. It returns an empty string when the group has no histogram.
- `bpfnexus.tracer` provides `find_vars`, `TracerType`, `Tracer` and `TraceController`. `TraceController` has `add_tracer`, `get`, `regenerate_all_auto_triggers`, `generate_interval` and `generate_script`.
- `bpfnexus.command` provides `generate_filename` and `CommandRunner`. `CommandRunner` has `run_with_redirect`, `run_bpftrace` and `cancel`.
- `bpfnexus.terminal` provides `Terminal`, `SharedTraceState` and `split_trace_line`.

## What it does not do

The traced command runs in a pseudo-terminal, but bpfnexus neither shows its output nor passes keyboard input to it. `Terminal` only draws status lines that are posted to its `SharedTraceState`, and the command-line runner posts none. The saved log files and stack maps are not analysed further. Only the sampler counts are used, and only to adjust `auto` triggers.