import pytest

from bpfnexus.config import TraceDescriptor
from bpfnexus.distribution import DistributionCalculator
from bpfnexus.script_writer import generate_bpftrace_script, write_bpftrace_script
from bpfnexus.tracer import TraceController


def _descriptors():
    return [
        TraceDescriptor("/bin/app", "foo", "uprobe", "arg0 > 1"),
        TraceDescriptor("/bin/app", "bar", "uprobe", "auto arg2"),
    ]


def test_generate_registers_tracers():
    ctrl = TraceController(DistributionCalculator())
    generate_bpftrace_script(_descriptors(), ctrl)
    assert sorted(ctrl.tracers) == [0, 1]
    assert ctrl.get(1).descriptor.func == "bar"


def test_generate_matches_controller_script():
    ctrl = TraceController(DistributionCalculator())
    script = generate_bpftrace_script(_descriptors(), ctrl)
    assert script.startswith("#!/usr/bin/env bpftrace\n\n")
    assert script == ctrl.generate_script()
    assert script.endswith(ctrl.generate_interval(5))


def test_generate_with_no_descriptors():
    ctrl = TraceController(DistributionCalculator())
    script = generate_bpftrace_script([], ctrl)
    assert script == "#!/usr/bin/env bpftrace\n\n" + ctrl.generate_interval(5)


def test_write_round_trip(tmp_path, capsys):
    target = tmp_path / "trace.bt"
    ctrl = TraceController(DistributionCalculator())
    script = generate_bpftrace_script(_descriptors(), ctrl)
    write_bpftrace_script(script, target)
    assert target.read_text(encoding="utf-8") == script
    out = capsys.readouterr().out
    assert f"Script written to {target}" in out
    assert "[BPFNexus]" in out


def test_write_update_message(tmp_path, capsys):
    target = tmp_path / "trace.bt"
    write_bpftrace_script("first", target)
    write_bpftrace_script("second", target, True)
    assert target.read_text(encoding="utf-8") == "second"
    assert f"updated threholds in {target}" in capsys.readouterr().out


def test_write_to_missing_directory_raises(tmp_path):
    with pytest.raises(OSError):
        write_bpftrace_script("x", tmp_path / "missing" / "trace.bt")