import os
import re

import pytest

from bpfnexus.command import CommandRunner, generate_filename


def test_generate_filename_in_existing_directory(tmp_path):
    name = generate_filename(tmp_path)
    assert name.startswith(f"{tmp_path}/trace_")
    assert re.fullmatch(r"trace_\d{8}_\d{6}\.log", os.path.basename(name))


def test_generate_filename_creates_directory_on_yes(tmp_path, monkeypatch, capsys):
    target = tmp_path / "logs"
    monkeypatch.setattr("builtins.input", lambda prompt="": "y")
    name = generate_filename(target)
    assert target.is_dir()
    assert name.startswith(f"{target}/trace_")
    assert "Directory created." in capsys.readouterr().out


def test_generate_filename_accepts_upper_case(tmp_path, monkeypatch):
    target = tmp_path / "upper"
    monkeypatch.setattr("builtins.input", lambda prompt="": "Y")
    generate_filename(target)
    assert target.is_dir()


def test_generate_filename_refused(tmp_path, monkeypatch):
    target = tmp_path / "nope"
    monkeypatch.setattr("builtins.input", lambda prompt="": "n")
    with pytest.raises(RuntimeError, match="was not created"):
        generate_filename(target)
    assert not target.exists()


def test_run_with_redirect_returns_output(tmp_path):
    out = tmp_path / "out.log"
    result = CommandRunner().run_with_redirect("echo hello", out, False)
    assert result == "hello\n"
    assert out.read_text() == "hello\n"


def test_run_with_redirect_adds_trailing_newline(tmp_path):
    out = tmp_path / "out.log"
    result = CommandRunner().run_with_redirect("printf 'a\\nb'", out, False)
    assert result == "a\nb\n"


def test_run_with_redirect_empty_output(tmp_path):
    out = tmp_path / "empty.log"
    assert CommandRunner().run_with_redirect("true", out, False) == ""


def test_run_with_redirect_unopenable_file(tmp_path):
    out = tmp_path / "missing" / "out.log"
    with pytest.raises(RuntimeError, match="Failed to open output file."):
        CommandRunner().run_with_redirect("echo hi", out, False)


def test_run_bpftrace_refused_directory(tmp_path, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt="": "n")
    with pytest.raises(RuntimeError):
        CommandRunner().run_bpftrace(tmp_path / "absent", "script.bt", False)


def test_cancel_without_process(capsys):
    assert CommandRunner().cancel() is False
    assert "No active command to cancel." in capsys.readouterr().out