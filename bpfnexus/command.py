"""Running bpftrace with its output captured in timestamped log files."""

from __future__ import annotations

import os
import shlex
import signal
import subprocess
import threading
from datetime import datetime
from pathlib import Path


def generate_filename(base_path: str | Path) -> str:
    """Return a timestamped log file path inside ``base_path``.

    If the directory is missing the user is asked whether to create it.
    A refusal raises RuntimeError.
    """
    base = str(base_path)
    if not os.path.exists(base):
        try:
            answer = input(
                f"Directory '{base}' does not exist. Create it? (y/n): "
            ).strip()
        except EOFError:
            answer = ""
        if answer[:1] in ("y", "Y"):
            os.makedirs(base, exist_ok=True)
            print("Directory created.")
        else:
            raise RuntimeError("Directory does not exist and was not created.")

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{base}/trace_{stamp}.log"


class CommandRunner:
    """Runs shell commands with their output redirected to a file."""

    def __init__(self) -> None:
        self._process: subprocess.Popen[bytes] | None = None
        self._lock = threading.Lock()

    def run_with_redirect(
        self, command: str, filename: str | Path, sudo: bool
    ) -> str:
        """Run ``command`` with stdout sent to ``filename``; return the file's text."""
        full_command = f"{command} > {shlex.quote(str(filename))}"
        if sudo:
            full_command = f"sudo {full_command}"

        process = subprocess.Popen(full_command, shell=True)
        with self._lock:
            self._process = process
        try:
            process.wait()
        finally:
            with self._lock:
                self._process = None

        try:
            with open(filename, encoding="utf-8", errors="replace", newline="") as handle:
                content = handle.read()
        except OSError as exc:
            raise RuntimeError("Failed to open output file.") from exc

        if content and not content.endswith("\n"):
            content += "\n"
        return content

    def run_bpftrace(
        self, directory: str | Path, script_path: str | Path, sudo: bool
    ) -> str:
        """Run bpftrace on ``script_path``, logging into a new file in ``directory``."""
        filename = generate_filename(directory)
        return self.run_with_redirect(f"bpftrace {script_path}", filename, sudo)

    def cancel(self) -> bool:
        """Interrupt the running command; return whether one was running."""
        with self._lock:
            process = self._process
        if process is not None and process.poll() is None:
            process.send_signal(signal.SIGINT)
            print("Command canceled.")
            return True
        print("No active command to cancel.")
        return False