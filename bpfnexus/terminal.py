"""A pseudo-terminal session for the traced command with a status line."""

from __future__ import annotations

import os
import pty
import shutil
import sys
import threading
from dataclasses import dataclass, field


def split_trace_line(line: str) -> tuple[str, str]:
    """Split a trace line at its first ``|`` into status and detail parts."""
    status, _, detail = line.partition("|")
    return status, detail


@dataclass
class SharedTraceState:
    """The status line and stop flag shared between the runner and the terminal."""

    line: str = ""
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    terminate: threading.Event = field(default_factory=threading.Event, repr=False)
    _updated: bool = field(default=False, init=False, repr=False)

    def post(self, line: str) -> None:
        """Replace the status line and mark it as updated."""
        with self.lock:
            self.line = line
            self._updated = True

    def take_update(self) -> bool:
        """Return whether the line was updated since last asked, and reset that."""
        with self.lock:
            updated, self._updated = self._updated, False
            return updated

    def current_line(self) -> str:
        with self.lock:
            return self.line


class Terminal:
    """Runs a command in a pseudo-terminal and shows status updates."""

    poll_interval = 0.1

    def __init__(self, command: str, state: SharedTraceState) -> None:
        self.command = command
        self.state = state
        self.master_fd = -1
        self.child_pid = -1
        self.interactive = False
        self.trace_buffer: list[str] = []

    def __enter__(self) -> Terminal:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def start(self) -> None:
        """Start the command and serve status updates until told to stop."""
        try:
            pid, fd = pty.fork()
        except OSError as exc:
            print(f"forkpty: {exc}", file=sys.stderr)
            return

        if pid == 0:
            try:
                os.execlp(self.command, self.command)
            except OSError as exc:
                os.write(2, f"execlp: {exc.strerror}\n".encode())
            os._exit(1)

        self.child_pid, self.master_fd = pid, fd
        print(f"Terminal started for command: {self.command}", flush=True)
        self._loop()

    def _loop(self) -> None:
        was_interactive = self.interactive
        while not self.state.terminate.is_set():
            self.state.terminate.wait(self.poll_interval)
            if self.state.take_update():
                self.print_trace_line()
            if was_interactive and not self.interactive:
                self.flush_trace_buffer()
            was_interactive = self.interactive

    def print_trace_line(self) -> None:
        """Draw the status line on the bottom row, or buffer it in interactive mode."""
        with self.state.lock:
            line = self.state.line
            if self.interactive:
                self.trace_buffer.append(line)
                return

            rows = shutil.get_terminal_size().lines
            status, detail = split_trace_line(line)
            out = sys.stdout
            out.write("\0337")
            out.write(f"\033[{rows};1H")
            out.write("\033[2K")
            out.write(status)
            if detail:
                out.write(f": \033[36m{detail}\033[0m")
            out.flush()
            out.write("\0338\n")
            out.flush()

    def flush_trace_buffer(self) -> None:
        """Print and clear the lines buffered during interactive mode."""
        if not self.trace_buffer:
            return
        body = "".join(f"{line}\n" for line in self.trace_buffer)
        sys.stdout.write(
            f"\n--- Trace Buffer ---\n{body}--- End of Trace Buffer ---\n"
        )
        sys.stdout.flush()
        self.trace_buffer.clear()

    def close(self) -> None:
        """Close the pseudo-terminal and reap the child process."""
        if self.master_fd >= 0:
            os.close(self.master_fd)
            self.master_fd = -1
        if self.child_pid > 0:
            try:
                os.waitpid(self.child_pid, 0)
            except ChildProcessError:
                pass
            self.child_pid = -1