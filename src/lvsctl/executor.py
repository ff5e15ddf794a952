"""
Command execution abstraction.

The Ipvs facade never calls subprocess directly. It goes through a
CommandExecutor so that tests can substitute a fake instead of running
ipvsadm. The process-wide slot below holds the active executor; it is read
on every call, so set_backend() before a call takes effect for that call.
"""

import os
import subprocess
import sys
import tempfile
from typing import BinaryIO, List, Protocol, Sequence, Union

from .errors import SpawnFailure, WaitFailure, WriteFailure

_DEBUG = bool(os.environ.get("LVSCTL_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[lvsctl] executor: {msg}", file=sys.stderr)


class CommandExecutor(Protocol):
    """Capability set every backend provides. Implementations may run commands or fake them."""

    def execute(self, exe: str, *args: str) -> None:
        """Run exe with args, discard output. Raises SubprocessFailure on failure."""
        ...

    def run(self, argv: Sequence[str]) -> bytes:
        """Run argv[0] with argv[1:] and return merged stdout/stderr."""
        ...

    def execute_with_stdin(self, data: Union[str, bytes], exe: str, *args: str) -> None:
        """Run exe with args, feeding data on standard input."""
        ...


def _write_all(pipe: BinaryIO, payload: bytes) -> None:
    """Write payload to an unbuffered pipe, advancing by what each write consumed."""
    view = memoryview(payload)
    offset = 0
    total = len(view)
    while offset < total:
        offset += pipe.write(view[offset:])


def _read_back(out: BinaryIO) -> bytes:
    out.seek(0)
    return out.read()


class SubprocessExecutor:
    """Default implementation: run commands via subprocess, no shell."""

    def _combined(self, argv: List[str], separator: str) -> bytes:
        _debug(f"spawn {argv}")
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise WaitFailure(e, e.output, argv, separator=separator) from e
        except OSError as e:
            raise SpawnFailure(e, b"", argv, separator=separator) from e
        return result.stdout or b""

    def execute(self, exe: str, *args: str) -> None:
        self._combined([exe, *args], ": ")

    def run(self, argv: Sequence[str]) -> bytes:
        argv = list(argv)
        if not argv:
            raise ValueError("run() needs at least the executable in argv")
        return self._combined(argv, " output: ")

    def execute_with_stdin(self, data: Union[str, bytes], exe: str, *args: str) -> None:
        argv = [exe, *args]
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        _debug(f"spawn {argv} with {len(payload)} bytes on stdin")
        # Output goes to a file rather than a pipe so a chatty child never
        # blocks while we are still writing its input.
        with tempfile.TemporaryFile() as out:
            try:
                proc = subprocess.Popen(
                    argv,
                    stdin=subprocess.PIPE,
                    stdout=out,
                    stderr=subprocess.STDOUT,
                    bufsize=0,
                )
            except OSError as e:
                raise SpawnFailure(e, b"", argv) from e

            try:
                with proc.stdin as pipe:
                    _write_all(pipe, payload)
                    # end of input; the with block closes again, which is a no-op
                    pipe.close()
            except OSError as e:
                proc.kill()
                proc.wait()
                raise WriteFailure(e, _read_back(out), argv) from e

            returncode = proc.wait()
            if returncode != 0:
                err = subprocess.CalledProcessError(returncode, argv)
                raise WaitFailure(err, _read_back(out), argv)


# --- Capability slot ---

backend: CommandExecutor = SubprocessExecutor()


def get_backend() -> CommandExecutor:
    return backend


def set_backend(executor: CommandExecutor) -> CommandExecutor:
    """Install executor as the active backend. Returns the previous one so callers can restore it."""
    global backend
    previous = backend
    backend = executor
    return previous


def reset_backend() -> None:
    """Restore the real subprocess backend."""
    global backend
    backend = SubprocessExecutor()


def execute(exe: str, *args: str) -> None:
    backend.execute(exe, *args)


def run(argv: Sequence[str]) -> bytes:
    return backend.run(argv)


def execute_with_stdin(data: Union[str, bytes], exe: str, *args: str) -> None:
    backend.execute_with_stdin(data, exe, *args)
