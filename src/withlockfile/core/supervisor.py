"""Process supervisor: runs a command inside a kill-on-release process group.

The child is created suspended, attached to an isolation group and only
then resumed, so neither the child nor anything it spawns can run outside
the group. Releasing the group, or the supervisor dying for any reason,
kills every process still in it.

POSIX: the child starts in a fresh process group behind the launch gate
(see launch_gate.py); the isolation group is a watchdog process that
SIGKILLs registered groups when its stdin pipe closes.

Windows: the child is created with CREATE_SUSPENDED and assigned to a job
object configured with JOB_OBJECT_LIMIT_KILL_ON_JOB_CLOSE.
"""

import contextlib
import errno
import logging
import os
import signal
import subprocess
import sys
from collections.abc import Iterator

from ..errors import GenericError, OsResourceError
from ..models import ChildState, Command
from . import group_watchdog, launch_gate

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"


def _helper_argv(module: object) -> list[str]:
    """Command running one of the stdlib-only helper scripts."""
    return [sys.executable, "-P", os.path.abspath(module.__file__)]  # type: ignore[attr-defined]


class ChildProcess:
    """A supervised child and its lifecycle state."""

    def __init__(
        self,
        command: Command,
        popen: subprocess.Popen,
        gate_fd: int | None = None,
        status_fd: int | None = None,
    ) -> None:
        self.command = command
        self.popen = popen
        self.state = ChildState.CREATED
        self._gate_fd = gate_fd
        self._status_fd = status_fd

    @property
    def pid(self) -> int:
        return self.popen.pid

    def advance(self, expected: ChildState, new: ChildState) -> None:
        """Move from ``expected`` to ``new``, refusing any other transition."""
        if self.state is not expected:
            raise GenericError(
                f"child {self.pid} cannot move to {new.value} from {self.state.value}"
            )
        logger.debug(f"Child {self.pid}: {self.state.value} -> {new.value}")
        self.state = new

    def close_pipes(self) -> None:
        for fd in (self._gate_fd, self._status_fd):
            if fd is not None:
                with contextlib.suppress(OSError):
                    os.close(fd)
        self._gate_fd = self._status_fd = None

    def discard(self) -> None:
        """Kill and reap a child that never reached exit."""
        if self.state is ChildState.EXITED:
            return
        self.close_pipes()
        with contextlib.suppress(ProcessLookupError):
            self.popen.kill()
        self.popen.wait()
        self.state = ChildState.EXITED


class ProcessGroup:
    """Isolation container that kills its members on release."""

    def attach(self, child: ChildProcess) -> None:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "ProcessGroup":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


class WatchdogProcessGroup(ProcessGroup):
    """POSIX process groups tracked by a watchdog that outlives a killed supervisor."""

    def __init__(self, watchdog: subprocess.Popen) -> None:
        self.watchdog = watchdog
        self.members: list[int] = []
        self.released = False

    def attach(self, child: ChildProcess) -> None:
        # Registering a group the child does not lead would kill our own group
        if os.getpgid(child.pid) != child.pid:
            os.setpgid(child.pid, child.pid)

        assert self.watchdog.stdin is not None and self.watchdog.stdout is not None
        try:
            self.watchdog.stdin.write(f"{child.pid}\n".encode())
            self.watchdog.stdin.flush()
            ack = self.watchdog.stdout.readline()
        except BrokenPipeError as e:
            raise OsResourceError.from_os_error("attach process group", e) from e
        if ack.strip() != b"ok":
            raise OsResourceError("attach process group", errno.EPIPE)
        self.members.append(child.pid)

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        assert self.watchdog.stdin is not None
        with contextlib.suppress(BrokenPipeError):
            self.watchdog.stdin.close()
        self.watchdog.wait()
        if self.watchdog.stdout is not None:
            self.watchdog.stdout.close()
        logger.debug(f"Released process group(s) {self.members}")


class JobObjectProcessGroup(ProcessGroup):
    """Windows job object with kill-on-close."""

    def __init__(self, job: int) -> None:
        self.job: int | None = job

    def attach(self, child: ChildProcess) -> None:
        from . import win32

        win32.assign_to_job(self.job, int(child.popen._handle))  # type: ignore[attr-defined]

    def release(self) -> None:
        from . import win32

        if self.job is None:
            return
        job, self.job = self.job, None
        try:
            win32.close_handle(job)
        except OSError as e:
            raise OsResourceError.from_os_error("close process group", e) from e


def launch_suspended(command: Command) -> ChildProcess:
    """Create the child with inherited stdio, not yet running the command.

    Raises:
        OsResourceError: If the process cannot be created
    """
    if IS_WINDOWS:
        from . import win32

        try:
            popen = subprocess.Popen(
                command.command_line,
                executable=command.executable,
                creationflags=win32.CREATE_SUSPENDED,
                close_fds=False,
            )
        except OSError as e:
            raise OsResourceError.from_os_error("spawn", e) from e
        child = ChildProcess(command, popen)
    else:
        gate_r, gate_w = os.pipe()
        status_r, status_w = os.pipe()
        # The gate clears these again before exec
        os.set_inheritable(gate_r, True)
        os.set_inheritable(status_w, True)
        argv = [
            *_helper_argv(launch_gate),
            str(gate_r),
            str(status_w),
            *command.argv,
        ]
        try:
            # Descriptors the caller left inheritable reach the command
            popen = subprocess.Popen(argv, close_fds=False, process_group=0)
        except OSError as e:
            for fd in (gate_r, gate_w, status_r, status_w):
                os.close(fd)
            raise OsResourceError.from_os_error("spawn", e) from e
        os.close(gate_r)
        os.close(status_w)
        child = ChildProcess(command, popen, gate_fd=gate_w, status_fd=status_r)

    logger.debug(f"Created suspended child {child.pid}: {command.command_line}")
    return child


def create_isolation_group() -> ProcessGroup:
    """Create a container that kills its members when released.

    Raises:
        OsResourceError: If the container cannot be created
    """
    try:
        if IS_WINDOWS:
            from . import win32

            return JobObjectProcessGroup(win32.create_kill_on_close_job())
        watchdog = subprocess.Popen(
            _helper_argv(group_watchdog),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as e:
        raise OsResourceError.from_os_error("create process group", e) from e
    return WatchdogProcessGroup(watchdog)


def attach(group: ProcessGroup, child: ChildProcess) -> None:
    """Assign the child to the group.

    Access denied is tolerated: the supervisor may itself sit in a
    container the child cannot leave.

    Raises:
        OsResourceError: For any failure other than access denied
    """
    try:
        group.attach(child)
    except PermissionError as e:
        logger.debug(f"Child {child.pid} not attached to process group: {e}")
    except OSError as e:
        raise OsResourceError.from_os_error("attach process group", e) from e
    child.advance(ChildState.CREATED, ChildState.GROUP_ATTACHED)


def resume(child: ChildProcess) -> None:
    """Let the suspended child start executing the command.

    Raises:
        OsResourceError: If the child cannot be resumed or fails to exec
    """
    child.advance(ChildState.GROUP_ATTACHED, ChildState.RUNNING)

    if IS_WINDOWS:
        from . import win32

        try:
            win32.resume_process(int(child.popen._handle))  # type: ignore[attr-defined]
        except OSError as e:
            raise OsResourceError.from_os_error("resume", e) from e
        return

    assert child._gate_fd is not None and child._status_fd is not None
    try:
        os.write(child._gate_fd, b"\x01")
        report = b""
        while chunk := os.read(child._status_fd, 64):
            report += chunk
    except OSError as e:
        raise OsResourceError.from_os_error("resume", e) from e
    finally:
        child.close_pipes()

    if report:
        child.popen.wait()
        child.state = ChildState.EXITED
        raise OsResourceError("resume", int(report) or errno.ENOEXEC)
    logger.debug(f"Child {child.pid} running {child.command.executable}")


def wait(child: ChildProcess) -> int:
    """Block until the child exits and return its exit code.

    A child killed by signal N reports 128 + N.

    Raises:
        OsResourceError: If waiting fails
        GenericError: If the child is not running
    """
    if child.state is not ChildState.RUNNING:
        raise GenericError(f"child {child.pid} is {child.state.value}, not running")
    try:
        returncode = child.popen.wait()
    except OSError as e:
        raise OsResourceError.from_os_error("wait", e) from e
    child.advance(ChildState.RUNNING, ChildState.EXITED)

    if returncode < 0:
        returncode = 128 - returncode
    logger.debug(f"Child {child.pid} exited with {returncode}")
    return returncode


@contextlib.contextmanager
def foreground(child: ChildProcess) -> Iterator[None]:
    """Give the controlling terminal to the child's process group while it runs.

    Terminal signals and reads then reach the child as they would without
    the supervisor. No-op when stdin is not our foreground terminal.
    """
    tty_fd = _foreground_tty()
    handed = False
    if tty_fd is not None and os.getpgid(child.pid) == child.pid:
        try:
            os.tcsetpgrp(tty_fd, child.pid)
            handed = True
        except OSError as e:
            logger.debug(f"Terminal kept by supervisor: {e}")
    try:
        yield
    finally:
        if handed:
            _reclaim_terminal(tty_fd)


def _foreground_tty() -> int | None:
    if IS_WINDOWS:
        return None
    try:
        fd = sys.stdin.fileno()
        if os.isatty(fd) and os.tcgetpgrp(fd) == os.getpgrp():
            return fd
    except (AttributeError, ValueError, OSError):
        pass
    return None


def _reclaim_terminal(tty_fd: int) -> None:
    # We are a background group now; tcsetpgrp would stop us with SIGTTOU
    previous = signal.signal(signal.SIGTTOU, signal.SIG_IGN)
    try:
        os.tcsetpgrp(tty_fd, os.getpgrp())
    except OSError as e:
        logger.debug(f"Could not reclaim terminal: {e}")
    finally:
        signal.signal(signal.SIGTTOU, previous)


def supervise(command: Command) -> int:
    """Run the command to completion inside an isolation group.

    Returns:
        The child's exit code

    Raises:
        OsResourceError: If any step fails
    """
    child = launch_suspended(command)
    try:
        with create_isolation_group() as group:
            attach(group, child)
            with foreground(child):
                resume(child)
                return wait(child)
    finally:
        child.discard()
