"""Launch gate: holds a freshly spawned child until it is resumed.

Run as ``python -P launch_gate.py GATE_FD STATUS_FD EXECUTABLE [ARGS...]``.
The process blocks reading GATE_FD. One byte releases it and it execs
EXECUTABLE in place, keeping its PID and process group. EOF (the
supervisor went away) makes it exit without running anything. If exec
fails the errno is written to STATUS_FD, which otherwise closes on exec.

Only the standard library may be imported here.
"""

import os
import signal
import sys

EXEC_FAILED = 127

# The interpreter ignores these at startup and ignored dispositions survive exec
RESTORED_SIGNALS = ("SIGPIPE", "SIGXFSZ")


def restore_signals() -> None:
    for name in RESTORED_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, signal.SIG_DFL)


def main(argv: list[str]) -> int:
    gate_fd, status_fd = int(argv[1]), int(argv[2])
    executable, args = argv[3], argv[3:]

    # Neither pipe end may leak into the target program
    os.set_inheritable(gate_fd, False)
    os.set_inheritable(status_fd, False)

    if not os.read(gate_fd, 1):
        return 1
    os.close(gate_fd)

    restore_signals()
    try:
        os.execv(executable, args)
    except OSError as e:
        os.write(status_fd, str(e.errno or 0).encode())
    return EXEC_FAILED


if __name__ == "__main__":
    sys.exit(main(sys.argv))
