"""Group watchdog: kills registered process groups when its stdin closes.

Run as ``python -P group_watchdog.py`` in its own session. Each line on
stdin is a process group id; every registration is acknowledged with
``ok`` on stdout. At EOF, which happens on release and also when the
supervisor dies by any means, every registered group gets SIGKILL.

Only the standard library may be imported here.
"""

import os
import signal
import sys


def kill_groups(groups: set[int]) -> None:
    for pgid in groups:
        try:
            os.killpg(pgid, signal.SIGKILL)
        except ProcessLookupError:
            pass


def main() -> int:
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGHUP, signal.SIG_IGN)

    groups: set[int] = set()
    for line in sys.stdin.buffer:
        groups.add(int(line))
        sys.stdout.write("ok\n")
        sys.stdout.flush()

    kill_groups(groups)
    return 0


if __name__ == "__main__":
    sys.exit(main())
