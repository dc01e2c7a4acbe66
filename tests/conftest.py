"""Shared test fixtures for withlockfile tests."""

import os
import subprocess
import sys
import textwrap
import time
from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

SRC_DIR = Path(__file__).resolve().parent.parent / "src"

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX process groups")


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def lock_path(tmp_path: Path) -> Path:
    """Path of a lock file that does not exist yet."""
    return tmp_path / "lock.txt"


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Directory for helper executables."""
    d = tmp_path / "bin"
    d.mkdir()
    return d


@pytest.fixture
def make_script(bin_dir: Path) -> Callable[[str, str], Path]:
    """Create an executable Python script in bin_dir.

    Returns a factory taking (name, body) and returning the script path.
    """

    def _make(name: str, body: str) -> Path:
        script = bin_dir / name
        script.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        script.chmod(0o755)
        return script

    return _make


@pytest.fixture
def myecho(make_script: Callable[[str, str], Path]) -> Path:
    """Script printing its argument count and each argument on its own line."""
    return make_script(
        "myecho",
        """
        import sys
        args = sys.argv[1:]
        print(len(args))
        for arg in args:
            print(arg)
        """,
    )


@pytest.fixture
def exit_with(make_script: Callable[[str, str], Path]) -> Path:
    """Script exiting with the code given as its first argument."""
    return make_script(
        "exit_with",
        """
        import sys
        sys.exit(int(sys.argv[1]))
        """,
    )


@pytest.fixture
def cli_env(bin_dir: Path) -> dict[str, str]:
    """Environment for withlockfile subprocesses: bin_dir on PATH, src importable."""
    env = os.environ.copy()
    env["PATH"] = os.pathsep.join([str(bin_dir), env.get("PATH", "")])
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    return env


@pytest.fixture
def withlockfile(cli_env: dict[str, str]) -> Callable[..., subprocess.Popen]:
    """Start ``python -m withlockfile`` with the given arguments.

    Returns a factory; extra keyword arguments go to subprocess.Popen.
    """

    def _start(*args: str, **kwargs: object) -> subprocess.Popen:
        kwargs.setdefault("stdin", subprocess.DEVNULL)
        kwargs.setdefault("stdout", subprocess.PIPE)
        kwargs.setdefault("stderr", subprocess.PIPE)
        kwargs.setdefault("text", True)
        return subprocess.Popen(
            [sys.executable, "-m", "withlockfile", *args],
            env=cli_env,
            **kwargs,  # type: ignore[arg-type]
        )

    return _start


def is_alive(pid: int) -> bool:
    """True if pid names a live (non-zombie) process."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    stat = Path(f"/proc/{pid}/stat")
    if stat.exists():
        try:
            state = stat.read_text().rsplit(")", 1)[1].split()[0]
        except (OSError, IndexError):
            return False
        return state not in ("Z", "X")
    return True


def wait_until(predicate: Callable[[], bool], timeout: float = 10.0) -> bool:
    """Poll predicate until it is true or timeout seconds have passed."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()
