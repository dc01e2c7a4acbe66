"""withlockfile: serialise command execution with a lock file."""

__version__ = "0.1.0"
