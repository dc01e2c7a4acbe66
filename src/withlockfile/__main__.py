"""Entry point for ``python -m withlockfile``."""

from withlockfile.cli import app

if __name__ == "__main__":
    app(prog_name="withlockfile")
