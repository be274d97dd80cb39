"""Console-script entry point for :mod:`jsexports`."""

from __future__ import annotations

from jsexports.cli import create_app


def main() -> None:
    """Execute the CLI application."""

    app = create_app()
    app(prog_name="jsexports")


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    main()


__all__ = ["main"]
