"""Console-script entry point."""
from __future__ import annotations

from typing import Sequence

from paperbacks.presentation.cli.app import main as cli_main


def main(argv: Sequence[str] | None = None) -> None:
    cli_main(argv)


if __name__ == "__main__":
    main()
