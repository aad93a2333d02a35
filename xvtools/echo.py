"""Print arguments separated by spaces."""

from __future__ import annotations

import sys


def echo(args: list[str]) -> str:
    """Return the words joined by spaces and ended by a newline; nothing for no words."""
    return " ".join(args) + "\n" if args else ""


def main(argv: list[str] | None = None) -> int:
    """Write the arguments to standard output."""
    args = sys.argv[1:] if argv is None else list(argv)
    sys.stdout.write(echo(args))
    return 0


if __name__ == "__main__":
    sys.exit(main())