"""CLI entry point for monoterm."""

from __future__ import annotations

# Python version check - must run before importing modules that use 3.12+ syntax.
import sys

if sys.version_info < (3, 12):  # noqa: UP036
    print("Error: monoterm requires Python 3.12 or higher.")
    print(
        "You are running Python {}.{}".format(  # noqa: UP032
            sys.version_info.major, sys.version_info.minor
        )
    )
    sys.exit(1)

from monoterm.cli.commands.root import cli  # noqa: E402


def main() -> None:
    """Run the monoterm command line."""
    cli()


if __name__ == "__main__":
    main()
