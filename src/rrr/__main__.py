"""Entry point for python -m rrr."""

import sys


def main():
    from rrr.cli import main as cli_main

    sys.exit(cli_main())


if __name__ == "__main__":
    main()
