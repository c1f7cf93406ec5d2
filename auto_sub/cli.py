"""CLI entry point for the auto-sub package."""

import sys


def main_auto_sub():
    """Entry point for auto-sub command."""
    from auto_sub.core.main import main
    sys.exit(main())


if __name__ == "__main__":
    main_auto_sub()
