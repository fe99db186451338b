"""Direct entry point for the pyexv command.

This file is used as the console script entry point. It imports and
executes the main function from __main__.py.
"""

import sys


def main() -> int:
    """Entry point for pyexv command.

    Returns:
        Exit code
    """
    from pyexv.__main__ import main as _main
    return _main()


if __name__ == "__main__":
    sys.exit(main())
