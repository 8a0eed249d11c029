"""Runs the dolang interpreter on a .do file, or in command-line mode when no file is given. Also uses error handling
context manager. Called from the dolang console script.

Python version must be >=3.8.
"""

import argparse
import os
import sys

from dolang.lang.error import ErrorHandler
from dolang.lang.session import Session
from dolang.lang.shell import Shell


def main(argv=None):
    """Runs dolang interpreter. Called from dolang console script."""
    assert sys.version_info >= (3, 8), "dolang cannot be run with python < 3.8"

    parser = argparse.ArgumentParser(prog="dolang")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-v", "--verbose", help="print every function and method call", action="store_true")
    parser.add_argument("--no-color", help="disable colored error output", action="store_true")
    args = parser.parse_args(argv)

    if args.no_color:
        os.environ["NO_COLOR"] = "1"  # also read by termcolor when formatting error messages
    color = "NO_COLOR" not in os.environ

    with ErrorHandler(verbose=args.verbose, color=color) as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)
            sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
