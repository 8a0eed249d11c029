"""Error handling for the dolang language. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every phase raises its own subclass: LexError (character offset), ParseError (offending token, or None at end of
input) and EvaluateError (offending AST node). None of them are recovered from inside the phase that raised them.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a dolang error. exprs are the
    offending snippets, formatted into the {} slots of msg.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(str(expr), attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = str(exprs[0]) if exprs else ""

        self.start = start
        self.end = end if end != -1 else start + max(len(self.expr), 1)  # needed for error display
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    @property
    def offset(self):
        """Character offset of the error in the registered source, or None if it can't be located."""
        return None


class LexError(GenericException):
    """Malformed token. offset is the index in the source where lexing stopped."""

    def __init__(self, msg, offset, exprs=None):
        super().__init__(msg, exprs, start=offset, end=offset + 1)
        self.position = offset

    @property
    def offset(self):
        return self.position


class ParseError(GenericException):
    """Structural violation. token is the offending Token, or None if input ended early; index is its position in
    the token stream, used to locate it through the lexer's offset table.
    """

    def __init__(self, msg, token, index, exprs=None):
        if exprs is None:
            exprs = token.literal if token is not None else "end of input"
        super().__init__(msg, exprs)

        self.token = token
        self.index = index
        self.location = None  # filled in by Session, which knows the token offsets

    @property
    def offset(self):
        return self.location


class EvaluateError(GenericException):
    """Runtime failure. ast is the node being evaluated when the error happened, if known."""

    def __init__(self, msg, ast=None, exprs=None):
        super().__init__(msg, exprs, diagnosis=False)
        self.ast = ast


class DuplicateBinding(EvaluateError):
    """A name was defined twice in the same scope."""


class UndefinedVariable(EvaluateError):
    """A name was looked up or assigned without being defined."""


class UndefinedProperty(EvaluateError):
    """A property is missing from an object and its prototype chain."""


class ArityMismatch(EvaluateError):
    """A function was called with the wrong number of arguments."""


class TypeMismatch(EvaluateError):
    """A value had the wrong runtime type for an operation."""


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom dolang errors."""
    ERROR = "red"
    STEP = "cyan"

    def __init__(self, fatal=True, verbose=False, color=True):
        self.fatal = fatal
        self.verbose = verbose  # whether register_step prints evaluation steps
        self.color = color
        self.traceback = {}

    def _colored(self, text, color=None, attrs=None):
        if not self.color:
            return text
        return colored(text, color, attrs=attrs)

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers source unit in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes source unit from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def register_step(self, kind, detail):
        """Prints a single evaluation step if running verbosely."""
        if self.verbose:
            step = self._colored(f"[{kind}] ", ErrorHandler.STEP, attrs=["bold"])
            print(step + self._colored(detail, attrs=["dark"]))

    @staticmethod
    def locate(source, offset):
        """Returns (line, line index, column) of offset in source. An offset past the end points just after the last
        character.
        """
        offset = max(0, min(offset, len(source)))
        line_start = source.rfind("\n", 0, offset) + 1
        line_end = source.find("\n", offset)
        if line_end == -1:
            line_end = len(source)
        return source[line_start:line_end], source.count("\n", 0, offset), offset - line_start

    def diagnose(self, error, source, first_line=1):
        """Returns offending line of source with the error span highlighted and bolded."""
        color = ErrorHandler.ERROR

        line, line_idx, col = ErrorHandler.locate(source, error.offset)
        end = min(max(col + error.end - error.start, col + 1), max(len(line), col + 1))

        diagnosis = f"  line {first_line + line_idx}:\n"
        diagnosis += "  " + line[:col]
        diagnosis += self._colored(line[col:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * col
        diagnosis += self._colored("^" + "~" * (end - col - 1), color, attrs=["bold"])

        return diagnosis

    def _located_source(self):
        """Most recently registered source unit, as (file, source, line_num), or None."""
        for file, (line, line_num) in reversed(list(self.traceback.items())):
            if line is not None:
                return file, line, line_num
        return None

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (source, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg
        else:
            error_msg = ""

        if error.internal:
            error_msg += self._colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += self._colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        located = self._located_source()
        if not error.internal and error.diagnosis and error.offset is not None and located:
            __, source, line_num = located
            print(self.diagnose(error, source, line_num))

        if self.fatal:
            sys.exit(1)
        self.traceback = {}  # if error occurred, reset traceback (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
