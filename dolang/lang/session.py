"""Session control for dolang. Drives source text through lexing, parsing and evaluation, either for a whole file or
for units typed into the command-line shell. Definitions persist for the lifetime of the session.
"""

from dolang.core.evaluator import Evaluator
from dolang.core.lexer import Lexer, TokenType
from dolang.core.parser import Parser
from dolang.lang import environment
from dolang.lang.error import GenericException, LexError, ParseError


class Session:
    """Governs a dolang session: one root scope shared by every unit added to it."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line=False, console=print):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.evaluator = Evaluator(environment.scope(console), error_handler)
        self.to_exec = {}  # dict of line num: (source, Source AST) to execute
        self.results = []  # values of executed units, in order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            self.add(source, 1)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def needs_continuation(text):
        """Whether text is an unfinished unit: a DO block is still open, or the last token doesn't end a statement.
        Text that doesn't lex is considered finished so that the error surfaces.
        """
        try:
            tokens = Lexer(text).lex()
        except LexError:
            return False

        if not tokens:
            return False

        keywords = [token.literal for token in tokens if token.type is TokenType.IDENTIFIER]
        depth = keywords.count("DO") - keywords.count("END")
        return depth > 0 or tokens[-1].literal not in (";", "END")

    @staticmethod
    def parse(source):
        """Lexes and parses source as a whole program. Parse errors are located in source via the lexer's offsets."""
        lexer = Lexer(source)
        tokens = lexer.lex()

        try:
            return Parser(tokens).parse("source")
        except ParseError as error:
            if error.index < len(lexer.offsets):
                error.location = lexer.offsets[error.index]
            else:
                error.location = len(source.rstrip())
            raise

    def add(self, source, line_num=1):
        """Parses source and queues it for execution. Evaluation is delayed until run is called."""
        self.error_handler.register_line(self.path, source, line_num)  # in case error is raised

        self.to_exec[line_num] = (source, Session.parse(source))

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Runs this session's queued units in order, appending each result to self.results. Will raise any errors
        that are encountered.
        """
        for line_num, (source, tree) in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, source, line_num)

            try:
                self.results.append(self.evaluator.evaluate(tree))
            finally:
                if self.cmd_line:
                    del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

        if not self.cmd_line:
            self.to_exec = {}

    def pop(self):
        """Returns and removes the latest result."""
        return self.results.pop()
