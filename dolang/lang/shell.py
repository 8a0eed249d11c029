"""Handles interactive/command-line mode for the dolang interpreter. Uses cmd as backend."""

import cmd

from dolang.core.values import NIL, display, equals


class Shell(cmd.Cmd):
    """dolang interpreter shell."""
    intro = "dolang interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0
        self._start_num = 0

    def default(self, line):
        """Executes arbitrary dolang statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if not self._tmp_line:
                self._start_num = self.line_num  # first line of a continued unit
            line = self._tmp_line + line + "\n"

            if self.sess.needs_continuation(line):
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.add(line, self._start_num)
            self.sess.run()

            if self.sess.results:
                result = self.sess.pop()
                if not equals(result, NIL):
                    print(display(result))

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the dolang interpreter!\n\n"
              "Statements end with ';' and blocks are written DO ... END. Try typing \n"
              "'LET x = 1;', then 'DEF inc(n) DO RETURN n + 1; END', then 'inc(x);'.\n"
              "Objects are created with 'OBJECT name DO LET field = 1; END' and their \n"
              "methods receive the object as their first argument.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
