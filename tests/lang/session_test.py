import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

from dolang.core.values import Primitive, equals
from dolang.lang.error import DuplicateBinding, ErrorHandler, GenericException, LexError, ParseError
from dolang.lang.session import Session
from dolang.lang.shell import Shell
from dolang.main import main

PLAIN = {"NO_COLOR": "1", "ANSI_COLORS_DISABLED": "1"}

PROGRAM = """
// prints 0, 1, 2 then the total
DEF total(items) DO
    LET sum = 0;
    FOR item IN items DO
        print(item);
        sum = sum + item;
    END
    RETURN sum;
END

LET numbers = range(0, 3);
print("total: " + total(numbers));
total(list(1, 2));
"""


def write_program(source):
    file = tempfile.NamedTemporaryFile("w", suffix=".do", delete=False)
    with file:
        file.write(source)
    return file.name


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.output = []
        self.path = write_program(PROGRAM)

    def tearDown(self):
        os.remove(self.path)

    def test_file(self):
        sess = Session(ErrorHandler(), self.path, console=self.output.append)
        sess.run()

        self.assertEqual(["0", "1", "2", "total: 3", "1", "2"], self.output)
        self.assertTrue(equals(Primitive(3), sess.pop()))
        self.assertEqual({}, sess.to_exec)

    def test_missing_file(self):
        self.assertRaises(GenericException, Session, ErrorHandler(), self.path + ".missing")

    def test_reserved_filename(self):
        self.assertRaises(GenericException, Session, ErrorHandler(), Session.SH_FILE, cmd_line=False)

    def test_command_line(self):
        handler = ErrorHandler()
        sess = Session(handler, Session.SH_FILE, cmd_line=True, console=self.output.append)
        self.assertFalse(handler.fatal)

        sess.add("LET x = 1;", 1)
        sess.run()
        sess.add("x = x + 1;", 2)
        sess.add("log(x);", 3)
        sess.run()

        self.assertEqual(["log: 2"], self.output)
        self.assertEqual({}, sess.to_exec)
        self.assertEqual(3, len(sess.results))

    def test_definitions_persist_after_error(self):
        sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)
        sess.add("LET x = 1;", 1)
        sess.run()

        sess.add("LET x = 2;", 2)
        self.assertRaises(DuplicateBinding, sess.run)
        self.assertEqual({}, sess.to_exec)

    def test_parse_location(self):
        cases = {
            "LET x = 5 6;": 10,
            "LET x = 5": 9,
            "LET x = 5   \n": 9,
        }
        for case, expected in cases.items():
            with self.assertRaises(ParseError) as context:
                Session.parse(case)
            self.assertEqual(expected, context.exception.offset, case)

        self.assertRaises(LexError, Session.parse, "\"unterminated")

    def test_needs_continuation(self):
        should_pass = ["DEF f() DO", "IF x DO\nRETURN 1;", "LET x = 1", "x"]
        for case in should_pass:
            self.assertTrue(Session.needs_continuation(case), case)

        should_fail = ["", "   ", "// comment", "LET x = 1;", "DEF f() DO END", "IF x DO y; END", "\"open"]
        for case in should_fail:
            self.assertFalse(Session.needs_continuation(case), case)


@mock.patch.dict(os.environ, PLAIN)
class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler(color=False), Session.SH_FILE, cmd_line=True))

    def send(self, *lines):
        output = io.StringIO()
        with redirect_stdout(output):
            for line in lines:
                self.shell.onecmd(line)
        return output.getvalue()

    def test_result(self):
        self.assertEqual("3\n", self.send("1 + 2;"))
        self.assertEqual("", self.send("LET x = NIL;"))

    def test_continuation(self):
        self.assertEqual("", self.send("DEF f() DO"))
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)

        self.send("RETURN \"done\";", "END")
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)
        self.assertEqual("done\n", self.send("f();"))

    def test_error_recovers(self):
        output = self.send("undefined;")
        self.assertIn("error: 'undefined' is not defined", output)
        self.assertEqual("2\n", self.send("1 + 1;"))

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertEqual("", self.send(""))


@mock.patch.dict(os.environ, PLAIN)
class MainTestCase(unittest.TestCase):

    def test_file(self):
        path = write_program("print(\"hello\");")
        try:
            output = io.StringIO()
            with redirect_stdout(output):
                main([path, "--no-color"])
            self.assertEqual("hello\n", output.getvalue())
        finally:
            os.remove(path)

    def test_error_exits(self):
        path = write_program("LET x = 1;\nLET x = 2;")
        try:
            output = io.StringIO()
            with redirect_stdout(output), self.assertRaises(SystemExit) as context:
                main([path, "--no-color"])
            self.assertEqual(1, context.exception.code)
            self.assertIn("error: 'x' is already defined in this scope", output.getvalue())
        finally:
            os.remove(path)

    def test_verbose(self):
        path = write_program("DEF f(n) DO RETURN n; END f(1);")
        try:
            output = io.StringIO()
            with redirect_stdout(output):
                main([path, "--verbose", "--no-color"])
            self.assertEqual("[call] f(1)\n", output.getvalue())
        finally:
            os.remove(path)


if __name__ == '__main__':
    unittest.main()
