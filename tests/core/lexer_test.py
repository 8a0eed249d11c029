import unittest

from dolang.core.lexer import Lexer, Token, TokenType, lex
from dolang.lang.error import LexError


def tokens(*pairs):
    return [Token(token_type, literal) for token_type, literal in pairs]


class LexerTestCase(unittest.TestCase):

    def test_identifier(self):
        should_pass = ["getName", "_name", "thelongestidentifiernameyouhaveeverseen", "x-y", "a1_b2", "LET"]
        for case in should_pass:
            self.assertEqual(tokens((TokenType.IDENTIFIER, case)), lex(case), case)

    def test_number(self):
        should_pass = {
            "1": TokenType.INTEGER,
            "-1": TokenType.INTEGER,
            "+12": TokenType.INTEGER,
            "1e10": TokenType.INTEGER,
            "1E-2": TokenType.INTEGER,
            "1.0": TokenType.DECIMAL,
            "-3.25": TokenType.DECIMAL,
            "1.5e+3": TokenType.DECIMAL,
        }
        for case, token_type in should_pass.items():
            self.assertEqual(tokens((token_type, case)), lex(case), case)

        should_raise = ["1e", "1e+", "2.5E"]
        for case in should_raise:
            self.assertRaises(LexError, lex, case)

    def test_number_boundaries(self):
        cases = {
            "1.": tokens((TokenType.INTEGER, "1"), (TokenType.OPERATOR, ".")),
            ".5": tokens((TokenType.OPERATOR, "."), (TokenType.INTEGER, "5")),
            "- 1": tokens((TokenType.OPERATOR, "-"), (TokenType.INTEGER, "1")),
            "1-2": tokens((TokenType.INTEGER, "1"), (TokenType.INTEGER, "-2")),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, lex(case), case)

    def test_character(self):
        should_pass = ["'c'", "'\\n'", "'\\''", "'\"'", "'\\\\'", "' '"]
        for case in should_pass:
            self.assertEqual(tokens((TokenType.CHARACTER, case)), lex(case), case)

        should_raise = ["''", "'abc'", "'c", "'", "'\n'", "'\\q'"]
        for case in should_raise:
            self.assertRaises(LexError, lex, case)

    def test_string(self):
        should_pass = ["\"\"", "\"abc\"", "\"Hello,\\nWorld\"", "\"say \\\"hi\\\"\"", "\"'\""]
        for case in should_pass:
            self.assertEqual(tokens((TokenType.STRING, case)), lex(case), case)

        should_raise = ["\"abc", "\"abc\ndef\"", "\"bad \\escape\"", "\""]
        for case in should_raise:
            self.assertRaises(LexError, lex, case)

    def test_operator(self):
        should_pass = ["(", "+", ";", "<", "<=", ">=", "==", "!=", "!", "=", "$", "."]
        for case in should_pass:
            self.assertEqual(tokens((TokenType.OPERATOR, case)), lex(case), case)

        self.assertEqual(tokens((TokenType.OPERATOR, "=="), (TokenType.OPERATOR, "=")), lex("==="))

    def test_whitespace_and_comments(self):
        cases = {
            "": [],
            " \t\r\n\b": [],
            "// only a comment": [],
            "1 // one\n2": tokens((TokenType.INTEGER, "1"), (TokenType.INTEGER, "2")),
            "x//comment": tokens((TokenType.IDENTIFIER, "x")),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, lex(case), repr(case))

    def test_expression(self):
        self.assertEqual(
            tokens((TokenType.INTEGER, "1"), (TokenType.OPERATOR, "+"), (TokenType.INTEGER, "2")),
            lex("1 + 2")
        )

    def test_program(self):
        expected = tokens(
            (TokenType.IDENTIFIER, "LET"), (TokenType.IDENTIFIER, "x"), (TokenType.OPERATOR, "="),
            (TokenType.INTEGER, "5"), (TokenType.OPERATOR, ";"),
            (TokenType.IDENTIFIER, "print"), (TokenType.OPERATOR, "("), (TokenType.STRING, "\"x\""),
            (TokenType.OPERATOR, ")"), (TokenType.OPERATOR, ";"),
        )
        self.assertEqual(expected, lex("LET x = 5;\nprint(\"x\");"))

    def test_offsets(self):
        lexer = Lexer("LET x = 5;")
        lexer.lex()
        self.assertEqual([0, 4, 6, 8, 9], lexer.offsets)

    def test_error_offset(self):
        with self.assertRaises(LexError) as context:
            lex("LET s = \"abc")
        self.assertEqual(12, context.exception.offset)


if __name__ == '__main__':
    unittest.main()
