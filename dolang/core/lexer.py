"""Character-level lexer for dolang. Produces an ordered list of Tokens from source text, skipping whitespace and line
comments. Tokens only carry their type and the exact source substring: escape sequences in character/string literals
are decoded later, by the parser.

Token grammar:

```
identifier ::= [A-Za-z_] [A-Za-z0-9_-]*
number     ::= [+-]? [0-9]+ ('.' [0-9]+)? ([eE] [+-]? [0-9]+)?   ; DECIMAL iff there is a fractional part
character  ::= ['] ([^'\\n\\r\\\\] | escape) [']
string     ::= '"' ([^"\\n\\r\\\\] | escape)* '"'
escape     ::= '\\' [bnrt'"\\]
operator   ::= [<>!=] '='? | any other single character that is not alphanumeric, a quote or whitespace
comment    ::= '//' [^\\n]*
```
"""

import re
from enum import Enum
from typing import NamedTuple

from dolang.lang.error import LexError


class TokenType(Enum):
    IDENTIFIER = "IDENTIFIER"
    INTEGER = "INTEGER"
    DECIMAL = "DECIMAL"
    CHARACTER = "CHARACTER"
    STRING = "STRING"
    OPERATOR = "OPERATOR"


class Token(NamedTuple):
    type: TokenType
    literal: str


class Lexer:
    """Lexes a source string. lex() repeatedly skips whitespace/comments and delegates to lex_token(), which decides
    the type of the next token from its first character(s).
    """
    WHITESPACE = "[ \b\n\r\t]"
    ESCAPES = "[bnrt'\"\\\\]"

    def __init__(self, source):
        self.source = source
        self.index = 0   # current position in source
        self.length = 0  # number of characters matched since last emit

        self.offsets = []  # start offset of every emitted token, parallel to the returned token list

    def lex(self):
        """Returns the list of Tokens in self.source. Raises a LexError on the first malformed token."""
        tokens = []
        while self.has(0):
            if self.peek(Lexer.WHITESPACE):
                self.lex_whitespace()
            elif self.peek("/", "/"):
                self.lex_comment()
            else:
                self.offsets.append(self.index)
                tokens.append(self.lex_token())
        return tokens

    def lex_whitespace(self):
        while self.match(Lexer.WHITESPACE):
            pass
        self.emit()

    def lex_comment(self):
        """Comments run up to (but not including) the end of the line."""
        self.match("/", "/")
        while self.has(0) and not self.peek("\n"):
            self.match(".")  # '.' never matches \n, but \n already stops the loop
        self.emit()

    def lex_token(self):
        if self.peek("[A-Za-z_]"):
            return self.lex_identifier()
        elif self.peek("[+-]", "[0-9]") or self.peek("[0-9]"):
            return self.lex_number()
        elif self.peek("'"):
            return self.lex_character()
        elif self.peek("\""):
            return self.lex_string()
        return self.lex_operator()

    def lex_identifier(self):
        self.match("[A-Za-z_]")
        while self.match("[A-Za-z0-9_-]"):
            pass
        return Token(TokenType.IDENTIFIER, self.emit())

    def lex_number(self):
        token_type = TokenType.INTEGER

        self.match("[+-]")
        while self.match("[0-9]"):
            pass

        if self.match("\\.", "[0-9]"):  # a '.' not followed by a digit is left for the operator lexer
            token_type = TokenType.DECIMAL
            while self.match("[0-9]"):
                pass

        if self.match("[eE]"):
            self.match("[+-]")
            if not self.match("[0-9]"):
                raise LexError("missing exponent digits in '{}'", self.index, self.pending())
            while self.match("[0-9]"):
                pass

        return Token(token_type, self.emit())

    def lex_character(self):
        self.match("'")

        if self.match("\\\\"):
            self.lex_escape()
        elif not self.match("[^'\n\r\\\\]"):
            if self.has(0) and not self.peek("[\n\r]"):
                raise LexError("invalid character literal '{}'", self.index, self.pending())
            raise LexError("unterminated character literal '{}'", self.index, self.pending())

        if not self.match("'"):
            raise LexError("unterminated character literal '{}'", self.index, self.pending())
        return Token(TokenType.CHARACTER, self.emit())

    def lex_string(self):
        self.match("\"")

        while self.has(0) and not self.peek("\""):
            if self.match("\\\\"):
                self.lex_escape()
            elif not self.match("[^\"\n\r\\\\]"):
                break  # newline inside string

        if not self.match("\""):
            raise LexError("unterminated string literal '{}'", self.index, self.pending())
        return Token(TokenType.STRING, self.emit())

    def lex_escape(self):
        """Assumes the backslash has already been matched."""
        if not self.match(Lexer.ESCAPES):
            sequence = "\\" + self.source[self.index:self.index + 1]
            raise LexError("invalid escape sequence '{}'", self.index, sequence)

    def lex_operator(self):
        if self.match("[<>!=]"):
            self.match("=")
        elif not self.match("[^A-Za-z_0-9'\" \b\n\r\t]"):
            raise LexError("illegal character '{}'", self.index, self.source[self.index])
        return Token(TokenType.OPERATOR, self.emit())

    def has(self, offset):
        """Whether there is a character at self.index + offset."""
        return self.index + offset < len(self.source)

    def peek(self, *patterns):
        """Whether the next characters match their corresponding patterns. Each pattern is a regex matching ONE
        character, e.g. peek("/", "/") matches the next two characters.
        """
        if not self.has(len(patterns) - 1):
            return False
        for offset, pattern in enumerate(patterns):
            if not re.fullmatch(pattern, self.source[self.index + offset]):
                return False
        return True

    def match(self, *patterns):
        """Equivalent to peek, but also advances past the matched characters."""
        matched = self.peek(*patterns)
        if matched:
            self.index += len(patterns)
            self.length += len(patterns)
        return matched

    def pending(self):
        """Characters matched since the last emit (used in error messages)."""
        return self.source[self.index - self.length:self.index]

    def emit(self):
        """Returns the literal built by all characters matched since the last emit, resetting for the next token."""
        literal = self.pending()
        self.length = 0
        return literal


def lex(source):
    """Returns the list of Tokens in source."""
    return Lexer(source).lex()
