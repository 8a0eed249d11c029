"""Recursive descent parser for dolang. Each grammar rule has a dedicated method and references to other rules are
method calls; operator precedence is encoded by the layering of the expression rules (lowest first).

```
source         ::= statement*
statement      ::= let | def | if | for | return | expr_or_assign
let            ::= 'LET' identifier ('=' expr)? ';'
def            ::= 'DEF' identifier '(' (identifier (',' identifier)*)? ')' 'DO' statement* 'END'
if             ::= 'IF' expr 'DO' statement* ('ELSE' statement*)? 'END'
for            ::= 'FOR' identifier 'IN' expr 'DO' statement* 'END'
return         ::= 'RETURN' expr? ('IF' expr)? ';'          ; RETURN x IF c; == IF c DO RETURN x; END
expr_or_assign ::= expr ('=' expr)? ';'                      ; target must be a Variable or Property
expr           ::= logical
logical        ::= comparison (('AND' | 'OR') comparison)*
comparison     ::= additive (('<' | '<=' | '>' | '>=' | '==' | '!=') additive)*
additive       ::= multiplicative (('+' | '-') multiplicative)*
multiplicative ::= secondary (('*' | '/') secondary)*
secondary      ::= primary ('.' identifier ('(' (expr (',' expr)*)? ')')?)*
primary        ::= literal | '(' expr ')' | object_expr | identifier ('(' (expr (',' expr)*)? ')')?
object_expr    ::= 'OBJECT' identifier? 'DO' (let | def)* 'END'
literal        ::= 'NIL' | 'TRUE' | 'FALSE' | INTEGER | DECIMAL | CHARACTER | STRING
```

There is no error recovery: the first structural violation raises a ParseError.
"""

import re
from decimal import Decimal

from dolang.core import ast
from dolang.core.lexer import TokenType
from dolang.core.values import Character
from dolang.lang.error import ParseError


ESCAPES = {"b": "\b", "n": "\n", "r": "\r", "t": "\t", "'": "'", "\"": "\"", "\\": "\\"}
ESCAPE_PATTERN = re.compile(r"\\([bnrt'\"\\])")


def decode(literal):
    """Strips the surrounding quotes of a character/string literal and decodes its escape sequences."""
    return ESCAPE_PATTERN.sub(lambda match: ESCAPES[match.group(1)], literal[1:-1])


class TokenStream:
    """Cursor over a token list. Patterns are either a TokenType, matching tokens of that type, or a str, matching
    tokens with that literal.
    """

    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.index = 0

    def has(self, offset):
        """Whether there is a token at self.index + offset."""
        return self.index + offset < len(self.tokens)

    def get(self, offset):
        """Returns the token at self.index + offset."""
        return self.tokens[self.index + offset]

    def next(self):
        """Returns the next token, or None at end of input."""
        return self.tokens[self.index] if self.has(0) else None

    def peek(self, *patterns):
        if not self.has(len(patterns) - 1):
            return False
        for offset, pattern in enumerate(patterns):
            token = self.tokens[self.index + offset]
            if isinstance(pattern, TokenType):
                if token.type is not pattern:
                    return False
            elif token.literal != pattern:
                return False
        return True

    def match(self, *patterns):
        """Equivalent to peek, but also advances past the matched tokens."""
        matched = self.peek(*patterns)
        if matched:
            self.index += len(patterns)
        return matched


class Parser:
    """Parses a list of Tokens into an AST for a given start rule."""
    RULES = {
        "source": "parse_source",
        "statement": "parse_statement",
        "stmt": "parse_statement",
        "expression": "parse_expression",
        "expr": "parse_expression",
    }
    LITERALS = (TokenType.INTEGER, TokenType.DECIMAL, TokenType.CHARACTER, TokenType.STRING)
    MAX_EXPONENT = 100000  # bound on the decimal exponent of numeric literals

    def __init__(self, tokens):
        self.tokens = TokenStream(tokens)

    def parse(self, rule="source"):
        """Parses the whole token list with rule. Leftover tokens are an error."""
        if rule not in Parser.RULES:
            raise ValueError(f"unknown rule '{rule}'")

        tree = getattr(self, Parser.RULES[rule])()
        if self.tokens.has(0):
            raise self.error("expected end of input, found '{}'")
        return tree

    def error(self, msg):
        """Returns a ParseError for the next token (or end of input). msg's {} is filled with the offending token."""
        return ParseError(msg, self.tokens.next(), self.tokens.index)

    def expect(self, pattern, description=None):
        """Matches pattern, returning the matched token's literal, or raises a ParseError."""
        if not self.tokens.match(pattern):
            expected = description if description else f"'{pattern}'"
            raise self.error(f"expected {expected}, found '{{}}'")
        return self.tokens.get(-1).literal

    def parse_source(self):
        statements = []
        while self.tokens.has(0):
            statements.append(self.parse_statement())
        return ast.Source(tuple(statements))

    def parse_statement(self):
        if self.tokens.peek("LET"):
            return self.parse_let()
        elif self.tokens.peek("DEF"):
            return self.parse_def()
        elif self.tokens.peek("IF"):
            return self.parse_if()
        elif self.tokens.peek("FOR"):
            return self.parse_for()
        elif self.tokens.peek("RETURN"):
            return self.parse_return()
        return self.parse_expression_or_assignment()

    def parse_block(self, *terminators):
        """Parses statements up to (not including) any of terminators."""
        statements = []
        while not any(self.tokens.peek(terminator) for terminator in terminators):
            if not self.tokens.has(0):
                raise self.error(f"expected {' or '.join(terminators)}, found '{{}}'")
            statements.append(self.parse_statement())
        return tuple(statements)

    def parse_let(self):
        self.expect("LET")
        name = self.expect(TokenType.IDENTIFIER, "identifier after LET")

        value = None
        if self.tokens.match("="):
            value = self.parse_expression()

        self.expect(";")
        return ast.Let(name, value)

    def parse_def(self):
        self.expect("DEF")
        name = self.expect(TokenType.IDENTIFIER, "function name after DEF")
        self.expect("(")

        parameters = []
        if self.tokens.match(TokenType.IDENTIFIER):
            parameters.append(self.tokens.get(-1).literal)
            while self.tokens.match(","):
                parameters.append(self.expect(TokenType.IDENTIFIER, "parameter name after ','"))
        self.expect(")")

        self.expect("DO")
        body = self.parse_block("END")
        self.expect("END")
        return ast.Def(name, tuple(parameters), body)

    def parse_if(self):
        self.expect("IF")
        condition = self.parse_expression()
        self.expect("DO")

        then_body = self.parse_block("ELSE", "END")
        else_body = ()
        if self.tokens.match("ELSE"):
            else_body = self.parse_block("END")

        self.expect("END")
        return ast.If(condition, then_body, else_body)

    def parse_for(self):
        self.expect("FOR")
        name = self.expect(TokenType.IDENTIFIER, "loop variable after FOR")
        self.expect("IN")
        iterable = self.parse_expression()

        self.expect("DO")
        body = self.parse_block("END")
        self.expect("END")
        return ast.For(name, iterable, body)

    def parse_return(self):
        self.expect("RETURN")

        value = None
        if not self.tokens.peek(";") and not self.tokens.peek("IF"):
            value = self.parse_expression()

        condition = None
        if self.tokens.match("IF"):
            condition = self.parse_expression()
        self.expect(";")

        if condition is not None:
            return ast.If(condition, (ast.Return(value),), ())
        return ast.Return(value)

    def parse_expression_or_assignment(self):
        expression = self.parse_expression()

        if self.tokens.peek("="):
            if not isinstance(expression, (ast.Variable, ast.Property)):
                raise self.error("invalid assignment target before '{}'")
            self.tokens.match("=")

            value = self.parse_expression()
            self.expect(";")
            return ast.Assignment(expression, value)

        self.expect(";")
        return ast.Expression(expression)

    def parse_expression(self):
        return self.parse_logical()

    def parse_binary(self, operand, *operators):
        """Left-associative chain of operand separated by any of operators."""
        expression = operand()
        while any(self.tokens.peek(operator) for operator in operators):
            operator = self.tokens.get(0).literal
            self.tokens.match(operator)
            expression = ast.Binary(operator, expression, operand())
        return expression

    def parse_logical(self):
        return self.parse_binary(self.parse_comparison, "AND", "OR")

    def parse_comparison(self):
        return self.parse_binary(self.parse_additive, "<", "<=", ">", ">=", "==", "!=")

    def parse_additive(self):
        return self.parse_binary(self.parse_multiplicative, "+", "-")

    def parse_multiplicative(self):
        return self.parse_binary(self.parse_secondary, "*", "/")

    def parse_secondary(self):
        expression = self.parse_primary()
        while self.tokens.match("."):
            name = self.expect(TokenType.IDENTIFIER, "property name after '.'")
            if self.tokens.peek("("):
                expression = ast.Method(expression, name, self.parse_arguments())
            else:
                expression = ast.Property(expression, name)
        return expression

    def parse_arguments(self):
        """'(' (expr (',' expr)*)? ')'. A trailing comma is an error."""
        self.expect("(")

        arguments = []
        if not self.tokens.peek(")"):
            arguments.append(self.parse_expression())
            while self.tokens.match(","):
                arguments.append(self.parse_expression())

        self.expect(")")
        return tuple(arguments)

    def parse_primary(self):
        if self.tokens.peek("NIL") or self.tokens.peek("TRUE") or self.tokens.peek("FALSE"):
            return self.parse_literal()
        elif any(self.tokens.peek(token_type) for token_type in Parser.LITERALS):
            return self.parse_literal()
        elif self.tokens.match("("):
            expression = self.parse_expression()
            self.expect(")")
            return ast.Group(expression)
        elif self.tokens.peek("OBJECT"):
            return self.parse_object()
        elif self.tokens.match(TokenType.IDENTIFIER):
            name = self.tokens.get(-1).literal
            if self.tokens.peek("("):
                return ast.Function(name, self.parse_arguments())
            return ast.Variable(name)
        raise self.error("expected an expression, found '{}'")

    def parse_literal(self):
        token = self.tokens.next()
        self.tokens.match(token.literal)

        if token.literal == "NIL":
            return ast.Literal(None)
        elif token.literal in ("TRUE", "FALSE"):
            return ast.Literal(token.literal == "TRUE")
        elif token.type in (TokenType.INTEGER, TokenType.DECIMAL):
            return ast.Literal(self.parse_number(token))
        elif token.type is TokenType.CHARACTER:
            return ast.Literal(Character(decode(token.literal)))
        return ast.Literal(decode(token.literal))

    def parse_object(self):
        self.expect("OBJECT")

        name = None
        if self.tokens.peek(TokenType.IDENTIFIER) and not self.tokens.peek("DO"):
            name = self.tokens.get(0).literal
            self.tokens.match(TokenType.IDENTIFIER)
        self.expect("DO")

        fields, methods = [], []
        while not self.tokens.peek("END"):
            if self.tokens.peek("LET"):
                fields.append(self.parse_let())
            elif self.tokens.peek("DEF"):
                methods.append(self.parse_def())
            else:
                raise self.error("expected LET, DEF or END in OBJECT, found '{}'")
        self.expect("END")

        return ast.ObjectExpr(name, tuple(fields), tuple(methods))

    def parse_number(self, token):
        """Returns the int or Decimal value of a numeric token. An INTEGER with an exponent must still be integral.
        Exponents are bounded so that a literal like 1e1000000000 cannot expand into an enormous number.
        """
        literal = token.literal
        if token.type is TokenType.INTEGER and "e" not in literal.lower():
            return int(literal)

        value = Decimal(literal)
        if abs(value.as_tuple().exponent) > Parser.MAX_EXPONENT:
            raise ParseError("exponent of '{}' is out of range", token, self.tokens.index - 1)
        elif token.type is TokenType.DECIMAL:
            return value
        elif value != value.to_integral_value():
            raise ParseError("integer literal '{}' has a fractional value", token, self.tokens.index - 1)
        return int(value)


def parse(tokens, rule="source"):
    """Returns the AST for tokens parsed with rule ('source', 'statement' or 'expression')."""
    return Parser(tokens).parse(rule)
