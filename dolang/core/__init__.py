"""Lexer, parser, scopes, runtime values and evaluator."""
