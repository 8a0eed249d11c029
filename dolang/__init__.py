"""dolang: a small dynamically-typed scripting language.

Basic program flow:
    1. Lexer (core/lexer.py): source text -> list of Tokens
    2. Parser (core/parser.py): Tokens -> immutable AST (core/ast.py)
    3. Evaluator (core/evaluator.py): walks the AST against a chain of Scopes (core/scope.py), producing runtime
       values (core/values.py)

lang/ wraps the core with natives, error reporting, sessions and the interactive shell.
"""
