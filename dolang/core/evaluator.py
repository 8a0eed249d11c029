"""Tree-walking evaluator for dolang.

Statements evaluate to a Completion rather than a bare value: Completion(value, returning=True) is how RETURN unwinds
through IF/FOR blocks without using exceptions. Only a function call (Closure) turns a returning Completion back into
a plain value; one that reaches the top level is an error.

Scopes: the evaluator carries a single current Scope, swapped while a block, call or object body runs. Function
calls open a child of the function's defining scope, not of the caller's.
"""

from dataclasses import dataclass
from decimal import MAX_EMAX, MIN_EMIN, Context, Decimal
from typing import Optional

from dolang.core import ast
from dolang.core.scope import Scope
from dolang.core.values import NIL, Function, ObjectValue, Primitive, display, equals, kind
from dolang.lang.error import ArityMismatch, EvaluateError, TypeMismatch, UndefinedProperty, UndefinedVariable


@dataclass(frozen=True)
class Completion:
    value: object
    returning: bool = False
    origin: Optional[ast.Return] = None  # the RETURN that started unwinding


class Closure:
    """Body of a user-defined function: the DEF node plus the scope it was defined in."""

    def __init__(self, evaluator, definition, scope):
        self.evaluator = evaluator
        self.definition = definition
        self.scope = scope

    def __call__(self, arguments):
        parameters = self.definition.parameters
        if len(arguments) != len(parameters):
            msg = f"'{{}}' expects {len(parameters)} argument(s), got {len(arguments)}"
            raise ArityMismatch(msg, self.definition, self.definition.name)

        scope = self.scope.child()
        for name, argument in zip(parameters, arguments):
            scope.define(name, argument)

        completion = self.evaluator.execute_block(self.definition.body, scope)
        return completion.value if completion.returning else NIL  # falling off the end yields NIL

    def __repr__(self):
        return f"Closure({self.definition.name}({', '.join(self.definition.parameters)}))"


class Evaluator:
    """Evaluates AST nodes against self.scope. Expressions produce RuntimeValues, statements produce Completions."""
    ARITHMETIC = {"+": "add", "-": "subtract", "*": "multiply", "/": "divide"}
    COMPARISON = {
        "<": lambda left, right: left < right,
        "<=": lambda left, right: left <= right,
        ">": lambda left, right: left > right,
        ">=": lambda left, right: left >= right,
    }
    ORDERED = ("integer", "decimal", "string", "character")

    def __init__(self, scope, error_handler=None):
        self.scope = scope
        self.error_handler = error_handler  # optional, used to trace calls

    def evaluate(self, node):
        """Returns the RuntimeValue of any node. A statement is executed in the current scope."""
        result = self.visit(node)
        if isinstance(result, Completion):
            return self.complete(result)
        return result

    def visit(self, node):
        try:
            return getattr(self, "visit_" + node.kind)(node)
        except EvaluateError as error:
            if error.ast is None:
                error.ast = node
            raise

    def execute(self, statement):
        return self.visit(statement)

    def execute_block(self, statements, scope):
        """Executes statements in scope, stopping at the first returning Completion. An empty block completes with
        NIL.
        """
        previous, self.scope = self.scope, scope
        try:
            completion = Completion(NIL)
            for statement in statements:
                completion = self.execute(statement)
                if completion.returning:
                    break
            return completion
        finally:
            self.scope = previous

    @staticmethod
    def complete(completion):
        """Unwraps a top-level Completion. RETURN is only valid inside a function."""
        if completion.returning:
            raise EvaluateError("RETURN outside of a function", completion.origin)
        return completion.value

    def require(self, value, *kinds):
        """Returns value if its kind is one of kinds, otherwise raises a TypeMismatch."""
        if kind(value) not in kinds:
            raise TypeMismatch(f"expected {' or '.join(kinds)}, got {kind(value)} '{{}}'", exprs=display(value))
        return value

    def trace(self, step, name, arguments):
        if self.error_handler is not None:
            self.error_handler.register_step(step, f"{name}({', '.join(display(arg) for arg in arguments)})")

    def visit_Source(self, node):
        value = NIL
        for statement in node.statements:
            value = self.complete(self.execute(statement))
        return value

    def visit_Let(self, node):
        value = self.evaluate(node.value) if node.value is not None else NIL
        self.scope.define(node.name, value)
        return Completion(value)

    def visit_Def(self, node):
        function = Function(node.name, Closure(self, node, self.scope))
        self.scope.define(node.name, function)
        return Completion(function)

    def visit_If(self, node):
        condition = self.require(self.evaluate(node.condition), "boolean")
        body = node.then_body if condition.value else node.else_body
        return self.execute_block(body, self.scope.child())

    def visit_For(self, node):
        iterable = self.require(self.evaluate(node.iterable), "list")

        for element in list(iterable.value):
            scope = self.scope.child()
            scope.define(node.name, element)

            completion = self.execute_block(node.body, scope)
            if completion.returning:
                return completion
        return Completion(NIL)

    def visit_Return(self, node):
        value = self.evaluate(node.value) if node.value is not None else NIL
        return Completion(value, returning=True, origin=node)

    def visit_Expression(self, node):
        return Completion(self.evaluate(node.expression))

    def visit_Assignment(self, node):
        value = self.evaluate(node.value)
        target = node.expression

        if isinstance(target, ast.Variable):
            self.scope.assign(target.name, value)
        elif isinstance(target, ast.Property):
            receiver = self.require(self.evaluate(target.receiver), "object")
            receiver.scope.bind(target.name, value)
        else:
            raise EvaluateError("cannot assign to '{}'", node, target.kind)
        return Completion(value)

    def visit_Literal(self, node):
        return Primitive(node.value)

    def visit_Group(self, node):
        return self.evaluate(node.expression)

    def visit_Binary(self, node):
        operator = node.operator
        if operator in ("AND", "OR"):
            left = self.require(self.evaluate(node.left), "boolean")
            if left.value == (operator == "OR"):  # short-circuit
                return left
            return self.require(self.evaluate(node.right), "boolean")

        left = self.evaluate(node.left)
        right = self.evaluate(node.right)

        if operator == "==":
            return Primitive(equals(left, right))
        elif operator == "!=":
            return Primitive(not equals(left, right))
        elif operator in Evaluator.COMPARISON:
            self.require(left, *Evaluator.ORDERED)
            if kind(left) != kind(right):
                raise TypeMismatch(f"cannot compare {kind(left)} with {kind(right)} using '{{}}'", exprs=operator)
            return Primitive(Evaluator.COMPARISON[operator](left.value, right.value))
        elif operator in Evaluator.ARITHMETIC:
            return getattr(self, Evaluator.ARITHMETIC[operator])(left, right)
        raise EvaluateError("unknown operator '{}'", node, operator)

    def numbers(self, left, right, operator):
        """Returns the raw values of left and right, which must both be integers or both be decimals."""
        self.require(left, "integer", "decimal")
        if kind(left) != kind(right):
            raise TypeMismatch(f"cannot apply '{{}}' to {kind(left)} and {kind(right)}", exprs=operator)
        return left.value, right.value

    def add(self, left, right):
        if kind(left) == "string" or kind(right) == "string":
            return Primitive(display(left) + display(right))
        left, right = self.numbers(left, right, "+")
        if isinstance(left, Decimal):
            return Primitive(exact(left, right).add(left, right))
        return Primitive(left + right)

    def subtract(self, left, right):
        left, right = self.numbers(left, right, "-")
        if isinstance(left, Decimal):
            return Primitive(exact(left, right).subtract(left, right))
        return Primitive(left - right)

    def multiply(self, left, right):
        left, right = self.numbers(left, right, "*")
        if isinstance(left, Decimal):
            return Primitive(exact(left, right).multiply(left, right))
        return Primitive(left * right)

    def divide(self, left, right):
        left, right = self.numbers(left, right, "/")
        if right == 0:
            raise EvaluateError("division by zero in '{}'", exprs=f"{left} / {right}")

        if isinstance(left, Decimal):
            return Primitive(divide_decimal(left, right))

        quotient = abs(left) // abs(right)  # truncates toward zero
        return Primitive(quotient if (left < 0) == (right < 0) else -quotient)

    def visit_Variable(self, node):
        value = self.scope.resolve(node.name)
        if value is None:
            raise UndefinedVariable("'{}' is not defined", node, node.name)
        return value

    def visit_Property(self, node):
        receiver = self.require(self.evaluate(node.receiver), "object")
        value = receiver.lookup(node.name)
        if value is None:
            raise UndefinedProperty("'{}' is not a property of " + display_name(receiver), node, node.name)
        return value

    def visit_Function(self, node):
        function = self.scope.resolve(node.name)
        if function is None:
            raise UndefinedVariable("function '{}' is not defined", node, node.name)
        elif not isinstance(function, Function):
            raise TypeMismatch("'{}' is not a function", node, node.name)

        arguments = [self.evaluate(argument) for argument in node.arguments]
        self.trace("call", node.name, arguments)
        return function(arguments)

    def visit_Method(self, node):
        receiver = self.require(self.evaluate(node.receiver), "object")
        method = receiver.lookup(node.name)
        if method is None:
            raise UndefinedProperty("'{}' is not a method of " + display_name(receiver), node, node.name)
        elif not isinstance(method, Function):
            raise TypeMismatch("'{}' is not a method", node, node.name)

        arguments = [self.evaluate(argument) for argument in node.arguments]
        self.trace("method", f"{display_name(receiver)}.{node.name}", arguments)
        return method([receiver] + arguments)  # the receiver is always the first argument

    def visit_ObjectExpr(self, node):
        obj = ObjectValue(node.name, Scope())  # no parent: members never see the enclosing scope

        previous, self.scope = self.scope, obj.scope
        try:
            for member in node.fields + node.methods:
                self.execute(member)
        finally:
            self.scope = previous

        if node.name is not None:
            self.scope.define(node.name, obj)
        return obj


def display_name(obj):
    return obj.name if obj.name else "anonymous object"


def exact(*operands):
    """Returns a decimal Context with enough digits that adding, subtracting or multiplying operands never rounds."""
    digits = sum(len(operand.as_tuple().digits) for operand in operands)
    spread = max(operand.adjusted() for operand in operands) - min(operand.as_tuple().exponent for operand in operands)
    return Context(prec=digits + spread + 2, Emax=MAX_EMAX, Emin=MIN_EMIN)


def unscaled(value):
    """Splits a Decimal into its signed integer coefficient and exponent."""
    exponent = value.as_tuple().exponent
    return int(value.scaleb(-exponent, exact(value))), exponent


def divide_decimal(dividend, divisor):
    """Exact quotient of two Decimals, rounded half-even to the dividend's scale. Works on integer coefficients so
    that no digits are lost however long the operands are.
    """
    numerator, scale = unscaled(dividend)
    denominator, exponent = unscaled(divisor)

    # dividend / divisor / 10**scale == numerator / (denominator * 10**exponent)
    if exponent >= 0:
        denominator *= 10 ** exponent
    else:
        numerator *= 10 ** -exponent

    negative = (numerator < 0) != (denominator < 0)
    numerator, denominator = abs(numerator), abs(denominator)

    quotient, remainder = divmod(numerator, denominator)
    if 2 * remainder > denominator or (2 * remainder == denominator and quotient % 2 == 1):
        quotient += 1

    result = Decimal(-quotient if negative else quotient)
    return result.scaleb(scale, exact(result))
