"""Native functions available to every dolang program. scope() builds the root Scope the evaluator starts from.

Natives take the full argument list. When called as a method, the receiver is the first argument: `method` below
drops it, `function` does not.
"""

from dolang.core.scope import Scope
from dolang.core.values import NIL, Function, ObjectValue, Primitive, display, kind
from dolang.lang.error import ArityMismatch, EvaluateError, TypeMismatch


def arity(name, arguments, expected):
    """Raises an ArityMismatch unless exactly expected arguments were passed."""
    if len(arguments) != expected:
        raise ArityMismatch(f"'{{}}' expects {expected} argument(s), got {len(arguments)}", exprs=name)


def scope(console=print):
    """Returns a fresh root Scope with all natives defined. console receives every line the natives print."""

    def debug(arguments):
        """Prints the raw representation of a value."""
        arity("debug", arguments, 1)
        console(repr(arguments[0]))
        return NIL

    def print_(arguments):
        """Prints the display form of a value."""
        arity("print", arguments, 1)
        console(display(arguments[0]))
        return NIL

    def log(arguments):
        """Prints the display form of a value and returns it unchanged."""
        arity("log", arguments, 1)
        console("log: " + display(arguments[0]))
        return arguments[0]

    root = Scope()
    root.define("debug", Function("debug", debug))
    root.define("print", Function("print", print_))
    root.define("log", Function("log", log))
    root.define("list", Function("list", make_list))
    root.define("range", Function("range", make_range))

    # fixtures for exercising variables, functions, objects and prototypes
    root.define("variable", Primitive("variable"))
    root.define("function", Function("function", function))

    prototype = ObjectValue("Prototype", Scope())
    prototype.scope.define("inherited_property", Primitive("inherited_property"))
    prototype.scope.define("inherited_method", Function("inherited_method", method))

    obj = ObjectValue("Object", Scope())
    obj.scope.define("prototype", prototype)
    obj.scope.define("property", Primitive("property"))
    obj.scope.define("method", Function("method", method))
    root.define("object", obj)

    return root


def make_list(arguments):
    """Returns a list of all arguments."""
    return Primitive(list(arguments))


def make_range(arguments):
    """range(start, end): list of the integers from start (inclusive) to end (exclusive)."""
    arity("range", arguments, 2)

    start, end = arguments
    for argument in arguments:
        if kind(argument) != "integer":
            raise TypeMismatch("range expects integers, got '{}'", exprs=display(argument))

    if start.value > end.value:
        raise EvaluateError("range start '{}' is greater than its end", exprs=display(start))
    return Primitive([Primitive(value) for value in range(start.value, end.value)])


def function(arguments):
    """Returns a list of all arguments."""
    return Primitive(list(arguments))


def method(arguments):
    """Returns a list of all arguments except the receiver."""
    return Primitive(list(arguments[1:]))
