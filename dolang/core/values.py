"""Runtime values produced and consumed by the evaluator.

A RuntimeValue is exactly one of:
- Primitive: wraps None (NIL), bool, int, Decimal, Character, str, or a list of RuntimeValues
- Function: a name plus a callable taking a list of RuntimeValues (native, or a user-defined Closure)
- ObjectValue: an optional name plus the object's own Scope; its prototype is its own `prototype` member, if that
  member is an object

Python's own equality conflates some of these kinds (True == 1, 'a' == "a"), so language-level equality and
ordering go through kind()/equals() instead.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Optional


class Character(str):
    """Single character value. Distinct from a one character string."""
    __slots__ = ()

    def __repr__(self):
        return f"Character({str.__repr__(self)})"


class RuntimeValue:
    ...


@dataclass
class Primitive(RuntimeValue):
    value: Any = None


@dataclass(eq=False)
class Function(RuntimeValue):
    name: str
    definition: Callable = field(repr=False)

    def __call__(self, arguments):
        return self.definition(list(arguments))


@dataclass(eq=False)
class ObjectValue(RuntimeValue):
    name: Optional[str]
    scope: Any = field(repr=False)  # Scope

    PROTOTYPE = "prototype"

    @property
    def prototype(self):
        """This object's own `prototype` member, if it is an object."""
        prototype = self.scope.resolve(ObjectValue.PROTOTYPE, True)
        return prototype if isinstance(prototype, ObjectValue) else None

    def lookup(self, name):
        """Looks name up in this object's own scope, then iteratively along the prototype chain. Returns None if
        absent. A chain that loops back on itself ends the search.
        """
        seen = set()
        obj = self
        while obj is not None and id(obj) not in seen:
            value = obj.scope.resolve(name, True)
            if value is not None:
                return value
            seen.add(id(obj))
            obj = obj.prototype
        return None


NIL = Primitive(None)


def kind(value):
    """Returns the name of value's runtime kind."""
    if isinstance(value, Function):
        return "function"
    elif isinstance(value, ObjectValue):
        return "object"

    raw = value.value
    if raw is None:
        return "nil"
    elif isinstance(raw, bool):
        return "boolean"
    elif isinstance(raw, int):
        return "integer"
    elif isinstance(raw, Decimal):
        return "decimal"
    elif isinstance(raw, Character):
        return "character"
    elif isinstance(raw, str):
        return "string"
    elif isinstance(raw, list):
        return "list"
    raise ValueError(f"not a runtime value: {raw!r}")


def equals(left, right):
    """Structural equality: values of different kinds are never equal, lists compare element-wise, decimals by value
    and scale, functions and objects by identity.
    """
    left_kind = kind(left)
    if left_kind != kind(right):
        return False
    elif left_kind in ("function", "object"):
        return left is right
    elif left_kind == "list":
        return len(left.value) == len(right.value) and all(map(equals, left.value, right.value))
    elif left_kind == "decimal":
        return left.value == right.value and left.value.as_tuple().exponent == right.value.as_tuple().exponent
    return left.value == right.value


def display(value):
    """Returns the print form of value (used by print/log, the shell, and string concatenation)."""
    if isinstance(value, Function):
        return f"DEF {value.name}(...) DO ... END"
    elif isinstance(value, ObjectValue):
        return display_object(value)

    raw = value.value
    if raw is None:
        return "NIL"
    elif isinstance(raw, bool):
        return "TRUE" if raw else "FALSE"
    elif isinstance(raw, Decimal):
        return format(raw, "f")
    elif isinstance(raw, list):
        return "[" + ", ".join(display(element) for element in raw) + "]"
    return str(raw)


def display_object(obj):
    header = f"OBJECT {obj.name} DO" if obj.name else "OBJECT DO"

    members = []
    for name, member in obj.scope.bindings.items():
        if isinstance(member, Function):
            members.append(f"DEF {name}(...) DO ... END;")
        elif isinstance(member, ObjectValue):
            members.append(f"LET {name} = OBJECT {member.name or ''}".rstrip() + ";")  # avoids recursing into cycles
        else:
            members.append(f"LET {name} = {display(member)};")

    return " ".join([header] + members + ["END"])
